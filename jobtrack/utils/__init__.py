# Utilities package
from .status_mapper import derive_status, derive_application_status
from .pagination import calculate_offset, calculate_total_pages, PaginationMeta

__all__ = [
    "derive_status",
    "derive_application_status",
    "calculate_offset",
    "calculate_total_pages",
    "PaginationMeta",
]
