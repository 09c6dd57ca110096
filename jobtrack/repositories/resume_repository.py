from __future__ import annotations

from jobtrack.models.resume import Resume
from .base import UserScopedRepository


class ResumeRepository(UserScopedRepository[Resume]):
    """Repository for Resume model (lookup only; files live in object storage)."""

    def __init__(self):
        """Initialize with Resume model."""
        super().__init__(Resume)
