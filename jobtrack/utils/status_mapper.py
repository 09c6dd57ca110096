"""
Status utilities for applications, stages and derived summaries.

Three independent vocabularies live here:

Application status (stored, coarse outcome label):
- active, on_hold, rejected, offer, archived

Stage status (stored, per stage instance):
- pending, active, completed, skipped, cancelled

Derived status (never stored, recomputed on every read):
- idle: nothing in flight
- active: at least one application is active
- interviewing: some application has progressed past its first stage
"""

from typing import Optional

from jobtrack.models.application import ApplicationStatus
from jobtrack.models.application_stage import StageStatus
from jobtrack.models.company import DerivedStatus


def derive_status(
    applications_count: int,
    active_applications_count: int,
    max_stage_count: int
) -> str:
    """
    Derive the summary status from aggregated counts.

    Rules are evaluated in order and the first match wins, so an entity with
    a multi-stage application is "interviewing" whatever the coarse status
    of that application is.

    Args:
        applications_count: Distinct applications in scope
        active_applications_count: Those whose application status is "active"
        max_stage_count: Largest number of stages any of them has

    Returns:
        "idle", "active" or "interviewing"

    Example:
        >>> derive_status(0, 0, 0)
        'idle'
        >>> derive_status(1, 0, 2)
        'interviewing'
        >>> derive_status(3, 1, 1)
        'active'
    """
    if applications_count == 0:
        return DerivedStatus.IDLE.value
    if max_stage_count > 1:
        return DerivedStatus.INTERVIEWING.value
    if active_applications_count > 0:
        return DerivedStatus.ACTIVE.value
    return DerivedStatus.IDLE.value


def derive_application_status(application_status: str, stage_count: int) -> str:
    """
    Derived status of a single application, treated as a rollup of one.

    Example:
        >>> derive_application_status("active", 1)
        'active'
        >>> derive_application_status("on_hold", 3)
        'interviewing'
    """
    active = 1 if application_status == ApplicationStatus.ACTIVE.value else 0
    return derive_status(1, active, stage_count)


def normalize_stage_status(value: Optional[str]) -> str:
    """
    Validate a stage status supplied by a caller.

    Surrounding whitespace is ignored; the comparison is case-sensitive
    because stored values are lowercase.

    Raises:
        ValueError: If value is None, empty or not one of the five stage statuses
    """
    if value is None or not value.strip():
        raise ValueError("stage status cannot be None or empty")
    value = value.strip()
    if value not in get_valid_stage_statuses():
        raise ValueError(f"Unknown stage status: {value}")
    return value


def normalize_application_status(value: Optional[str]) -> str:
    """
    Validate an application status supplied by a caller.

    Raises:
        ValueError: If value is None, empty or not a known application status
    """
    if value is None or not value.strip():
        raise ValueError("application status cannot be None or empty")
    value = value.strip()
    if value not in get_valid_application_statuses():
        raise ValueError(f"Unknown application status: {value}")
    return value


def get_valid_stage_statuses() -> list[str]:
    """List of all valid stage statuses."""
    return [s.value for s in StageStatus]


def get_valid_application_statuses() -> list[str]:
    """List of all valid application statuses."""
    return [s.value for s in ApplicationStatus]
