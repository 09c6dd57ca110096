"""
Job lookups. Jobs are owned and edited elsewhere; the stage lifecycle only
reads them to name applications and to link applications to companies.
"""

from __future__ import annotations
import logging

from jobtrack.models.job import Job
from .base import UserScopedRepository

logger = logging.getLogger(__name__)


class JobRepository(UserScopedRepository[Job]):
    """Repository for Job model."""

    def __init__(self):
        """Initialize with Job model."""
        super().__init__(Job)
