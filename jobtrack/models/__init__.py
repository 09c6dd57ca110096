from .application import Application, ApplicationStatus
from .application_stage import ApplicationStage, StageStatus
from .stage_template import StageTemplate
from .company import Company, DerivedStatus
from .job import Job
from .resume import Resume
from .comment import Comment

__all__ = [
    "Application", "ApplicationStatus", "ApplicationStage", "StageStatus",
    "StageTemplate", "Company", "DerivedStatus", "Job", "Resume", "Comment"
]
