# Repositories package
from .base import BaseRepository, UserScopedRepository
from .application_repository import ApplicationRepository
from .application_stage_repository import ApplicationStageRepository
from .stage_template_repository import StageTemplateRepository
from .company_repository import CompanyRepository, CompanyAggregates
from .job_repository import JobRepository
from .resume_repository import ResumeRepository
from .comment_repository import CommentRepository

__all__ = [
    "BaseRepository",
    "UserScopedRepository",
    "ApplicationRepository",
    "ApplicationStageRepository",
    "StageTemplateRepository",
    "CompanyRepository",
    "CompanyAggregates",
    "JobRepository",
    "ResumeRepository",
    "CommentRepository",
]
