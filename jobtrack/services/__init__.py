from .stage_events import StageEvent, StageEventRecorder, LoggingStageEventRecorder
from .stage_service import StageService
from .stage_template_service import StageTemplateService
from .application_service import ApplicationService
from .company_service import CompanyService
from .comment_service import CommentService

__all__ = [
    "StageEvent",
    "StageEventRecorder",
    "LoggingStageEventRecorder",
    "StageService",
    "StageTemplateService",
    "ApplicationService",
    "CompanyService",
    "CommentService",
]
