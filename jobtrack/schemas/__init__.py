from .stage import (
    StageTemplate, StageTemplateCreate, StageTemplateUpdate, StageTemplateList,
    ApplicationStage, AddStageRequest, UpdateStageRequest, CompleteStageRequest
)
from .company import CompanyBasic, CompanyWithStatus, CompanyList
from .comment import Comment, CommentCreate
from .application import (
    Application, ApplicationDetail, ApplicationList, ApplicationCreate, ApplicationUpdate,
    JobNested, ResumeNested
)

__all__ = [
    "StageTemplate", "StageTemplateCreate", "StageTemplateUpdate", "StageTemplateList",
    "ApplicationStage", "AddStageRequest", "UpdateStageRequest", "CompleteStageRequest",
    "CompanyBasic", "CompanyWithStatus", "CompanyList",
    "Comment", "CommentCreate",
    "Application", "ApplicationDetail", "ApplicationList", "ApplicationCreate", "ApplicationUpdate",
    "JobNested", "ResumeNested",
]
