from fastapi import HTTPException, Request, status

from jobtrack.core.config import settings
from jobtrack.services.application_service import ApplicationService
from jobtrack.services.comment_service import CommentService
from jobtrack.services.company_service import CompanyService
from jobtrack.services.stage_service import StageService
from jobtrack.services.stage_template_service import StageTemplateService
import uuid


async def get_current_user_id(request: Request) -> uuid.UUID:
    """
    Identity of the caller, as verified and forwarded by the gateway.

    Authentication happens upstream; this service only trusts the user id
    header and rejects requests without a well-formed one.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing or invalid user identity",
    )

    raw_user_id = request.headers.get(settings.user_id_header)
    if not raw_user_id:
        raise credentials_exception

    try:
        user_id = uuid.UUID(raw_user_id.strip())
    except ValueError:
        raise credentials_exception

    request.state.user_id = user_id
    return user_id


# Service providers, overridable in tests through app.dependency_overrides
def get_stage_service() -> StageService:
    return StageService()


def get_stage_template_service() -> StageTemplateService:
    return StageTemplateService()


def get_application_service() -> ApplicationService:
    return ApplicationService()


def get_company_service() -> CompanyService:
    return CompanyService()


def get_comment_service() -> CommentService:
    return CommentService()
