from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from jobtrack.core.config import settings
from jobtrack.core.errors import AppError, app_error_handler
from jobtrack.core.logging import bind_request_context, configure_logging
from jobtrack.api.v1 import applications, companies, stage_templates
import uuid


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.app_env)
    yield


app = FastAPI(
    title="Jobtrack API",
    description="Job application tracker: applications, stage lifecycle and companies",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Bind request id (and caller id, if present) to every log line of the request"""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    bind_request_context(request_id, request.headers.get(settings.user_id_header))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Include API routers
app.include_router(applications.router, prefix="/api/v1/applications", tags=["Applications"])  # Applications, stages, comments
app.include_router(stage_templates.router, prefix="/api/v1/stage-templates", tags=["Stage Templates"])
app.include_router(companies.router, prefix="/api/v1/companies", tags=["Companies"])  # Read-only, with derived status


@app.get("/healthz")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Jobtrack API", "docs": "/docs"}
