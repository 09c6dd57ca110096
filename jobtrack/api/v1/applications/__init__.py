"""
Applications API module

This module organizes application-related endpoints into logical sub-modules:
- application_crud: Application create/read/update/delete
- application_stages: Stage history (append, update, complete, delete)
- application_comments: Application and stage comments
"""

from fastapi import APIRouter
from .application_crud import router as crud_router
from .application_stages import router as stages_router
from .application_comments import router as comments_router

# Create a single router that combines all application endpoints
router = APIRouter()

# Include all sub-routers
router.include_router(crud_router)
router.include_router(stages_router)
router.include_router(comments_router)
