"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.admin_routes import router as admin_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.auth_routes import router as auth_router
from app.api.routes.internship_routes import router as internship_router
from app.api.routes.mentor_routes import router as mentor_router
from app.api.routes.recruiter_routes import router as recruiter_router
from app.api.routes.student_routes import router as student_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(student_router)
api_router.include_router(mentor_router)
api_router.include_router(recruiter_router)
api_router.include_router(admin_router)
api_router.include_router(internship_router)
api_router.include_router(application_router)
