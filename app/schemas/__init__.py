"""
Schemas module - Request/Response schemas for API endpoints.

Bodies are accepted in camelCase (or snake_case) and returned in camelCase,
matching the stored documents.
"""

from app.schemas.schemas import (
    ApplicationCreate, ApplicationStatusUpdate, InternshipCreate, InternshipUpdate,
    LoginRequest, StudentCreate, StudentProfileUpdate, TokenResponse
)

__all__ = [
    "ApplicationCreate", "ApplicationStatusUpdate", "InternshipCreate", "InternshipUpdate",
    "LoginRequest", "StudentCreate", "StudentProfileUpdate", "TokenResponse",
]
