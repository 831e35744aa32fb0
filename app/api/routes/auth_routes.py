"""
Authentication Routes

POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
GET /auth/verify - Check a token is still valid
POST /auth/logout - Client-side token removal
"""

from fastapi import APIRouter, Depends

from app.core.auth import create_access_token, find_user, get_current_actor, verify_password
from app.core.config import get_settings
from app.core.errors import Unauthenticated
from app.models.actors import Actor
from app.schemas.schemas import LoginRequest, MessageResponse, TokenResponse, VerifyResponse
from app.services.record_store import RecordStores, get_record_stores

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _public_user(actor: Actor) -> dict:
    user = actor.model_dump(exclude={"profile"})
    if getattr(actor, "profile", None) is not None:
        user.update(actor.profile.model_dump(mode="json", by_alias=True))
    return user


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, stores: RecordStores = Depends(get_record_stores)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    found = find_user(stores, request.email, request.role)
    if not found:
        raise Unauthenticated("Invalid credentials")
    role, doc = found

    if not get_settings().demo_login:
        password_hash = doc.get("passwordHash")
        if not password_hash or not verify_password(request.password, password_hash):
            raise Unauthenticated("Invalid credentials")

    token = create_access_token(data={"sub": doc["id"], "email": doc["email"], "role": role.value})
    user = {k: v for k, v in doc.items() if k != "passwordHash"}
    user["role"] = role.value
    return TokenResponse(token=token, user=user)


@router.get("/me")
async def get_me(actor: Actor = Depends(get_current_actor)):
    """Get current authenticated user's info."""
    return {"user": _public_user(actor)}


@router.get("/verify", response_model=VerifyResponse)
async def verify(actor: Actor = Depends(get_current_actor)):
    return VerifyResponse(valid=True, user=_public_user(actor))


@router.post("/logout", response_model=MessageResponse)
async def logout():
    return MessageResponse(message="Logout successful. Please remove token from client.")
