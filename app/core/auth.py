"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- Identity resolution: token -> actor (student / mentor / admin / recruiter)
- FastAPI dependencies for protected and optionally-authenticated routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings
from app.core.errors import Forbidden, Unauthenticated
from app.models.actors import Actor, actor_from_document
from app.models.entities import UserRole
from app.services.record_store import RecordStores, get_record_stores

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (missing header handled by us, not a 403)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def find_user(stores: RecordStores, email: str, role: Optional[str] = None) -> Optional[Tuple[UserRole, dict]]:
    """Look a user up by email across the four user collections."""
    roles = [UserRole(role)] if role else list(UserRole)
    for candidate in roles:
        doc = stores.users(candidate.value).find_one({"email": email})
        if doc:
            return candidate, doc
    return None


def resolve_token(token: str, stores: RecordStores) -> Actor:
    """
    Resolve a bearer credential to an actor.

    Raises Unauthenticated for bad, expired or orphaned tokens.
    """
    payload = decode_token(token)
    if not payload:
        raise Unauthenticated("Invalid or expired token")

    user_id, email, role = payload.get("sub"), payload.get("email"), payload.get("role")
    try:
        role = UserRole(role)
    except ValueError:
        raise Unauthenticated("Invalid token")

    doc = stores.users(role.value).find(user_id) if user_id else None
    if not doc or doc.get("email") != email:
        raise Unauthenticated("Invalid token")
    return actor_from_document(role, doc)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    stores: RecordStores = Depends(get_record_stores)
) -> Actor:
    """
    FastAPI dependency - Get current authenticated actor.

    Usage:
        @router.get("/protected")
        async def route(actor: Actor = Depends(get_current_actor)):
            return actor
    """
    if credentials is None:
        raise Unauthenticated("Access denied. No token provided.")
    return resolve_token(credentials.credentials, stores)


async def get_optional_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    stores: RecordStores = Depends(get_record_stores)
) -> Optional[Actor]:
    """Dependency - actor if a valid token is present, else None (anonymous)."""
    if credentials is None:
        return None
    try:
        return resolve_token(credentials.credentials, stores)
    except Unauthenticated:
        return None


def require_roles(*roles: str):
    """
    Dependency factory - Require one of the given roles.

    Usage:
        @router.post("", dependencies=[Depends(require_roles("admin"))])
    """
    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise Forbidden("Access denied. Insufficient permissions.")
        return actor
    return dependency
