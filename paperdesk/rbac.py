"""
paperdesk/rbac.py
Identity context and role-based access control.

The caller's identity is authenticated upstream (login service) and reaches
this service as a signed bearer token. It is decoded here into an explicit
Identity value that every workflow operation receives as an argument;
nothing in the workflow reads identity from ambient state.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from paperdesk.config.settings import settings
from paperdesk.errors import ErrorCode, ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class Role(str, Enum):
    """Caller roles"""
    ADMIN = "admin"
    FACULTY = "faculty"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller: role plus faculty identifier for faculty callers."""
    role: Role
    faculty_id: Optional[str] = None
    username: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def display(self) -> str:
        return self.username or self.faculty_id or self.role.value


# ================= TOKEN UTILS =================

def create_access_token(
    role: Role,
    faculty_id: Optional[str] = None,
    username: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed identity token (used by the CLI and tests)"""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": username or faculty_id or role.value,
        "role": Role(role).value,
        "faculty_id": faculty_id,
        "exp": expire,
        "type": "access"
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a token; None when invalid or expired"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def identity_from_claims(payload: dict) -> Identity:
    """Build an Identity from token claims, rejecting malformed ones"""
    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid or expired token", ErrorCode.AUTH_INVALID)
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise UnauthorizedError("Token carries an unknown role", ErrorCode.AUTH_INVALID)

    faculty_id = payload.get("faculty_id")
    if role == Role.FACULTY and not faculty_id:
        raise UnauthorizedError("Faculty token carries no faculty id", ErrorCode.AUTH_INVALID)

    return Identity(role=role, faculty_id=faculty_id, username=payload.get("sub"))


# ================= AUTH DEPENDENCIES =================

async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """
    Resolve the caller's Identity from the Authorization header.
    Returns 401 if the token is missing, invalid or expired.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid or expired token", ErrorCode.AUTH_INVALID)

    return identity_from_claims(payload)


async def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    ensure_admin(identity, "this action")
    return identity


async def require_faculty(identity: Identity = Depends(get_identity)) -> Identity:
    ensure_faculty(identity, "this action")
    return identity


# ================= AUTHORIZATION CHECKS =================

def ensure_admin(caller: Identity, action: str) -> None:
    if not caller.is_admin:
        logger.warning(f"Access denied: {caller.display} ({caller.role.value}) attempted {action}")
        raise ForbiddenError(
            f"Only administrators may perform {action}",
            ErrorCode.PERMISSION_DENIED,
            details={"current_role": caller.role.value}
        )


def ensure_faculty(caller: Identity, action: str) -> None:
    if caller.role != Role.FACULTY or not caller.faculty_id:
        logger.warning(f"Access denied: {caller.display} ({caller.role.value}) attempted {action}")
        raise ForbiddenError(
            f"Only faculty members may perform {action}",
            ErrorCode.PERMISSION_DENIED,
            details={"current_role": caller.role.value}
        )


def ensure_same_faculty(caller: Identity, faculty_id: str, resource_name: str = "record") -> None:
    """Faculty callers may only act on their own records; admins pass."""
    if caller.is_admin:
        return
    if caller.faculty_id != faculty_id:
        logger.warning(f"Ownership violation: {caller.faculty_id} attempted to act on {resource_name} of {faculty_id}")
        raise ForbiddenError(
            f"This {resource_name} does not belong to you",
            ErrorCode.OWNERSHIP_VIOLATION
        )
