"""
Faculty Directory Service

Canonical faculty profiles. The workflow reads them to check that an
assignment target exists and that the supplied display name matches.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import atomic
from paperdesk.errors import (
    ConflictError, ErrorCode, NotFoundError, ValidationError, require_fields
)
from paperdesk.orm.faculty_profile import FacultyProfile
from paperdesk.rbac import Identity, ensure_admin

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "username", "dob", "address", "campus", "campus_name", "email", "phone",
    "alt_phone", "bank_account", "ifsc", "micr", "branch_name", "branch_address",
    "qualification", "expertise",
)


def names_match(supplied: Optional[str], recorded: Optional[str]) -> bool:
    """Display names match when equal after trimming and whitespace folding."""
    if supplied is None or recorded is None:
        return False
    return " ".join(supplied.split()) == " ".join(recorded.split())


async def find_profile(db: AsyncSession, faculty_id: str) -> Optional[FacultyProfile]:
    result = await db.execute(
        select(FacultyProfile).where(FacultyProfile.faculty_id == faculty_id)
    )
    return result.scalar_one_or_none()


async def get_profile(db: AsyncSession, faculty_id: str) -> FacultyProfile:
    profile = await find_profile(db, faculty_id)
    if profile is None:
        raise NotFoundError("Faculty", faculty_id, ErrorCode.FACULTY_NOT_FOUND)
    return profile


async def verify_identity(db: AsyncSession, faculty_id: str, full_name: str) -> FacultyProfile:
    """
    Confirm that faculty_id is in the directory under full_name.

    Raises:
        NotFoundError: no such faculty
        ValidationError: the name does not match the directory record
    """
    profile = await get_profile(db, faculty_id)
    if not names_match(full_name, profile.full_name):
        logger.warning(f"Identity mismatch for {faculty_id}: supplied '{full_name}'")
        raise ValidationError(
            "Identity mismatch: faculty name does not match the directory record",
            code=ErrorCode.IDENTITY_MISMATCH,
            details={"facultyId": faculty_id}
        )
    return profile


async def register_profile(
    db: AsyncSession,
    caller: Identity,
    faculty_id: str,
    full_name: str,
    **details: Any
) -> FacultyProfile:
    """Add a faculty profile to the directory (admin only)."""
    ensure_admin(caller, "faculty registration")
    require_fields({"facultyId": faculty_id, "fullName": full_name}, "faculty registration")

    unknown = set(details) - set(PROFILE_FIELDS)
    if unknown:
        raise ValidationError(
            f"Unknown profile fields: {', '.join(sorted(unknown))}",
            code=ErrorCode.INVALID_INPUT
        )

    async with atomic(db, "register_profile"):
        profile = FacultyProfile(
            faculty_id=faculty_id.strip(),
            full_name=" ".join(full_name.split()),
            **details
        )
        db.add(profile)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(
                f"Faculty '{faculty_id}' is already registered",
                ErrorCode.DUPLICATE_FACULTY
            )

    logger.info(f"Registered faculty profile {profile.faculty_id}")
    return profile


async def list_profiles(db: AsyncSession, caller: Identity) -> List[FacultyProfile]:
    ensure_admin(caller, "faculty directory listing")
    result = await db.execute(
        select(FacultyProfile).order_by(FacultyProfile.faculty_id)
    )
    return list(result.scalars().all())


def profile_summary(profile: FacultyProfile) -> Dict[str, Any]:
    """Public subset of a profile (no contact or bank details)."""
    return {
        "facultyId": profile.faculty_id,
        "fullName": profile.full_name,
        "campusName": profile.campus_name,
        "qualification": profile.qualification,
        "expertise": profile.expertise,
    }
