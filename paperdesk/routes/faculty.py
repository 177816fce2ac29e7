"""
Faculty Directory API Routes
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import get_db
from paperdesk.rbac import Identity, get_identity, require_admin
from paperdesk.schemas.faculty import FacultyProfileCreate
from paperdesk.services import faculty_directory

router = APIRouter(prefix="/api/faculty", tags=["faculty"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_profile(
    request: FacultyProfileCreate,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_admin)
):
    """
    Register a faculty member in the directory.

    **Roles:** Admin
    """
    profile = await faculty_directory.register_profile(
        db,
        caller,
        request.faculty_id,
        request.full_name,
        **request.details()
    )
    return profile.to_dict()


@router.get("")
async def list_profiles(
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_admin)
):
    profiles = await faculty_directory.list_profiles(db, caller)
    return {"faculty": [p.to_dict() for p in profiles], "count": len(profiles)}


@router.get("/{faculty_id}")
async def get_profile(
    faculty_id: str,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(get_identity)
):
    """
    Full profile for admins and the faculty member themselves; public summary
    for everyone else.
    """
    profile = await faculty_directory.get_profile(db, faculty_id)
    if caller.is_admin or caller.faculty_id == profile.faculty_id:
        return profile.to_dict()
    return faculty_directory.profile_summary(profile)
