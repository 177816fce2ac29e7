"""
Assignment Registry API Routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import get_db
from paperdesk.rbac import Identity, get_identity, require_admin
from paperdesk.schemas.assignments import AssignmentCreate
from paperdesk.services import assignment_registry

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_assignment(
    request: AssignmentCreate,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_admin)
):
    """
    Offer a subject/duty to a faculty member.

    **Roles:** Admin

    The faculty name must match the directory record.
    """
    assignment = await assignment_registry.create_assignment(
        db,
        caller,
        faculty_id=request.faculty_id,
        faculty_name=request.faculty_name,
        subject_code=request.subject_code,
        subject_name=request.subject_name,
        regulation=request.regulation,
        role=request.role,
        deadline=request.deadline_date,
    )
    return assignment.to_dict()


@router.get("")
async def list_assignments(
    faculty_id: Optional[str] = Query(None, alias="facultyId"),
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(get_identity)
):
    assignments = await assignment_registry.list_assignments(db, caller, faculty_id)
    return {"assignments": [a.to_dict() for a in assignments], "count": len(assignments)}


@router.delete("")
async def remove_assignment(
    faculty_id: Optional[str] = Query(None, alias="facultyId"),
    subject_code: Optional[str] = Query(None, alias="subjectCode"),
    role: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_admin)
):
    """
    Remove an assignment and any question paper submitted against it.

    **Roles:** Admin
    """
    deleted = await assignment_registry.remove_assignment(db, caller, faculty_id, subject_code, role)
    return {"deletedCount": deleted}
