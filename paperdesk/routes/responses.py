"""
Response Workflow API Routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import get_db
from paperdesk.rbac import Identity, get_identity, require_faculty
from paperdesk.schemas.assignments import ResponseSubmit
from paperdesk.services import response_workflow

router = APIRouter(prefix="/api/responses", tags=["responses"])


@router.get("/pending")
async def pending_response(
    faculty_id: Optional[str] = Query(None, alias="facultyId"),
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(get_identity)
):
    """Oldest assignment awaiting a yes/no from the faculty member."""
    assignment = await response_workflow.query_pending_response(db, caller, faculty_id)
    if assignment is None:
        return {"prompt": False}
    return {"prompt": True, "assignment": assignment.to_dict()}


@router.post("")
async def submit_response(
    request: ResponseSubmit,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_faculty)
):
    """
    Accept (yes) or decline (no) an assignment. One-time decision.

    **Roles:** Faculty (own assignments only)
    """
    assignment = await response_workflow.submit_response(
        db,
        caller,
        faculty_id=request.faculty_id or caller.faculty_id,
        subject_code=request.subject_code,
        role=request.role,
        decision=request.decision,
    )
    return {
        "success": True,
        "message": "Response recorded",
        "assignment": assignment.to_dict()
    }
