"""
Scrutiny Workflow API Routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import get_db
from paperdesk.rbac import Identity, require_admin, require_faculty
from paperdesk.schemas.scrutiny import ScrutinizerAssign, ScrutinyRequestAnswer, ScrutinyVerdict
from paperdesk.services.scrutiny_workflow import ScrutinyService

router = APIRouter(prefix="/api/scrutiny", tags=["scrutiny"])


# =============================================================================
# Queues
# =============================================================================

@router.get("/assigned")
async def assigned_work(
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_faculty)
):
    """Accepted scrutiny requests awaiting the caller's verdict."""
    papers = await ScrutinyService.list_assigned_work(db, caller)
    return {"questionPapers": [p.to_dict() for p in papers], "count": len(papers)}


@router.get("/requests")
async def pending_requests(
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_faculty)
):
    """Scrutiny requests the caller has not yet accepted or declined."""
    papers = await ScrutinyService.list_pending_requests(db, caller)
    return {"questionPapers": [p.to_dict() for p in papers], "count": len(papers)}


# =============================================================================
# Transitions
# =============================================================================

@router.post("/{paper_id}/assign")
async def assign_scrutinizer(
    paper_id: int,
    request: ScrutinizerAssign,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_admin)
):
    """
    Route a question paper to a scrutinizer.

    **Roles:** Admin
    """
    paper = await ScrutinyService.assign_scrutinizer(
        db,
        paper_id=paper_id,
        scrutinizer_id=request.scrutinizer_id,
        scrutinizer_name=request.scrutinizer_name,
        caller=caller
    )
    return {"success": True, "message": "Scrutinizer assigned", "questionPaper": paper.to_dict()}


@router.post("/{paper_id}/respond")
async def respond_to_request(
    paper_id: int,
    request: ScrutinyRequestAnswer,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_faculty)
):
    """
    **Roles:** Assigned scrutinizer
    """
    paper = await ScrutinyService.respond_to_request(db, paper_id, request.response, caller)
    return {"success": True, "message": "Scrutiny request answered", "questionPaper": paper.to_dict()}


@router.post("/{paper_id}/verdict")
async def submit_verdict(
    paper_id: int,
    request: ScrutinyVerdict,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_faculty)
):
    """
    Record the final verdict with remarks.

    **Roles:** Assigned scrutinizer

    Approved and rejected verdicts are terminal.
    """
    paper = await ScrutinyService.submit_verdict(db, paper_id, request.remarks, request.verdict, caller)
    return {"success": True, "message": "Scrutiny verdict recorded", "questionPaper": paper.to_dict()}
