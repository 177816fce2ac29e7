"""
Question Paper API Routes
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import get_db
from paperdesk.rbac import Identity, get_identity, require_faculty
from paperdesk.schemas.question_papers import QuestionPaperSubmit
from paperdesk.services import question_paper_store
from paperdesk.services.paper_renderer import download_filename, render_text

router = APIRouter(prefix="/api/question-papers", tags=["question-papers"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_question_paper(
    request: QuestionPaperSubmit,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(require_faculty)
):
    """
    Submit the question paper for an accepted assignment.

    **Roles:** Faculty (own assignments only)

    Marks the matching assignment(s) as submitted in the same transaction.
    """
    paper = await question_paper_store.submit_question_paper(
        db,
        caller,
        faculty_id=request.faculty_id or caller.faculty_id,
        subject_code=request.subject_code,
        role=request.role,
        metadata=request.metadata(),
        part_a=request.part_a,
        part_b=request.part_b,
        part_c=request.part_c,
    )
    return paper.to_dict()


@router.get("")
async def list_question_papers(
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(get_identity)
):
    papers = await question_paper_store.list_question_papers(db, caller)
    return {"questionPapers": [p.to_dict() for p in papers], "count": len(papers)}


@router.get("/{paper_id}")
async def get_question_paper(
    paper_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(get_identity)
):
    paper = await question_paper_store.get_question_paper(db, caller, paper_id)
    return paper.to_dict()


@router.get("/{paper_id}/download", response_class=PlainTextResponse)
async def download_question_paper(
    paper_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Identity = Depends(get_identity)
):
    """Plain-text rendering of the paper as an attachment."""
    paper = await question_paper_store.get_question_paper(db, caller, paper_id)
    return PlainTextResponse(
        render_text(paper),
        headers={"Content-Disposition": f'attachment; filename="{download_filename(paper)}"'}
    )
