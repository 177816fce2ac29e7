"""
paperdesk/routes/__init__.py
Route registration
"""
from fastapi import APIRouter

from paperdesk.routes import assignments, faculty, question_papers, responses, scrutiny

router = APIRouter()

router.include_router(faculty.router)
router.include_router(assignments.router)
router.include_router(responses.router)
router.include_router(question_papers.router)
router.include_router(scrutiny.router)
