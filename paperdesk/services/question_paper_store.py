"""
Question Paper Store Service

Owns QuestionPaper creation and the question_paper_status side effect on
assignments. Submission inserts the paper and advances every matching
assignment to SUBMITTED inside one transaction: either both writes land or
neither does.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import atomic
from paperdesk.errors import (
    ConflictError, ErrorCode, ForbiddenError, NotFoundError, ValidationError, require_fields
)
from paperdesk.orm.assignment import (
    Assignment, AssignmentResponse, PaperStatus, PAPER_STATUS_TRANSITIONS, normalize_key, normalize_role
)
from paperdesk.orm.question_paper import QuestionPaper, ScrutinyStatus, SECTION_SIZES
from paperdesk.rbac import Identity, ensure_faculty, ensure_same_faculty
from paperdesk.services.assignment_registry import find_assignments, matching
from paperdesk.services.paper_renderer import render_text

logger = logging.getLogger(__name__)


@dataclass
class ExamMetadata:
    """Header fields printed on the paper."""
    exam_name: str
    department: str
    semester: str
    subject_title: str
    regulation: str
    time: str
    max_marks: int

    def as_fields(self) -> Dict[str, object]:
        return {
            "examName": self.exam_name,
            "department": self.department,
            "semester": self.semester,
            "subjectTitle": self.subject_title,
            "regulation": self.regulation,
            "time": self.time,
            "maxMarks": self.max_marks,
        }


def clean_section(label: str, questions: Optional[Sequence[str]]) -> List[str]:
    """Validate one section's question list and return it trimmed, order preserved."""
    field = f"part{label}"
    if not questions:
        raise ValidationError(
            f"{field} must contain at least one question",
            code=ErrorCode.MISSING_FIELD,
            details={"fields": [field]}
        )
    cleaned = []
    for position, text in enumerate(questions, start=1):
        if not isinstance(text, str) or not text.strip():
            raise ValidationError(
                f"{field} question {position} is empty",
                code=ErrorCode.INVALID_INPUT,
                details={"field": field, "position": position}
            )
        cleaned.append(text.strip())
    if len(cleaned) > SECTION_SIZES[label]:
        raise ValidationError(
            f"{field} holds at most {SECTION_SIZES[label]} questions, got {len(cleaned)}",
            code=ErrorCode.INVALID_INPUT,
            details={"field": field, "max": SECTION_SIZES[label]}
        )
    return cleaned


def status_predecessors(target: PaperStatus) -> List[str]:
    """Every status from which target is reachable by forward moves."""
    found = []
    frontier = [target]
    while frontier:
        current = frontier.pop()
        for status, targets in PAPER_STATUS_TRANSITIONS.items():
            if current in targets and status.value not in found:
                found.append(status.value)
                frontier.append(status)
    return found


async def move_matching_status(
    db: AsyncSession,
    faculty_id: str,
    subject_code: str,
    role: str,
    allowed_from: Sequence[str],
    new_status: PaperStatus
) -> int:
    """Conditional UPDATE on the uniqueness key; returns the number of rows moved."""
    result = await db.execute(
        update(Assignment)
        .where(
            *matching(faculty_id, subject_code, role),
            Assignment.question_paper_status.in_(list(allowed_from))
        )
        .values(question_paper_status=new_status.value, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def advance_paper_status(
    db: AsyncSession,
    faculty_id: str,
    subject_code: str,
    role: str,
    new_status: PaperStatus
) -> int:
    """
    Move question_paper_status forward on every assignment matching the key.

    Only rows whose current status may legally precede new_status are touched,
    so the status never regresses. Must run inside the caller's transaction.

    Raises:
        ConflictError: no matching assignment could take the transition
    """
    allowed_from = [
        status.value for status, targets in PAPER_STATUS_TRANSITIONS.items()
        if new_status in targets
    ]
    moved = await move_matching_status(db, faculty_id, subject_code, role, allowed_from, new_status)
    if moved == 0:
        raise ConflictError(
            f"Cannot move question paper status to '{new_status.value}' "
            f"for {faculty_id}/{subject_code}/{normalize_role(role)}",
            ErrorCode.STATE_TRANSITION_INVALID,
            details={"allowedFrom": allowed_from}
        )
    return moved


async def submit_question_paper(
    db: AsyncSession,
    caller: Identity,
    faculty_id: str,
    subject_code: str,
    role: str,
    metadata: ExamMetadata,
    part_a: Sequence[str],
    part_b: Sequence[str],
    part_c: Sequence[str],
) -> QuestionPaper:
    """
    Store a question paper for an accepted assignment.

    Raises:
        ForbiddenError: caller is not the assigned faculty member
        ValidationError: missing metadata or empty/oversized question sections
        NotFoundError: no assignment for (faculty_id, subject_code, role)
        ConflictError: assignment not accepted, or a paper was already submitted
    """
    ensure_faculty(caller, "question paper submission")
    faculty_id = normalize_key(faculty_id)
    subject_code = normalize_key(subject_code)
    ensure_same_faculty(caller, faculty_id, "assignment")
    require_fields(
        {"subjectCode": subject_code, "role": role, **metadata.as_fields()},
        "question paper"
    )
    sections = {
        "A": clean_section("A", part_a),
        "B": clean_section("B", part_b),
        "C": clean_section("C", part_c),
    }
    if not isinstance(metadata.max_marks, int) or metadata.max_marks <= 0:
        raise ValidationError(
            "maxMarks must be a positive integer",
            code=ErrorCode.INVALID_INPUT,
            details={"field": "maxMarks", "value": metadata.max_marks}
        )

    async with atomic(db, "submit_question_paper"):
        assignments = await find_assignments(db, faculty_id, subject_code, role)
        if not assignments:
            raise NotFoundError(
                "Assignment",
                f"{faculty_id}/{subject_code}/{normalize_role(role)}",
                ErrorCode.ASSIGNMENT_NOT_FOUND
            )
        accepted = [a for a in assignments if a.response == AssignmentResponse.YES.value]
        if not accepted:
            raise ConflictError(
                "Question papers can only be submitted for accepted assignments",
                ErrorCode.ASSIGNMENT_NOT_ACCEPTED
            )

        paper = QuestionPaper(
            assignment_id=accepted[0].id,
            faculty_id=faculty_id,
            role=normalize_role(role),
            exam_name=metadata.exam_name.strip(),
            department=metadata.department.strip(),
            semester=str(metadata.semester).strip(),
            subject_code=subject_code,
            subject_title=metadata.subject_title.strip(),
            regulation=metadata.regulation.strip(),
            time=metadata.time.strip(),
            max_marks=metadata.max_marks,
            part_a=sections["A"],
            part_b=sections["B"],
            part_c=sections["C"],
        )
        db.add(paper)
        try:
            await db.flush()
        except IntegrityError:
            logger.warning(f"Duplicate submission rejected for {faculty_id}/{subject_code}/{normalize_role(role)}")
            raise ConflictError(
                "A question paper was already submitted for this assignment",
                ErrorCode.DUPLICATE_SUBMISSION
            )

        updated = await advance_paper_status(db, faculty_id, subject_code, role, PaperStatus.SUBMITTED)

    logger.info(f"Question paper {paper.id} submitted by {faculty_id} for {subject_code}; {updated} assignment(s) marked submitted")
    return paper


async def find_question_paper(db: AsyncSession, paper_id: int) -> QuestionPaper:
    result = await db.execute(
        select(QuestionPaper)
        .where(QuestionPaper.id == paper_id)
        .execution_options(populate_existing=True)
    )
    paper = result.scalar_one_or_none()
    if paper is None:
        raise NotFoundError("Question paper", paper_id, ErrorCode.QUESTION_PAPER_NOT_FOUND)
    return paper


def ensure_can_view(caller: Identity, paper: QuestionPaper) -> None:
    """Admins, the submitting faculty and the assigned scrutinizer may read a paper."""
    if caller.is_admin or paper.is_visible_to(caller.faculty_id):
        return
    logger.warning(f"Access denied: {caller.display} attempted to read question paper {paper.id}")
    raise ForbiddenError(
        "You do not have access to this question paper",
        ErrorCode.OWNERSHIP_VIOLATION
    )


async def get_question_paper(db: AsyncSession, caller: Identity, paper_id: int) -> QuestionPaper:
    paper = await find_question_paper(db, paper_id)
    ensure_can_view(caller, paper)
    return paper


async def render_question_paper(db: AsyncSession, caller: Identity, paper_id: int) -> str:
    paper = await get_question_paper(db, caller, paper_id)
    return render_text(paper)


async def list_question_papers(db: AsyncSession, caller: Identity) -> List[QuestionPaper]:
    """All papers for admins; a faculty member's own submissions otherwise. Newest first."""
    query = (
        select(QuestionPaper)
        .order_by(QuestionPaper.created_at.desc(), QuestionPaper.id.desc())
        .execution_options(populate_existing=True)
    )
    if not caller.is_admin:
        query = query.where(QuestionPaper.faculty_id == caller.faculty_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def reconcile_paper_status(db: AsyncSession) -> int:
    """
    Idempotent repair pass: bring question_paper_status on every assignment
    sharing a stored paper's (faculty_id, subject_code, role) key up to the
    status that paper implies. Only forward moves are applied; rows already
    at or past the target are left alone.

    Returns:
        Number of assignments corrected
    """
    expected = {
        ScrutinyStatus.PENDING.value: PaperStatus.SUBMITTED,
        ScrutinyStatus.APPROVED.value: PaperStatus.APPROVED,
        ScrutinyStatus.REJECTED.value: PaperStatus.REJECTED,
    }
    corrected = 0

    async with atomic(db, "reconcile_paper_status"):
        papers = (await db.execute(
            select(QuestionPaper)
            .order_by(QuestionPaper.id)
            .execution_options(populate_existing=True)
        )).scalars().all()

        for paper in papers:
            target = expected[paper.scrutiny_status]
            moved = await move_matching_status(
                db,
                paper.faculty_id,
                paper.subject_code,
                paper.role,
                status_predecessors(target),
                target
            )
            if moved:
                corrected += moved
                logger.info(
                    f"Reconciled {moved} assignment(s) for {paper.faculty_id}/{paper.subject_code}/"
                    f"{normalize_role(paper.role)} -> {target.value}"
                )

    logger.info(f"Reconciliation checked {len(papers)} paper(s), corrected {corrected} assignment(s)")
    return corrected
