"""
Response Workflow Service

Faculty-facing acceptance state of an assignment.

State machine (per assignment):
    UNRESPONDED -> ACCEPTED  (response = "yes", is_assigned = true)
    UNRESPONDED -> DECLINED  (response = "no",  is_assigned = false)
Both outcomes are terminal.

The transition is a single conditional UPDATE guarded by `response IS NULL`,
so of two concurrent responses exactly one changes a row; the other sees a
rowcount of 0 and is reported as ConflictError.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import atomic
from paperdesk.errors import ConflictError, ErrorCode, NotFoundError, ValidationError, require_fields
from paperdesk.orm.assignment import Assignment, AssignmentResponse, normalize_key, normalize_role
from paperdesk.rbac import Identity, ensure_faculty, ensure_same_faculty
from paperdesk.services.assignment_registry import find_assignments, matching

logger = logging.getLogger(__name__)


def parse_decision(decision) -> AssignmentResponse:
    if isinstance(decision, AssignmentResponse):
        return decision
    try:
        return AssignmentResponse(str(decision).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid decision '{decision}'. Must be one of: yes, no",
            code=ErrorCode.INVALID_INPUT,
            details={"field": "decision", "allowed": [r.value for r in AssignmentResponse]}
        )


async def query_pending_response(
    db: AsyncSession,
    caller: Identity,
    faculty_id: Optional[str] = None
) -> Optional[Assignment]:
    """
    Oldest assignment still awaiting the faculty member's response, if any.

    Faculty callers default to themselves; administrators must name the
    faculty member.

    Raises:
        ValidationError: no faculty id given and the caller has none
        ForbiddenError: faculty caller asked about someone else
    """
    faculty_id = normalize_key(faculty_id) or caller.faculty_id
    require_fields({"facultyId": faculty_id}, "pending response lookup")
    ensure_same_faculty(caller, faculty_id, "assignment")

    result = await db.execute(
        select(Assignment)
        .where(
            Assignment.faculty_id == faculty_id,
            Assignment.response.is_(None)
        )
        .order_by(Assignment.created_at, Assignment.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def submit_response(
    db: AsyncSession,
    caller: Identity,
    faculty_id: str,
    subject_code: str,
    role: str,
    decision
) -> Assignment:
    """
    Record the faculty member's one-time decision on an assignment.

    Raises:
        ForbiddenError: caller is not the assigned faculty member
        ValidationError: missing fields or decision outside {yes, no}
        NotFoundError: no matching assignment
        ConflictError: the assignment was already responded to
    """
    ensure_faculty(caller, "assignment response")
    faculty_id = normalize_key(faculty_id)
    subject_code = normalize_key(subject_code)
    ensure_same_faculty(caller, faculty_id, "assignment")
    require_fields({"subjectCode": subject_code, "role": role, "decision": decision}, "response")
    choice = parse_decision(decision)

    async with atomic(db, "submit_response"):
        result = await db.execute(
            update(Assignment)
            .where(*matching(faculty_id, subject_code, role), Assignment.response.is_(None))
            .values(
                response=choice.value,
                is_assigned=(choice == AssignmentResponse.YES),
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        assignments = await find_assignments(db, faculty_id, subject_code, role)
        if not assignments:
            raise NotFoundError(
                "Assignment",
                f"{faculty_id}/{subject_code}/{normalize_role(role)}",
                ErrorCode.ASSIGNMENT_NOT_FOUND
            )
        if result.rowcount == 0:
            logger.warning(f"Repeated response rejected for {faculty_id}/{subject_code}/{normalize_role(role)}")
            raise ConflictError(
                "Already responded to this assignment",
                ErrorCode.ALREADY_RESPONDED,
                details={"response": assignments[0].response}
            )

    logger.info(f"{faculty_id} responded '{choice.value}' to {subject_code} ({normalize_role(role)})")
    return assignments[0]
