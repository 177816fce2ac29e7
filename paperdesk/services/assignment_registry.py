"""
Assignment Registry Service

Creation, listing and removal of faculty assignments.

Uniqueness of (faculty_id, subject_code, role) is enforced by the
uq_assignment_faculty_subject_role constraint, not by a read-then-insert
check: of two concurrent creates for the same key exactly one flush succeeds
and the other surfaces as ConflictError.
"""
import logging
from datetime import date
from typing import List, Optional, Union

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import atomic
from paperdesk.errors import (
    ConflictError, ErrorCode, NotFoundError, ValidationError, require_fields
)
from paperdesk.orm.assignment import Assignment, PaperStatus, normalize_key, normalize_role
from paperdesk.orm.question_paper import QuestionPaper
from paperdesk.rbac import Identity, ensure_admin, ensure_same_faculty
from paperdesk.services.faculty_directory import verify_identity

logger = logging.getLogger(__name__)


def parse_deadline(value: Union[date, str, None]) -> date:
    """Accept a date or an ISO-8601 date string (YYYY-MM-DD)."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(
            f"Invalid deadline '{value}'. Expected YYYY-MM-DD",
            code=ErrorCode.INVALID_INPUT,
            details={"field": "deadlineDate"}
        )


def matching(faculty_id: str, subject_code: str, role: str):
    """WHERE clause for the uniqueness key, case-insensitive on role."""
    return (
        Assignment.faculty_id == normalize_key(faculty_id),
        Assignment.subject_code == normalize_key(subject_code),
        func.lower(Assignment.role) == normalize_role(role),
    )


async def find_assignments(
    db: AsyncSession,
    faculty_id: str,
    subject_code: str,
    role: str
) -> List[Assignment]:
    result = await db.execute(
        select(Assignment)
        .where(*matching(faculty_id, subject_code, role))
        .order_by(Assignment.created_at, Assignment.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def create_assignment(
    db: AsyncSession,
    caller: Identity,
    faculty_id: str,
    faculty_name: str,
    subject_code: str,
    subject_name: str,
    regulation: str,
    role: str,
    deadline: Union[date, str],
) -> Assignment:
    """
    Offer a subject/duty to a faculty member.

    Raises:
        ForbiddenError: caller is not an administrator
        ValidationError: missing fields, bad deadline or identity mismatch
        NotFoundError: faculty is not in the directory
        ConflictError: an assignment with the same key already exists
    """
    ensure_admin(caller, "assignment creation")
    require_fields(
        {
            "facultyId": faculty_id,
            "facultyName": faculty_name,
            "subjectCode": subject_code,
            "subjectName": subject_name,
            "regulation": regulation,
            "role": role,
            "deadlineDate": deadline,
        },
        "assignment"
    )
    deadline_date = parse_deadline(deadline)
    faculty_id = normalize_key(faculty_id)
    subject_code = normalize_key(subject_code)

    async with atomic(db, "create_assignment"):
        await verify_identity(db, faculty_id, faculty_name)

        assignment = Assignment(
            faculty_id=faculty_id,
            faculty_name=faculty_name.strip(),
            subject_code=subject_code,
            subject_name=subject_name.strip(),
            regulation=regulation.strip(),
            role=role,
            response=None,
            is_assigned=False,
            question_paper_status=PaperStatus.PENDING.value,
            deadline_date=deadline_date,
            assigned_by=caller.display,
        )
        db.add(assignment)
        try:
            await db.flush()
        except IntegrityError:
            logger.warning(f"Duplicate assignment rejected: {faculty_id}/{subject_code}/{normalize_role(role)}")
            raise ConflictError(
                "Assignment already exists for this faculty, subject and role",
                ErrorCode.DUPLICATE_ASSIGNMENT,
                details={"facultyId": faculty_id, "subjectCode": subject_code, "role": normalize_role(role)}
            )

    logger.info(
        f"Assignment {assignment.id} created: {faculty_id} -> {subject_code} ({assignment.role}) by {caller.display}"
    )
    return assignment


async def list_assignments(
    db: AsyncSession,
    caller: Identity,
    faculty_id: Optional[str] = None
) -> List[Assignment]:
    """
    Assignments newest first, optionally for one faculty member.

    Faculty callers only ever see their own assignments. Should duplicate keys
    exist (rows written before the unique constraint), the newest one wins.
    """
    faculty_id = normalize_key(faculty_id)
    if not caller.is_admin:
        if faculty_id is not None:
            ensure_same_faculty(caller, faculty_id, "assignment list")
        faculty_id = caller.faculty_id

    query = (
        select(Assignment)
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .execution_options(populate_existing=True)
    )
    if faculty_id:
        query = query.where(Assignment.faculty_id == faculty_id)

    result = await db.execute(query)

    seen = set()
    assignments = []
    for assignment in result.scalars().all():
        key = assignment.key()
        if key in seen:
            continue
        seen.add(key)
        assignments.append(assignment)
    return assignments


async def remove_assignment(
    db: AsyncSession,
    caller: Identity,
    faculty_id: str,
    subject_code: str,
    role: str
) -> int:
    """
    Delete the assignment(s) for the key together with their question papers.

    Returns:
        Number of assignments deleted

    Raises:
        NotFoundError: nothing matched
    """
    ensure_admin(caller, "assignment removal")
    require_fields(
        {"facultyId": faculty_id, "subjectCode": subject_code, "role": role},
        "assignment removal"
    )
    faculty_id = normalize_key(faculty_id)
    subject_code = normalize_key(subject_code)

    async with atomic(db, "remove_assignment"):
        assignments = await find_assignments(db, faculty_id, subject_code, role)
        if not assignments:
            raise NotFoundError(
                "Assignment",
                f"{faculty_id}/{subject_code}/{normalize_role(role)}",
                ErrorCode.ASSIGNMENT_NOT_FOUND
            )

        ids = [a.id for a in assignments]
        papers = await db.execute(
            delete(QuestionPaper).where(QuestionPaper.assignment_id.in_(ids))
        )
        removed = await db.execute(
            delete(Assignment).where(Assignment.id.in_(ids))
        )
        deleted_count = removed.rowcount

    logger.info(
        f"Removed {deleted_count} assignment(s) and {papers.rowcount} question paper(s) "
        f"for {faculty_id}/{subject_code}/{normalize_role(role)}"
    )
    return deleted_count
