"""
Assignment Registry Test Suite

Creation checks, uniqueness under concurrency, listing and removal cascade.
"""
import asyncio
from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import insert, select

from paperdesk.errors import ConflictError, ErrorCode, ForbiddenError, NotFoundError, ValidationError
from paperdesk.orm.assignment import Assignment, PaperStatus
from paperdesk.orm.question_paper import QuestionPaper
from paperdesk.services.assignment_registry import (
    create_assignment, list_assignments, parse_deadline, remove_assignment
)

from conftest import ADMIN, DEADLINE, FACULTY, faculty


async def offer(db, faculty_id="F1", subject_code="CS101", role="setter", name=None):
    return await create_assignment(
        db, ADMIN, faculty_id, name or FACULTY[faculty_id], subject_code,
        "Data Structures", "R2021", role, DEADLINE
    )


class TestDeadlineParsing:

    def test_iso_date(self):
        assert parse_deadline("2026-11-30") == date(2026, 11, 30)

    def test_iso_datetime_is_truncated(self):
        assert parse_deadline("2026-11-30T10:00:00Z") == date(2026, 11, 30)

    def test_garbage(self):
        with pytest.raises(ValidationError):
            parse_deadline("next friday")


@pytest.mark.asyncio
class TestCreateAssignment:

    async def test_initial_state(self, db, directory):
        assignment = await offer(db, role="Setter")
        assert assignment.response is None
        assert assignment.is_assigned is False
        assert assignment.question_paper_status == PaperStatus.PENDING.value
        assert assignment.role == "setter"
        assert assignment.assigned_by == "exam-cell"

    async def test_missing_fields(self, db, directory):
        with pytest.raises(ValidationError) as exc:
            await create_assignment(db, ADMIN, "F1", "Asha Rao", "", "DS", "R2021", None, DEADLINE)
        assert exc.value.details == {"fields": ["subjectCode", "role"]}

    async def test_unknown_faculty(self, db, directory):
        with pytest.raises(NotFoundError):
            await create_assignment(db, ADMIN, "F404", "Ghost", "CS101", "DS", "R2021", "setter", DEADLINE)

    async def test_identity_mismatch(self, db, directory):
        with pytest.raises(ValidationError) as exc:
            await offer(db, "F1", name="Vikram Nair")
        assert exc.value.code == ErrorCode.IDENTITY_MISMATCH
        assert await list_assignments(db, ADMIN) == []

    async def test_faculty_cannot_create(self, db, directory):
        with pytest.raises(ForbiddenError):
            await create_assignment(
                db, faculty("F1"), "F1", "Asha Rao", "CS101", "DS", "R2021", "setter", DEADLINE
            )

    async def test_duplicate_key(self, db, directory):
        await offer(db)
        with pytest.raises(ConflictError) as exc:
            await offer(db)
        assert exc.value.code == ErrorCode.DUPLICATE_ASSIGNMENT

    async def test_duplicate_key_ignores_role_case(self, db, directory):
        await offer(db, role="setter")
        with pytest.raises(ConflictError):
            await offer(db, role="  SETTER ")

    async def test_same_subject_different_role_is_allowed(self, db, directory):
        await offer(db, role="setter")
        await offer(db, role="scrutiny")
        assert len(await list_assignments(db, ADMIN, "F1")) == 2

    async def test_concurrent_creates_have_one_winner(self, session_factory, directory):
        async def attempt():
            async with session_factory() as session:
                return await offer(session)

        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

        winners = [r for r in results if isinstance(r, Assignment)]
        losers = [r for r in results if isinstance(r, ConflictError)]
        assert len(winners) == 1
        assert len(losers) == 1

        async with session_factory() as session:
            rows = (await session.execute(select(Assignment))).scalars().all()
        assert len(rows) == 1


@pytest.mark.asyncio
class TestListAssignments:

    async def test_newest_first_with_filter(self, db, directory):
        await offer(db, "F1", "CS101")
        await offer(db, "F2", "CS102")
        await offer(db, "F1", "CS103")

        codes = [a.subject_code for a in await list_assignments(db, ADMIN)]
        assert codes == ["CS103", "CS102", "CS101"]

        codes = [a.subject_code for a in await list_assignments(db, ADMIN, "F1")]
        assert codes == ["CS103", "CS101"]

    async def test_faculty_sees_only_own(self, db, directory):
        await offer(db, "F1", "CS101")
        await offer(db, "F2", "CS102")

        mine = await list_assignments(db, faculty("F2"))
        assert [a.faculty_id for a in mine] == ["F2"]
        with pytest.raises(ForbiddenError):
            await list_assignments(db, faculty("F2"), "F1")

    async def test_legacy_duplicates_collapse_to_newest(self, db, directory):
        now = datetime.utcnow()
        for offset, role in ((2, "Setter"), (1, "SETTER")):
            await db.execute(
                insert(Assignment).values(
                    faculty_id="F1", faculty_name="Asha Rao", subject_code="CS101",
                    subject_name="DS", regulation="R2021", role=role, is_assigned=False,
                    question_paper_status="pending", deadline_date=date.today(),
                    assigned_by="legacy", created_at=now - timedelta(minutes=offset),
                    updated_at=now,
                )
            )
        await db.commit()

        listed = await list_assignments(db, ADMIN)
        assert len(listed) == 1
        assert listed[0].role == "SETTER"


@pytest.mark.asyncio
class TestRemoveAssignment:

    async def test_remove_returns_count(self, db, directory):
        await offer(db)
        assert await remove_assignment(db, ADMIN, "F1", "CS101", "Setter") == 1
        assert await list_assignments(db, ADMIN) == []

    async def test_remove_missing(self, db, directory):
        with pytest.raises(NotFoundError) as exc:
            await remove_assignment(db, ADMIN, "F1", "CS999", "setter")
        assert exc.value.code == ErrorCode.ASSIGNMENT_NOT_FOUND

    async def test_remove_cascades_to_question_paper(self, db, submitted_paper):
        paper = await submitted_paper()
        assert await remove_assignment(db, ADMIN, "F1", "CS101", "setter") == 1

        remaining = (await db.execute(
            select(QuestionPaper).where(QuestionPaper.id == paper.id)
        )).scalar_one_or_none()
        assert remaining is None

    async def test_key_whitespace_is_dropped(self, db, directory):
        assignment = await create_assignment(
            db, ADMIN, " F1 ", "Asha Rao", " CS101 ", "Data Structures", "R2021", "setter", DEADLINE
        )
        assert (assignment.faculty_id, assignment.subject_code) == ("F1", "CS101")

        assert [a.id for a in await list_assignments(db, ADMIN, " F1 ")] == [assignment.id]
        assert await remove_assignment(db, ADMIN, " F1 ", " CS101 ", "setter") == 1

    async def test_faculty_cannot_remove(self, db, directory):
        await offer(db)
        with pytest.raises(ForbiddenError):
            await remove_assignment(db, faculty("F1"), "F1", "CS101", "setter")
