"""
Response Workflow Test Suite

Unresponded -> Accepted | Declined, exactly once.
"""
import asyncio

import pytest

from paperdesk.errors import ConflictError, ErrorCode, ForbiddenError, NotFoundError, ValidationError
from paperdesk.orm.assignment import Assignment, AssignmentResponse
from paperdesk.services.assignment_registry import create_assignment, find_assignments
from paperdesk.services.response_workflow import (
    parse_decision, query_pending_response, submit_response
)

from conftest import ADMIN, DEADLINE, FACULTY, faculty


async def offer(db, faculty_id="F1", subject_code="CS101", role="setter"):
    return await create_assignment(
        db, ADMIN, faculty_id, FACULTY[faculty_id], subject_code,
        "Data Structures", "R2021", role, DEADLINE
    )


class TestDecisionParsing:

    def test_case_and_whitespace(self):
        assert parse_decision(" YES ") == AssignmentResponse.YES

    def test_rejects_other_values(self):
        with pytest.raises(ValidationError):
            parse_decision("maybe")


@pytest.mark.asyncio
class TestPendingPrompt:

    async def test_oldest_pending_first(self, db, directory):
        await offer(db, subject_code="CS101")
        await offer(db, subject_code="CS102")

        pending = await query_pending_response(db, faculty("F1"))
        assert pending.subject_code == "CS101"

        await submit_response(db, faculty("F1"), "F1", "CS101", "setter", "no")
        pending = await query_pending_response(db, faculty("F1"))
        assert pending.subject_code == "CS102"

    async def test_no_prompt(self, db, directory):
        assert await query_pending_response(db, faculty("F1")) is None

    async def test_admin_may_query_for_faculty(self, db, directory):
        await offer(db, "F2", "CS201")
        pending = await query_pending_response(db, ADMIN, "F2")
        assert pending.faculty_id == "F2"

    async def test_faculty_cannot_query_others(self, db, directory):
        with pytest.raises(ForbiddenError):
            await query_pending_response(db, faculty("F1"), "F2")

    async def test_admin_must_name_faculty(self, db, directory):
        await offer(db)
        for faculty_id in (None, "  "):
            with pytest.raises(ValidationError) as exc:
                await query_pending_response(db, ADMIN, faculty_id)
            assert exc.value.code == ErrorCode.MISSING_FIELD


@pytest.mark.asyncio
class TestSubmitResponse:

    async def test_accept_sets_is_assigned(self, db, directory):
        await offer(db)
        assignment = await submit_response(db, faculty("F1"), "F1", "CS101", "Setter", "yes")
        assert assignment.response == "yes"
        assert assignment.is_assigned is True

    async def test_decline_keeps_is_assigned_false(self, db, directory):
        await offer(db)
        assignment = await submit_response(db, faculty("F1"), "F1", "CS101", "setter", "no")
        assert assignment.response == "no"
        assert assignment.is_assigned is False

    @pytest.mark.parametrize("first,second", [("yes", "no"), ("no", "yes"), ("yes", "yes")])
    async def test_second_response_is_rejected(self, db, directory, first, second):
        await offer(db)
        await submit_response(db, faculty("F1"), "F1", "CS101", "setter", first)

        with pytest.raises(ConflictError) as exc:
            await submit_response(db, faculty("F1"), "F1", "CS101", "setter", second)
        assert exc.value.code == ErrorCode.ALREADY_RESPONDED

        stored = (await find_assignments(db, "F1", "CS101", "setter"))[0]
        assert stored.response == first
        assert stored.is_assigned == (first == "yes")

    async def test_key_whitespace_is_ignored(self, db, directory):
        await offer(db)
        assignment = await submit_response(db, faculty("F1"), " F1 ", " CS101 ", "setter", "yes")
        assert assignment.is_assigned is True

    async def test_no_matching_assignment(self, db, directory):
        with pytest.raises(NotFoundError):
            await submit_response(db, faculty("F1"), "F1", "CS404", "setter", "yes")

    async def test_cannot_answer_for_someone_else(self, db, directory):
        await offer(db, "F2", "CS201")
        with pytest.raises(ForbiddenError):
            await submit_response(db, faculty("F1"), "F2", "CS201", "setter", "yes")

    async def test_admin_cannot_answer(self, db, directory):
        await offer(db)
        with pytest.raises(ForbiddenError):
            await submit_response(db, ADMIN, "F1", "CS101", "setter", "yes")

    async def test_invalid_decision(self, db, directory):
        await offer(db)
        with pytest.raises(ValidationError):
            await submit_response(db, faculty("F1"), "F1", "CS101", "setter", "later")

    async def test_concurrent_responses_have_one_winner(self, db, session_factory, directory):
        await offer(db)

        async def attempt(decision):
            async with session_factory() as session:
                return await submit_response(session, faculty("F1"), "F1", "CS101", "setter", decision)

        results = await asyncio.gather(attempt("yes"), attempt("no"), return_exceptions=True)

        winners = [r for r in results if isinstance(r, Assignment)]
        losers = [r for r in results if isinstance(r, ConflictError)]
        assert len(winners) == 1
        assert len(losers) == 1

        async with session_factory() as session:
            stored = (await find_assignments(session, "F1", "CS101", "setter"))[0]
        assert stored.response == winners[0].response
        assert stored.is_assigned == (stored.response == "yes")
