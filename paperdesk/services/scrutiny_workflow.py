"""
Scrutiny Workflow Service

Admin- and scrutinizer-facing transitions over a question paper's scrutiny
sub-state:

    UNASSIGNED --assign--> REQUEST_PENDING --accept--> REQUEST_ACCEPTED --verdict--> APPROVED | REJECTED
                           REQUEST_PENDING --reject--> REQUEST_REJECTED
    REQUEST_* --assign (reassignment)--> REQUEST_PENDING   while the verdict is still pending

Every transition is a conditional UPDATE on the expected current state, so a
concurrent or repeated call changes nothing and is reported as ConflictError.
"""
import logging
from datetime import datetime
from typing import Dict, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from paperdesk.database import atomic
from paperdesk.errors import (
    ConflictError, ErrorCode, ForbiddenError, ValidationError, require_fields
)
from paperdesk.orm.assignment import PaperStatus
from paperdesk.orm.question_paper import QuestionPaper, ScrutinyRequestStatus, ScrutinyStatus
from paperdesk.rbac import Identity, ensure_admin, ensure_faculty
from paperdesk.services.faculty_directory import verify_identity
from paperdesk.services.question_paper_store import advance_paper_status, find_question_paper

logger = logging.getLogger(__name__)


class ScrutinyService:
    """
    Scrutiny state machine for question papers.

    APPROVED and REJECTED verdicts are terminal: once scrutiny_status leaves
    PENDING no further scrutiny field changes.
    """

    # Scrutinizer answers to a request
    VALID_REQUEST_TRANSITIONS: Dict[ScrutinyRequestStatus, List[ScrutinyRequestStatus]] = {
        ScrutinyRequestStatus.PENDING: [ScrutinyRequestStatus.ACCEPTED, ScrutinyRequestStatus.REJECTED],
        ScrutinyRequestStatus.ACCEPTED: [],
        ScrutinyRequestStatus.REJECTED: [],
    }

    VALID_VERDICT_TRANSITIONS: Dict[ScrutinyStatus, List[ScrutinyStatus]] = {
        ScrutinyStatus.PENDING: [ScrutinyStatus.APPROVED, ScrutinyStatus.REJECTED],
        ScrutinyStatus.APPROVED: [],
        ScrutinyStatus.REJECTED: [],
    }

    VERDICT_TO_PAPER_STATUS = {
        ScrutinyStatus.APPROVED: PaperStatus.APPROVED,
        ScrutinyStatus.REJECTED: PaperStatus.REJECTED,
    }

    @staticmethod
    def _is_valid_request_transition(current: ScrutinyRequestStatus, new: ScrutinyRequestStatus) -> bool:
        return new in ScrutinyService.VALID_REQUEST_TRANSITIONS.get(current, [])

    @staticmethod
    def _is_valid_verdict_transition(current: ScrutinyStatus, new: ScrutinyStatus) -> bool:
        return new in ScrutinyService.VALID_VERDICT_TRANSITIONS.get(current, [])

    @staticmethod
    def _parse_request_response(value) -> ScrutinyRequestStatus:
        try:
            response = ScrutinyRequestStatus(str(value).strip().lower())
        except ValueError:
            response = None
        if response not in ScrutinyService.VALID_REQUEST_TRANSITIONS[ScrutinyRequestStatus.PENDING]:
            raise ValidationError(
                f"Invalid response '{value}'. Must be one of: accepted, rejected",
                code=ErrorCode.INVALID_INPUT,
                details={"field": "response"}
            )
        return response

    @staticmethod
    def _parse_verdict(value) -> ScrutinyStatus:
        try:
            verdict = ScrutinyStatus(str(value).strip().lower())
        except ValueError:
            verdict = None
        if verdict not in ScrutinyService.VALID_VERDICT_TRANSITIONS[ScrutinyStatus.PENDING]:
            raise ValidationError(
                f"Invalid verdict '{value}'. Must be one of: approved, rejected",
                code=ErrorCode.INVALID_INPUT,
                details={"field": "verdict"}
            )
        return verdict

    @staticmethod
    def _ensure_scrutinizer(caller: Identity, paper: QuestionPaper) -> None:
        if paper.scrutinizer_id is None or caller.faculty_id != paper.scrutinizer_id:
            logger.warning(f"Access denied: {caller.display} is not the scrutinizer of paper {paper.id}")
            raise ForbiddenError(
                "Only the assigned scrutinizer may act on this scrutiny request",
                ErrorCode.OWNERSHIP_VIOLATION
            )

    # ==========================================================================
    # Transitions
    # ==========================================================================

    @staticmethod
    async def assign_scrutinizer(
        db: AsyncSession,
        paper_id: int,
        scrutinizer_id: str,
        scrutinizer_name: str,
        caller: Identity
    ) -> QuestionPaper:
        """
        Route a paper to a scrutinizer (admin only).

        Resets the request to PENDING, which also covers reassignment after a
        declined request.

        Raises:
            ForbiddenError: caller is not an administrator
            ValidationError: missing fields, name mismatch, or self-scrutiny
            NotFoundError: paper or scrutinizer does not exist
            ConflictError: the paper already has a verdict
        """
        ensure_admin(caller, "scrutinizer assignment")
        require_fields(
            {"scrutinizerId": scrutinizer_id, "scrutinizerName": scrutinizer_name},
            "scrutinizer assignment"
        )
        scrutinizer_id = scrutinizer_id.strip()

        async with atomic(db, "assign_scrutinizer"):
            paper = await find_question_paper(db, paper_id)
            profile = await verify_identity(db, scrutinizer_id, scrutinizer_name)

            if scrutinizer_id == paper.faculty_id:
                raise ValidationError(
                    "A faculty member cannot scrutinize their own question paper",
                    code=ErrorCode.INVALID_INPUT,
                    details={"scrutinizerId": scrutinizer_id}
                )

            result = await db.execute(
                update(QuestionPaper)
                .where(
                    QuestionPaper.id == paper_id,
                    QuestionPaper.scrutiny_status == ScrutinyStatus.PENDING.value
                )
                .values(
                    scrutinizer_id=scrutinizer_id,
                    scrutinizer_name=profile.full_name,
                    scrutiny_request_status=ScrutinyRequestStatus.PENDING.value,
                    updated_at=datetime.utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ConflictError(
                    "Question paper has already been scrutinized",
                    ErrorCode.ALREADY_SCRUTINIZED,
                    details={"scrutinyStatus": paper.scrutiny_status}
                )

            paper = await find_question_paper(db, paper_id)

        logger.info(f"Paper {paper_id} routed to scrutinizer {scrutinizer_id} by {caller.display}")
        return paper

    @staticmethod
    async def respond_to_request(
        db: AsyncSession,
        paper_id: int,
        response,
        caller: Identity
    ) -> QuestionPaper:
        """
        Scrutinizer accepts or declines the request to review a paper.

        Raises:
            ValidationError: response outside {accepted, rejected}
            NotFoundError: paper does not exist
            ForbiddenError: caller is not the assigned scrutinizer
            ConflictError: the request was already answered or a verdict exists
        """
        ensure_faculty(caller, "scrutiny request response")
        choice = ScrutinyService._parse_request_response(response)

        async with atomic(db, "respond_to_scrutiny_request"):
            paper = await find_question_paper(db, paper_id)
            ScrutinyService._ensure_scrutinizer(caller, paper)

            result = await db.execute(
                update(QuestionPaper)
                .where(
                    QuestionPaper.id == paper_id,
                    QuestionPaper.scrutinizer_id == caller.faculty_id,
                    QuestionPaper.scrutiny_request_status == ScrutinyRequestStatus.PENDING.value,
                    QuestionPaper.scrutiny_status == ScrutinyStatus.PENDING.value
                )
                .values(scrutiny_request_status=choice.value, updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                logger.warning(f"Scrutiny request on paper {paper_id} is no longer pending")
                raise ConflictError(
                    "Scrutiny request is not pending",
                    ErrorCode.REQUEST_NOT_PENDING,
                    details={
                        "scrutinyRequestStatus": paper.scrutiny_request_status,
                        "scrutinyStatus": paper.scrutiny_status,
                    }
                )

            paper = await find_question_paper(db, paper_id)

        logger.info(f"Scrutinizer {caller.faculty_id} {choice.value} request for paper {paper_id}")
        return paper

    @staticmethod
    async def submit_verdict(
        db: AsyncSession,
        paper_id: int,
        remarks: str,
        verdict,
        caller: Identity
    ) -> QuestionPaper:
        """
        Record the scrutinizer's terminal verdict with remarks.

        Also advances the assignment's question_paper_status to the verdict, in
        the same transaction.

        Raises:
            ValidationError: missing remarks or verdict outside {approved, rejected}
            NotFoundError: paper does not exist
            ForbiddenError: caller is not the assigned scrutinizer
            ConflictError: verdict already given, or the request was not accepted
        """
        ensure_faculty(caller, "scrutiny verdict")
        require_fields({"remarks": remarks, "verdict": verdict}, "scrutiny verdict")
        decided = ScrutinyService._parse_verdict(verdict)

        async with atomic(db, "submit_scrutiny_verdict"):
            paper = await find_question_paper(db, paper_id)
            ScrutinyService._ensure_scrutinizer(caller, paper)

            if not ScrutinyService._is_valid_verdict_transition(ScrutinyStatus(paper.scrutiny_status), decided):
                raise ConflictError(
                    "Question paper has already been scrutinized",
                    ErrorCode.ALREADY_SCRUTINIZED,
                    details={"scrutinyStatus": paper.scrutiny_status}
                )
            if paper.scrutiny_request_status != ScrutinyRequestStatus.ACCEPTED.value:
                raise ConflictError(
                    "Scrutiny request must be accepted before a verdict",
                    ErrorCode.REQUEST_NOT_ACCEPTED,
                    details={"scrutinyRequestStatus": paper.scrutiny_request_status}
                )

            now = datetime.utcnow()
            result = await db.execute(
                update(QuestionPaper)
                .where(
                    QuestionPaper.id == paper_id,
                    QuestionPaper.scrutinizer_id == caller.faculty_id,
                    QuestionPaper.scrutiny_request_status == ScrutinyRequestStatus.ACCEPTED.value,
                    QuestionPaper.scrutiny_status == ScrutinyStatus.PENDING.value
                )
                .values(
                    scrutiny_status=decided.value,
                    scrutiny_remarks=remarks.strip(),
                    scrutinized_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ConflictError(
                    "Question paper has already been scrutinized",
                    ErrorCode.ALREADY_SCRUTINIZED
                )

            await advance_paper_status(
                db,
                paper.faculty_id,
                paper.subject_code,
                paper.role,
                ScrutinyService.VERDICT_TO_PAPER_STATUS[decided]
            )
            paper = await find_question_paper(db, paper_id)

        logger.info(f"Scrutinizer {caller.faculty_id} {decided.value} paper {paper_id}")
        return paper

    # ==========================================================================
    # Queues
    # ==========================================================================

    @staticmethod
    async def list_assigned_work(db: AsyncSession, caller: Identity) -> List[QuestionPaper]:
        """Accepted requests still awaiting the caller's verdict."""
        ensure_faculty(caller, "scrutiny work listing")
        result = await db.execute(
            select(QuestionPaper)
            .where(
                QuestionPaper.scrutinizer_id == caller.faculty_id,
                QuestionPaper.scrutiny_request_status == ScrutinyRequestStatus.ACCEPTED.value,
                QuestionPaper.scrutiny_status == ScrutinyStatus.PENDING.value
            )
            .order_by(QuestionPaper.created_at, QuestionPaper.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_pending_requests(db: AsyncSession, caller: Identity) -> List[QuestionPaper]:
        """Requests the caller has not answered yet."""
        ensure_faculty(caller, "scrutiny request listing")
        result = await db.execute(
            select(QuestionPaper)
            .where(
                QuestionPaper.scrutinizer_id == caller.faculty_id,
                QuestionPaper.scrutiny_request_status == ScrutinyRequestStatus.PENDING.value
            )
            .order_by(QuestionPaper.created_at, QuestionPaper.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
