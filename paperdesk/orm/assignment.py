"""
paperdesk/orm/assignment.py
Assignment of a faculty member to a subject/duty role for a regulation cycle.
"""
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy import (
    Column, String, Boolean, Date, CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import validates

from paperdesk.orm.base import BaseModel


class AssignmentResponse(str, Enum):
    """Faculty decision on an assignment. NULL in storage means unresponded."""
    YES = "yes"
    NO = "no"


class PaperStatus(str, Enum):
    """Question paper status as tracked on the assignment."""
    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


# Forward-only progression; APPROVED and REJECTED are terminal
PAPER_STATUS_TRANSITIONS: Dict[PaperStatus, List[PaperStatus]] = {
    PaperStatus.PENDING: [PaperStatus.SUBMITTED],
    PaperStatus.SUBMITTED: [PaperStatus.APPROVED, PaperStatus.REJECTED],
    PaperStatus.APPROVED: [],
    PaperStatus.REJECTED: [],
}


def normalize_role(role: Optional[str]) -> Optional[str]:
    """Canonical storage form of a duty role ("Setter", " SETTER " -> "setter")."""
    if role is None:
        return None
    return role.strip().lower()


def normalize_key(value: Optional[str]) -> Optional[str]:
    """Storage form of faculty ids and subject codes: surrounding whitespace dropped."""
    if value is None:
        return None
    return value.strip()


class Assignment(BaseModel):
    """
    Binding of a faculty member to a subject and duty role.

    Uniqueness key is (faculty_id, subject_code, role). The role column always
    holds the canonical lower-case form, so the key is case-insensitive on role.
    """
    __tablename__ = "assignments"

    faculty_id = Column(String(50), nullable=False, index=True)
    faculty_name = Column(String(200), nullable=False)
    subject_code = Column(String(50), nullable=False)
    subject_name = Column(String(200), nullable=False)
    regulation = Column(String(50), nullable=False)
    role = Column(String(50), nullable=False)

    response = Column(String(10), nullable=True, default=None)
    is_assigned = Column(Boolean, nullable=False, default=False)
    question_paper_status = Column(String(20), nullable=False, default=PaperStatus.PENDING.value)

    deadline_date = Column(Date, nullable=False)
    assigned_by = Column(String(80), nullable=False)

    __table_args__ = (
        UniqueConstraint("faculty_id", "subject_code", "role", name="uq_assignment_faculty_subject_role"),
        CheckConstraint(
            "response IS NULL OR response IN ('yes', 'no')",
            name="ck_assignment_response_valid"
        ),
        CheckConstraint(
            "(response = 'yes' AND is_assigned) OR ((response IS NULL OR response = 'no') AND NOT is_assigned)",
            name="ck_assignment_is_assigned_derived"
        ),
        CheckConstraint(
            "question_paper_status IN ('pending', 'submitted', 'approved', 'rejected')",
            name="ck_assignment_paper_status_valid"
        ),
        Index("idx_assignment_created_at", "created_at"),
        Index("idx_assignment_pending_response", "faculty_id", "response"),
    )

    @validates("role")
    def _canonical_role(self, key, value):
        return normalize_role(value)

    @validates("faculty_id", "subject_code")
    def _canonical_key(self, key, value):
        return normalize_key(value)

    @property
    def awaiting_response(self) -> bool:
        return self.response is None

    def key(self):
        """Uniqueness key of this assignment."""
        return (self.faculty_id, self.subject_code, normalize_role(self.role))

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "facultyId": self.faculty_id,
            "facultyName": self.faculty_name,
            "subjectCode": self.subject_code,
            "subjectName": self.subject_name,
            "regulation": self.regulation,
            "role": self.role,
            "response": self.response,
            "isAssigned": bool(self.is_assigned),
            "questionPaperStatus": self.question_paper_status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "deadlineDate": self.deadline_date.isoformat() if self.deadline_date else None,
            "assignedBy": self.assigned_by,
        }
