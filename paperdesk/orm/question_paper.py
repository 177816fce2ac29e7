"""
paperdesk/orm/question_paper.py
Submitted question paper and its scrutiny sub-state.
"""
from enum import Enum
from typing import Dict

from sqlalchemy import (
    Column, Integer, String, Text, JSON, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint, Index
)

from paperdesk.orm.base import BaseModel


class ScrutinyRequestStatus(str, Enum):
    """Scrutinizer's answer to the request to review a paper."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ScrutinyStatus(str, Enum):
    """Scrutiny verdict. APPROVED and REJECTED are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Question slots per section of the rendered paper
SECTION_SIZES: Dict[str, int] = {
    "A": 10,
    "B": 8,
    "C": 2,
}


class QuestionPaper(BaseModel):
    """
    Question paper submitted against one accepted assignment.

    Scrutiny sub-state:
        scrutinizer_id IS NULL                      -> unassigned
        request pending                             -> awaiting scrutinizer answer
        request accepted, status pending            -> under scrutiny
        request rejected                            -> needs reassignment
        status approved/rejected                    -> terminal verdict
    """
    __tablename__ = "question_papers"

    assignment_id = Column(
        Integer,
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    faculty_id = Column(String(50), nullable=False, index=True)
    role = Column(String(50), nullable=False)

    # Exam metadata
    exam_name = Column(String(200), nullable=False)
    department = Column(String(200), nullable=False)
    semester = Column(String(20), nullable=False)
    subject_code = Column(String(50), nullable=False)
    subject_title = Column(String(200), nullable=False)
    regulation = Column(String(50), nullable=False)
    time = Column(String(50), nullable=False)
    max_marks = Column(Integer, nullable=False)

    # Ordered question text per section
    part_a = Column(JSON, nullable=False)
    part_b = Column(JSON, nullable=False)
    part_c = Column(JSON, nullable=False)

    # Scrutiny
    scrutinizer_id = Column(String(50), nullable=True, index=True)
    scrutinizer_name = Column(String(200), nullable=True)
    scrutiny_request_status = Column(
        String(20),
        nullable=False,
        default=ScrutinyRequestStatus.PENDING.value
    )
    scrutiny_status = Column(
        String(20),
        nullable=False,
        default=ScrutinyStatus.PENDING.value
    )
    scrutiny_remarks = Column(Text, nullable=True)
    scrutinized_at = Column(DateTime, nullable=True)

    __table_args__ = (
        # One paper per assignment
        UniqueConstraint("assignment_id", name="uq_question_paper_assignment"),

        CheckConstraint(
            "scrutiny_request_status IN ('pending', 'accepted', 'rejected')",
            name="ck_question_paper_request_status_valid"
        ),
        CheckConstraint(
            "scrutiny_status IN ('pending', 'approved', 'rejected')",
            name="ck_question_paper_scrutiny_status_valid"
        ),

        # A verdict carries remarks and a timestamp
        CheckConstraint(
            "(scrutiny_status = 'pending') OR "
            "(scrutiny_remarks IS NOT NULL AND scrutinized_at IS NOT NULL)",
            name="ck_question_paper_verdict_complete"
        ),

        Index("idx_question_paper_scrutiny_queue", "scrutinizer_id", "scrutiny_request_status", "scrutiny_status"),
        Index("idx_question_paper_faculty_subject", "faculty_id", "subject_code"),
    )

    def is_visible_to(self, faculty_id) -> bool:
        """True if the faculty member authored the paper or is its scrutinizer."""
        if not faculty_id:
            return False
        return faculty_id in (self.faculty_id, self.scrutinizer_id)

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "assignmentId": self.assignment_id,
            "facultyId": self.faculty_id,
            "role": self.role,
            "examName": self.exam_name,
            "department": self.department,
            "semester": self.semester,
            "subjectCode": self.subject_code,
            "subjectTitle": self.subject_title,
            "regulation": self.regulation,
            "time": self.time,
            "maxMarks": self.max_marks,
            "partA": list(self.part_a or []),
            "partB": list(self.part_b or []),
            "partC": list(self.part_c or []),
            "scrutinizerId": self.scrutinizer_id,
            "scrutinizerName": self.scrutinizer_name,
            "scrutinyRequestStatus": self.scrutiny_request_status,
            "scrutinyStatus": self.scrutiny_status,
            "scrutinyRemarks": self.scrutiny_remarks,
            "scrutinizedAt": self.scrutinized_at.isoformat() if self.scrutinized_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
