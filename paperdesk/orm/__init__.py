"""
paperdesk/orm/__init__.py
Importing this package registers every model with Base.metadata.
"""
from paperdesk.orm.base import Base, BaseModel
from paperdesk.orm.faculty_profile import FacultyProfile
from paperdesk.orm.assignment import Assignment, AssignmentResponse, PaperStatus, normalize_role
from paperdesk.orm.question_paper import (
    QuestionPaper,
    ScrutinyRequestStatus,
    ScrutinyStatus,
    SECTION_SIZES,
)

__all__ = [
    "Base",
    "BaseModel",
    "FacultyProfile",
    "Assignment",
    "AssignmentResponse",
    "PaperStatus",
    "normalize_role",
    "QuestionPaper",
    "ScrutinyRequestStatus",
    "ScrutinyStatus",
    "SECTION_SIZES",
]
