"""
Question paper API schemas
"""
from typing import List, Optional, Union

from pydantic import Field

from paperdesk.schemas.base import CamelModel
from paperdesk.services.question_paper_store import ExamMetadata


class QuestionPaperSubmit(CamelModel):
    """Request schema for submitting a three-part question paper."""
    faculty_id: Optional[str] = None
    subject_code: Optional[str] = None
    role: Optional[str] = None
    exam_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[Union[str, int]] = None
    subject_title: Optional[str] = None
    regulation: Optional[str] = None
    time: Optional[str] = None
    max_marks: Optional[int] = None
    part_a: List[str] = Field(default_factory=list)
    part_b: List[str] = Field(default_factory=list)
    part_c: List[str] = Field(default_factory=list)

    def metadata(self) -> ExamMetadata:
        return ExamMetadata(
            exam_name=self.exam_name,
            department=self.department,
            semester=self.semester,
            subject_title=self.subject_title,
            regulation=self.regulation,
            time=self.time,
            max_marks=self.max_marks,
        )
