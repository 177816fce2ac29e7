"""
Assignment and response API schemas
"""
from typing import Optional

from paperdesk.schemas.base import CamelModel


class AssignmentCreate(CamelModel):
    """Request schema for offering a subject/duty to a faculty member."""
    faculty_id: Optional[str] = None
    faculty_name: Optional[str] = None
    subject_code: Optional[str] = None
    subject_name: Optional[str] = None
    regulation: Optional[str] = None
    role: Optional[str] = None
    deadline_date: Optional[str] = None


class ResponseSubmit(CamelModel):
    """Request schema for accepting (yes) or declining (no) an assignment."""
    faculty_id: Optional[str] = None
    subject_code: Optional[str] = None
    role: Optional[str] = None
    decision: Optional[str] = None
