"""
Faculty directory API schemas
"""
from typing import Optional

from paperdesk.schemas.base import CamelModel


class FacultyProfileCreate(CamelModel):
    """Request schema for registering a faculty member."""
    faculty_id: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    dob: Optional[str] = None
    address: Optional[str] = None
    campus: Optional[str] = None
    campus_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    alt_phone: Optional[str] = None
    bank_account: Optional[str] = None
    ifsc: Optional[str] = None
    micr: Optional[str] = None
    branch_name: Optional[str] = None
    branch_address: Optional[str] = None
    qualification: Optional[str] = None
    expertise: Optional[str] = None

    def details(self) -> dict:
        return self.model_dump(exclude={"faculty_id", "full_name"}, exclude_none=True)
