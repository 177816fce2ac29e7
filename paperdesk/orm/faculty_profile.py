"""
paperdesk/orm/faculty_profile.py
Faculty directory record.

The workflow only reads faculty_id and full_name; the remaining columns are the
extended faculty details captured at registration.
"""
from sqlalchemy import Column, String, Text, UniqueConstraint, Index

from paperdesk.orm.base import BaseModel


class FacultyProfile(BaseModel):
    """
    Canonical identity/profile record of a faculty member.

    Attributes:
        faculty_id: Department-issued identifier (unique key)
        full_name: Canonical display name, cross-checked on assignment
        username: Login name of the account the profile belongs to
        remaining columns: contact, campus, bank and academic details
    """
    __tablename__ = "faculty_profiles"

    faculty_id = Column(String(50), nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    username = Column(String(80), nullable=True)
    dob = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)

    # Campus
    campus = Column(String(100), nullable=True)
    campus_name = Column(String(200), nullable=True)

    # Contact
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    alt_phone = Column(String(30), nullable=True)

    # Bank details (remuneration for setting / scrutiny duty)
    bank_account = Column(String(40), nullable=True)
    ifsc = Column(String(20), nullable=True)
    micr = Column(String(20), nullable=True)
    branch_name = Column(String(200), nullable=True)
    branch_address = Column(Text, nullable=True)

    # Academic
    qualification = Column(String(200), nullable=True)
    expertise = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("faculty_id", name="uq_faculty_profile_faculty_id"),
        Index("idx_faculty_profile_username", "username"),
    )

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "facultyId": self.faculty_id,
            "fullName": self.full_name,
            "username": self.username,
            "dob": self.dob,
            "address": self.address,
            "campus": self.campus,
            "campusName": self.campus_name,
            "email": self.email,
            "phone": self.phone,
            "altPhone": self.alt_phone,
            "bankAccount": self.bank_account,
            "ifsc": self.ifsc,
            "micr": self.micr,
            "branchName": self.branch_name,
            "branchAddress": self.branch_address,
            "qualification": self.qualification,
            "expertise": self.expertise,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
