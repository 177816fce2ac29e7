"""
Scrutiny API schemas
"""
from typing import Optional

from paperdesk.schemas.base import CamelModel


class ScrutinizerAssign(CamelModel):
    scrutinizer_id: Optional[str] = None
    scrutinizer_name: Optional[str] = None


class ScrutinyRequestAnswer(CamelModel):
    """accepted | rejected"""
    response: Optional[str] = None


class ScrutinyVerdict(CamelModel):
    """approved | rejected, with mandatory remarks"""
    remarks: Optional[str] = None
    verdict: Optional[str] = None
