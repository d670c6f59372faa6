"""Teacher roster contracts."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from survey_api.schemas.base import CamelModel


class StudentLinkOut(CamelModel):
    id: int
    student_id: int
    name: str
    email: str
    added_at: datetime
    survey_id: Optional[str] = None
    survey_title: Optional[str] = None


class StudentLinkListOut(CamelModel):
    success: bool = True
    data: List[StudentLinkOut] = Field(default_factory=list)


class AddBySurveyRequest(CamelModel):
    survey_id: Optional[str] = None


class AddBySurveyOut(CamelModel):
    success: bool = True
    message: str
    data: List[StudentLinkOut] = Field(default_factory=list)


class MessageOut(CamelModel):
    success: bool = True
    message: str
