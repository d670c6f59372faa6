"""Response submission and listing contracts."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from survey_api.schemas.base import CamelModel


class AnswerIn(CamelModel):
    question_id: Optional[int] = None
    value: Any = None


class ResponseSubmit(CamelModel):
    answers: List[AnswerIn] = Field(default_factory=list)


class ResponseCreatedOut(CamelModel):
    success: bool = True
    message: str
    response_id: str
    submitted_at: datetime


class RespondentOut(CamelModel):
    id: int
    name: str
    email: str


class ResponseAnswerOut(CamelModel):
    question_id: int
    question_text: str
    question_type: str
    value: Any = None


class SurveyResponseOut(CamelModel):
    id: str
    respondent: RespondentOut
    submitted_at: datetime
    answers: List[ResponseAnswerOut] = Field(default_factory=list)


class ParticipationOut(CamelModel):
    has_participated: bool
    submitted_at: Optional[datetime] = None
