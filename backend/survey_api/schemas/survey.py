"""Survey request/response contracts."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from survey_api.schemas.base import CamelModel


TEXT = "TEXT"
SINGLE_CHOICE = "SINGLE_CHOICE"
MULTIPLE_CHOICE = "MULTIPLE_CHOICE"

QUESTION_TYPES = (TEXT, SINGLE_CHOICE, MULTIPLE_CHOICE)
CHOICE_QUESTION_TYPES = (SINGLE_CHOICE, MULTIPLE_CHOICE)

AccessType = Literal["public", "students_only", "private"]


class ChoiceIn(CamelModel):
    text: Optional[str] = None


class QuestionIn(CamelModel):
    # text/type are checked by the service so the error can name the question index.
    text: Optional[str] = None
    type: Optional[str] = None
    choices: List[ChoiceIn] = Field(default_factory=list)
    options: List[str] = Field(default_factory=list)


class SurveyIn(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    is_public: bool = False
    access_type: Optional[AccessType] = None
    questions: List[QuestionIn] = Field(default_factory=list)


class SurveyCreate(SurveyIn):
    pass


class SurveyUpdate(SurveyIn):
    pass


class ChoiceOut(CamelModel):
    id: int
    text: str


class QuestionOut(CamelModel):
    id: int
    text: str
    type: str
    choices: List[ChoiceOut] = Field(default_factory=list)


class SurveyTreeOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    owner_id: int
    created_at: datetime
    is_public: bool = False
    access_type: str = "public"
    questions: List[QuestionOut] = Field(default_factory=list)
    updated_at: Optional[datetime] = None


class SurveyCreatedOut(CamelModel):
    success: bool = True
    message: str
    survey_id: str
    questions: List[QuestionOut] = Field(default_factory=list)


class SurveySummaryOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    owner_id: int
    owner_name: Optional[str] = None
    created_at: datetime
    is_public: bool = False
    access_type: str = "public"
    total_questions: int = 0
    response_count: int = 0


class SurveySummaryListOut(CamelModel):
    success: bool = True
    data: List[SurveySummaryOut] = Field(default_factory=list)


class StudentSurveyOut(SurveySummaryOut):
    is_from_teacher: bool = False
    status: Literal["open", "in_progress", "completed"] = "open"
    progress: int = 0
    answered_questions: int = 0


class StudentSurveyListOut(CamelModel):
    success: bool = True
    data: List[StudentSurveyOut] = Field(default_factory=list)
    timestamp: datetime
