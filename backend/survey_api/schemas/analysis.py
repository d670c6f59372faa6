"""Analysis payload contracts."""

from typing import Any, List, Optional

from pydantic import Field

from survey_api.schemas.base import CamelModel


class RespondentValueOut(CamelModel):
    respondent_id: int
    value: Any


class QuestionAnalysisOut(CamelModel):
    id: int
    text: str
    type: str
    total_responses: int = 0
    options: Optional[List[str]] = None
    responses: List[RespondentValueOut] = Field(default_factory=list)
    answer_distribution: Optional[List[int]] = None


class SurveyAnalysisOut(CamelModel):
    id: str
    title: str
    total_responses: int = 0
    questions: List[QuestionAnalysisOut] = Field(default_factory=list)
