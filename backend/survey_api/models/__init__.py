"""SQLAlchemy model package."""

from survey_api.models.user import User
from survey_api.models.survey import Survey, Question, Choice
from survey_api.models.response import SurveyResponse, Answer
from survey_api.models.teacher_student import TeacherStudent

__all__ = [
    "User",
    "Survey", "Question", "Choice",
    "SurveyResponse", "Answer",
    "TeacherStudent",
]
