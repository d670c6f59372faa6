"""Response domain SQLAlchemy models: one submission per respondent and its per-question answers."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from survey_api.database import Base
from survey_api.models.survey import new_public_id, utcnow


class SurveyResponse(Base):
    __tablename__ = "responses"

    response_id = Column(String(32), primary_key=True, default=new_public_id)
    survey_id = Column(String(32), ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    respondent_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    submitted_at = Column(DateTime, nullable=False, default=utcnow)

    answers = relationship("Answer", back_populates="response", order_by="Answer.answer_id.asc()")
    respondent = relationship("User")

    __table_args__ = (
        UniqueConstraint("survey_id", "respondent_id", name="uq_response_survey_respondent"),
        Index("idx_responses_survey_submitted", "survey_id", "submitted_at"),
    )


class Answer(Base):
    __tablename__ = "answers"

    answer_id = Column(Integer, primary_key=True, autoincrement=True)
    response_id = Column(String(32), ForeignKey("responses.response_id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    value = Column(Text, nullable=True)
    # "text" or "json"; NULL for rows written before values were tagged.
    value_kind = Column(String(10), nullable=True)

    response = relationship("SurveyResponse", back_populates="answers")

    __table_args__ = (
        Index("idx_answers_question", "question_id"),
    )
