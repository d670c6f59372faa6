"""Survey domain SQLAlchemy models: surveys, their questions and the questions' choices."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from survey_api.database import Base


def new_public_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.utcnow()


class Survey(Base):
    __tablename__ = "surveys"

    survey_id = Column(String(32), primary_key=True, default=new_public_id)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    owner_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False, server_default="0")
    access_type = Column(String(20), nullable=False, default="public", server_default="public")  # public/students_only/private
    # Python side default keeps sub-second ordering for "newest first" listings.
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    owner = relationship("User", back_populates="surveys")
    questions = relationship(
        "Question",
        back_populates="survey",
        order_by="Question.question_id.asc()",
    )

    __table_args__ = (
        Index("idx_surveys_owner_created", "owner_id", "created_at"),
    )


class Question(Base):
    __tablename__ = "questions"

    question_id = Column(Integer, primary_key=True, autoincrement=True)
    survey_id = Column(String(32), ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(30), nullable=False)  # TEXT/SINGLE_CHOICE/MULTIPLE_CHOICE

    survey = relationship("Survey", back_populates="questions")
    choices = relationship(
        "Choice",
        back_populates="question",
        order_by="Choice.choice_id.asc()",
    )

    __table_args__ = (
        Index("idx_questions_survey", "survey_id"),
    )


class Choice(Base):
    __tablename__ = "choices"

    choice_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    choice_text = Column(Text, nullable=False)

    question = relationship("Question", back_populates="choices")

    __table_args__ = (
        Index("idx_choices_question", "question_id"),
    )
