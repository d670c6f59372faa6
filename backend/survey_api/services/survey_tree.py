"""Builds nested survey -> question -> choice trees from flat left-joined rows.

The store query joins surveys with their questions and the questions' choices
and orders the result by survey, question id and choice id. Each result row is
turned into a :class:`SurveyRow` at the store boundary; the assembler then walks
the rows once with a survey cursor and a question cursor. It never re-sorts.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from survey_api.errors import NotFoundError
from survey_api.models.survey import Choice, Question, Survey


@dataclass(frozen=True)
class QuestionPart:
    id: int
    text: str
    type: str


@dataclass(frozen=True)
class ChoicePart:
    id: int
    text: str


@dataclass(frozen=True)
class SurveyRow:
    survey_id: str
    title: str
    description: Optional[str]
    owner_id: int
    created_at: datetime
    is_public: Any  # 0/1 (or bool) as returned by the driver
    access_type: str
    question: Optional[QuestionPart] = None
    choice: Optional[ChoicePart] = None

    @classmethod
    def from_result(cls, row) -> "SurveyRow":
        question = None
        choice = None
        if row.question_id is not None:
            question = QuestionPart(int(row.question_id), row.question_text, row.question_type)
            if row.choice_id is not None:
                choice = ChoicePart(int(row.choice_id), row.choice_text)
        return cls(
            survey_id=row.survey_id,
            title=row.title,
            description=row.description,
            owner_id=row.owner_id,
            created_at=row.created_at,
            is_public=row.is_public,
            access_type=row.access_type,
            question=question,
            choice=choice,
        )


def _tree_query(db: Session) -> Query:
    return (
        db.query(
            Survey.survey_id,
            Survey.title,
            Survey.description,
            Survey.owner_id,
            Survey.created_at,
            Survey.is_public,
            Survey.access_type,
            Question.question_id,
            Question.question_text,
            Question.question_type,
            Choice.choice_id,
            Choice.choice_text,
        )
        .outerjoin(Question, Question.survey_id == Survey.survey_id)
        .outerjoin(Choice, Choice.question_id == Question.question_id)
    )


def public_clause():
    """Public listing predicate: the legacy flag or the access type."""
    return or_(Survey.is_public == True, Survey.access_type == "public")  # noqa: E712


def fetch_survey_rows(db: Session, survey_id: str) -> list[SurveyRow]:
    rows = (
        _tree_query(db)
        .filter(Survey.survey_id == str(survey_id))
        .order_by(Question.question_id.asc(), Choice.choice_id.asc())
        .all()
    )
    return [SurveyRow.from_result(row) for row in rows]


def fetch_survey_list_rows(
    db: Session,
    *,
    owner_id: int | None = None,
    public_only: bool = False,
) -> list[SurveyRow]:
    query = _tree_query(db)
    if owner_id is not None:
        query = query.filter(Survey.owner_id == int(owner_id))
    if public_only:
        query = query.filter(public_clause())
    rows = query.order_by(
        Survey.created_at.desc(),
        Survey.survey_id.asc(),
        Question.question_id.asc(),
        Choice.choice_id.asc(),
    ).all()
    return [SurveyRow.from_result(row) for row in rows]


def _new_survey_node(row: SurveyRow) -> dict:
    return {
        "id": row.survey_id,
        "title": row.title,
        "description": row.description,
        "owner_id": row.owner_id,
        "created_at": row.created_at,
        "is_public": bool(row.is_public),
        "access_type": row.access_type,
        "questions": [],
    }


def _append_row(survey: dict, current_question: dict | None, row: SurveyRow) -> dict | None:
    """Adds the row's question/choice parts to ``survey``; returns the new question cursor."""
    if row.question is None:
        return current_question
    if current_question is None or current_question["id"] != row.question.id:
        current_question = {
            "id": row.question.id,
            "text": row.question.text,
            "type": row.question.type,
            "choices": [],
        }
        survey["questions"].append(current_question)
    if row.choice is not None:
        current_question["choices"].append({"id": row.choice.id, "text": row.choice.text})
    return current_question


def assemble_survey(rows: Iterable[SurveyRow]) -> dict:
    """Single survey mode: all rows belong to one survey."""
    survey = None
    current_question = None
    for row in rows:
        if survey is None:
            survey = _new_survey_node(row)
        current_question = _append_row(survey, current_question, row)
    if survey is None:
        raise NotFoundError("Survey not found.", code="SURVEY_NOT_FOUND")
    return survey


def assemble_surveys(rows: Iterable[SurveyRow]) -> list[dict]:
    """Multi survey mode: surveys in order of first appearance."""
    surveys = []
    current_survey = None
    current_question = None
    for row in rows:
        if current_survey is None or current_survey["id"] != row.survey_id:
            current_survey = _new_survey_node(row)
            surveys.append(current_survey)
            current_question = None
        current_question = _append_row(current_survey, current_question, row)
    return surveys
