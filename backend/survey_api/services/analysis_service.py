"""Per-question survey analysis: decoded answers plus option distributions."""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_api.errors import AggregationError, ForbiddenError, NotFoundError
from survey_api.models.response import Answer, SurveyResponse
from survey_api.models.survey import Choice, Question, Survey
from survey_api.models.user import User
from survey_api.schemas.survey import CHOICE_QUESTION_TYPES, MULTIPLE_CHOICE, SINGLE_CHOICE
from survey_api.utils.answer_values import decode_answer_value
from survey_api.utils.permissions import is_student

logger = logging.getLogger(__name__)


def resolve_option_index(value: Any, options: list[str]) -> int:
    """Map an answer value to an option index; -1 when it cannot be resolved.

    Numbers are used as the index directly (bools are not numbers here), strings
    are looked up among the option texts.
    """
    if isinstance(value, bool):
        return -1
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else -1
    if isinstance(value, str):
        try:
            return options.index(value)
        except ValueError:
            return -1
    return -1


def compute_distribution(question_type: str, options: list[str], values: list[Any]) -> list[int]:
    distribution = [0] * len(options)

    def _count(value):
        index = resolve_option_index(value, options)
        if 0 <= index < len(distribution):
            distribution[index] += 1

    for value in values:
        if question_type == SINGLE_CHOICE:
            _count(value)
        elif question_type == MULTIPLE_CHOICE and isinstance(value, list):
            for item in value:
                _count(item)
    return distribution


def _load_questions(db: Session, survey: Survey) -> list[dict]:
    questions = (
        db.query(Question)
        .filter(Question.survey_id == survey.survey_id)
        .order_by(Question.question_id.asc())
        .all()
    )
    question_ids = [row.question_id for row in questions]

    options_by_question: dict[int, list[str]] = {}
    if question_ids:
        choice_rows = (
            db.query(Choice.question_id, Choice.choice_text)
            .filter(Choice.question_id.in_(question_ids))
            .order_by(Choice.question_id.asc(), Choice.choice_id.asc())
            .all()
        )
        for question_id, text in choice_rows:
            options_by_question.setdefault(question_id, []).append(text)

    answers_by_question: dict[int, list[dict]] = {}
    if question_ids:
        answer_rows = (
            db.query(SurveyResponse.respondent_id, Answer.question_id, Answer.value, Answer.value_kind)
            .select_from(Answer)
            .join(SurveyResponse, SurveyResponse.response_id == Answer.response_id)
            .filter(
                SurveyResponse.survey_id == survey.survey_id,
                Answer.question_id.in_(question_ids),
            )
            .order_by(SurveyResponse.submitted_at.asc(), Answer.answer_id.asc())
            .all()
        )
        for respondent_id, question_id, raw, kind in answer_rows:
            if raw is None:
                continue
            answers_by_question.setdefault(question_id, []).append(
                {"respondent_id": respondent_id, "value": decode_answer_value(raw, kind)}
            )

    result = []
    for question in questions:
        responses = answers_by_question.get(question.question_id, [])
        node = {
            "id": question.question_id,
            "text": question.question_text,
            "type": question.question_type,
            "total_responses": len(responses),
            "responses": responses,
        }
        if question.question_type in CHOICE_QUESTION_TYPES:
            options = options_by_question.get(question.question_id, [])
            node["options"] = options
            node["answer_distribution"] = compute_distribution(
                question.question_type,
                options,
                [item["value"] for item in responses],
            )
        result.append(node)
    return result


def _get_survey(db: Session, survey_id: str) -> Survey:
    try:
        survey = db.query(Survey).filter(Survey.survey_id == str(survey_id)).first()
    except SQLAlchemyError as exc:
        logger.error("[analysis] survey %s lookup failed: %s", survey_id, exc)
        raise AggregationError(str(survey_id), exc) from exc
    if not survey:
        raise NotFoundError("Survey not found.", code="SURVEY_NOT_FOUND")
    return survey


def _build_analysis(db: Session, survey: Survey) -> dict:
    try:
        questions = _load_questions(db, survey)
        total_responses = (
            db.query(func.count(SurveyResponse.response_id))
            .filter(SurveyResponse.survey_id == survey.survey_id)
            .scalar()
        )
    except SQLAlchemyError as exc:
        logger.error("[analysis] survey %s failed: %s", survey.survey_id, exc)
        raise AggregationError(survey.survey_id, exc) from exc
    return {
        "id": survey.survey_id,
        "title": survey.title,
        "total_responses": int(total_responses or 0),
        "questions": questions,
    }


def analyze_survey(db: Session, survey_id: str) -> dict:
    return _build_analysis(db, _get_survey(db, survey_id))


def get_analysis(db: Session, survey_id: str, current_user: User) -> dict:
    """Analysis as seen by ``current_user``; students must have answered first."""
    survey = _get_survey(db, survey_id)
    if is_student(current_user):
        participated = (
            db.query(SurveyResponse.response_id)
            .filter(
                SurveyResponse.survey_id == survey.survey_id,
                SurveyResponse.respondent_id == current_user.user_id,
            )
            .first()
        )
        if not participated:
            raise ForbiddenError(
                "Only participants can view the results of this survey.",
                code="PARTICIPATION_REQUIRED",
            )
    return _build_analysis(db, survey)
