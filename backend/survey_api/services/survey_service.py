"""Survey service layer: listings, create/update with question replacement, cascade delete."""

import logging
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_api.config import settings
from survey_api.errors import NotFoundError, StoreError, ValidationError
from survey_api.models.response import Answer, SurveyResponse
from survey_api.models.survey import Choice, Question, Survey, utcnow
from survey_api.models.teacher_student import TeacherStudent
from survey_api.models.user import User
from survey_api.schemas.survey import CHOICE_QUESTION_TYPES, QUESTION_TYPES, SurveyCreate, SurveyUpdate
from survey_api.services.survey_tree import (
    assemble_survey,
    assemble_surveys,
    fetch_survey_list_rows,
    fetch_survey_rows,
    public_clause,
)

logger = logging.getLogger(__name__)

DEFAULT_CHOICES = ("Option 1", "Option 2")


class DeleteState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    DELETING_RESPONSES = "deleting_responses"
    DELETING_CHOICES = "deleting_choices"
    DELETING_QUESTIONS = "deleting_questions"
    DELETING_SURVEY = "deleting_survey"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


def _get_owned_survey(db: Session, survey_id: str, current_user: User) -> Survey:
    survey = db.query(Survey).filter(Survey.survey_id == str(survey_id)).first()
    if not survey or int(survey.owner_id) != int(current_user.user_id):
        raise NotFoundError(
            "Survey not found or you do not have permission to modify it.",
            code="SURVEY_NOT_FOUND",
        )
    return survey


def _resolve_access_type(data) -> str:
    if data.access_type:
        return data.access_type
    return "public" if data.is_public else "private"


# ---------------------------------------------------------------------------
# Listings


def list_public_surveys(db: Session) -> list[dict]:
    return assemble_surveys(fetch_survey_list_rows(db, public_only=True))


def list_teacher_surveys(db: Session, current_user: User) -> list[dict]:
    return assemble_surveys(fetch_survey_list_rows(db, owner_id=current_user.user_id))


def get_survey(db: Session, survey_id: str) -> dict:
    return assemble_survey(fetch_survey_rows(db, survey_id))


def summarize_surveys(db: Session, surveys: list[Survey]) -> list[dict]:
    """Flat survey cards with owner name, question count and response count."""
    survey_ids = [row.survey_id for row in surveys]
    if not survey_ids:
        return []
    question_counts = dict(
        db.query(Question.survey_id, func.count(Question.question_id))
        .filter(Question.survey_id.in_(survey_ids))
        .group_by(Question.survey_id)
        .all()
    )
    response_counts = dict(
        db.query(SurveyResponse.survey_id, func.count(SurveyResponse.response_id))
        .filter(SurveyResponse.survey_id.in_(survey_ids))
        .group_by(SurveyResponse.survey_id)
        .all()
    )
    owner_ids = {int(row.owner_id) for row in surveys}
    owner_names = dict(
        db.query(User.user_id, User.name).filter(User.user_id.in_(owner_ids)).all()
    )
    return [
        {
            "id": row.survey_id,
            "title": row.title,
            "description": row.description,
            "owner_id": row.owner_id,
            "owner_name": owner_names.get(row.owner_id),
            "created_at": row.created_at,
            "is_public": bool(row.is_public),
            "access_type": row.access_type,
            "total_questions": int(question_counts.get(row.survey_id, 0)),
            "response_count": int(response_counts.get(row.survey_id, 0)),
        }
        for row in surveys
    ]


def list_recommended(db: Session, limit: int | None = None) -> dict:
    limit = limit or settings.RECOMMENDED_SURVEY_LIMIT
    surveys = (
        db.query(Survey)
        .filter(public_clause())
        .order_by(Survey.created_at.desc(), Survey.survey_id.asc())
        .limit(limit)
        .all()
    )
    return {"success": True, "data": summarize_surveys(db, surveys)}


# ---------------------------------------------------------------------------
# Create / update


def _question_choices(index: int, question) -> list[str]:
    if question.choices:
        texts = []
        for choice_index, choice in enumerate(question.choices, start=1):
            text = (choice.text or "").strip()
            if not text:
                raise ValidationError(
                    f"Question {index}, choice {choice_index}: choice text is required."
                )
            texts.append(text)
        return texts
    if question.options:
        texts = []
        for choice_index, option in enumerate(question.options, start=1):
            text = str(option or "").strip()
            if not text:
                raise ValidationError(
                    f"Question {index}, choice {choice_index}: choice text is required."
                )
            texts.append(text)
        return texts
    return list(DEFAULT_CHOICES)


def _insert_questions(db: Session, survey_id: str, questions) -> list[dict]:
    """Insert questions in order; caller owns the transaction."""
    created = []
    for index, question in enumerate(questions, start=1):
        text = (question.text or "").strip()
        if not text or not question.type:
            raise ValidationError(f"Question {index}: text and type are required.")
        if question.type not in QUESTION_TYPES:
            raise ValidationError(
                f"Question {index}: unknown question type '{question.type}'.",
                allowedTypes=list(QUESTION_TYPES),
            )
        row = Question(survey_id=survey_id, question_text=text, question_type=question.type)
        db.add(row)
        db.flush()
        node = {"id": row.question_id, "text": text, "type": row.question_type, "choices": []}
        # Choices sent with a TEXT question are ignored.
        if question.type in CHOICE_QUESTION_TYPES:
            for choice_text in _question_choices(index, question):
                choice = Choice(question_id=row.question_id, choice_text=choice_text)
                db.add(choice)
                db.flush()
                node["choices"].append({"id": choice.choice_id, "text": choice_text})
        created.append(node)
    return created


def create_survey(db: Session, data: SurveyCreate, current_user: User) -> dict:
    title = data.title.strip()
    if not title:
        raise ValidationError("Survey title is required.")
    try:
        survey = Survey(
            title=title,
            description=data.description,
            owner_id=current_user.user_id,
            is_public=bool(data.is_public),
            access_type=_resolve_access_type(data),
        )
        db.add(survey)
        db.flush()
        questions = _insert_questions(db, survey.survey_id, data.questions)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("[survey] created %s by user %s (%d questions)", survey.survey_id, current_user.user_id, len(questions))
    return {
        "success": True,
        "message": "Survey created.",
        "survey_id": survey.survey_id,
        "questions": questions,
    }


def _clear_questions(db: Session, survey_id: str):
    _delete_choices(db, survey_id)
    _delete_questions(db, survey_id)


def update_survey(db: Session, survey_id: str, data: SurveyUpdate, current_user: User) -> dict:
    survey = _get_owned_survey(db, survey_id, current_user)
    title = data.title.strip()
    if not title:
        raise ValidationError("Survey title is required.")
    try:
        survey.title = title
        survey.description = data.description
        survey.is_public = bool(data.is_public)
        # An update without accessType keeps the stored one.
        if data.access_type:
            survey.access_type = data.access_type
        survey.updated_at = utcnow()
        _clear_questions(db, survey.survey_id)
        _insert_questions(db, survey.survey_id, data.questions)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("[survey] updated %s by user %s", survey.survey_id, current_user.user_id)
    db.refresh(survey)
    tree = get_survey(db, survey.survey_id)
    tree["updated_at"] = survey.updated_at
    return tree


# ---------------------------------------------------------------------------
# Delete cascade


def _question_ids(survey_id: str):
    return select(Question.question_id).where(Question.survey_id == survey_id)


def _delete_responses(db: Session, survey_id: str):
    response_ids = select(SurveyResponse.response_id).where(SurveyResponse.survey_id == survey_id)
    db.query(Answer).filter(Answer.response_id.in_(response_ids)).delete(synchronize_session=False)
    db.query(SurveyResponse).filter(SurveyResponse.survey_id == survey_id).delete(synchronize_session=False)


def _delete_choices(db: Session, survey_id: str):
    db.query(Choice).filter(Choice.question_id.in_(_question_ids(survey_id))).delete(synchronize_session=False)


def _delete_questions(db: Session, survey_id: str):
    db.query(Answer).filter(Answer.question_id.in_(_question_ids(survey_id))).delete(synchronize_session=False)
    db.query(Question).filter(Question.survey_id == survey_id).delete(synchronize_session=False)


def _delete_survey_row(db: Session, survey_id: str):
    db.query(TeacherStudent).filter(TeacherStudent.survey_id == survey_id).update(
        {TeacherStudent.survey_id: None}, synchronize_session=False
    )
    db.query(Survey).filter(Survey.survey_id == survey_id).delete(synchronize_session=False)


def _enter(survey_id: str, state: DeleteState) -> DeleteState:
    logger.debug("[survey] delete %s: %s", survey_id, state.value)
    return state


def delete_survey(db: Session, survey_id: str, current_user: User) -> DeleteState:
    """Delete a survey and everything under it in one transaction.

    Returns the final state, ``COMMITTED`` on success. Any store failure rolls
    back every step and surfaces as :class:`StoreError`.
    """
    state = _enter(survey_id, DeleteState.IDLE)
    state = _enter(survey_id, DeleteState.VALIDATING)
    survey = _get_owned_survey(db, survey_id, current_user)
    target = survey.survey_id

    steps = (
        (DeleteState.DELETING_RESPONSES, _delete_responses),
        (DeleteState.DELETING_CHOICES, _delete_choices),
        (DeleteState.DELETING_QUESTIONS, _delete_questions),
        (DeleteState.DELETING_SURVEY, _delete_survey_row),
    )
    try:
        for next_state, step in steps:
            state = _enter(target, next_state)
            step(db, target)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[survey] delete %s failed while %s: %s", target, state.value, exc)
        _enter(target, DeleteState.ROLLED_BACK)
        raise StoreError(f"Failed to delete survey {target}.", surveyId=target) from exc
    logger.info("[survey] deleted %s by user %s", target, current_user.user_id)
    return _enter(target, DeleteState.COMMITTED)
