"""Survey response submission, owner listing and participation checks."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from survey_api.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from survey_api.models.response import Answer, SurveyResponse
from survey_api.models.survey import Question, Survey
from survey_api.models.user import User
from survey_api.schemas.response import ResponseSubmit
from survey_api.services import roster_service
from survey_api.utils.answer_values import decode_answer_value, encode_answer_value
from survey_api.utils.permissions import TEACHER, is_owner, is_student, is_teacher

logger = logging.getLogger(__name__)


def _get_survey(db: Session, survey_id: str) -> Survey:
    survey = db.query(Survey).filter(Survey.survey_id == str(survey_id)).first()
    if not survey:
        raise NotFoundError("Survey not found.", code="SURVEY_NOT_FOUND")
    return survey


def _find_response(db: Session, survey_id: str, respondent_id: int):
    return (
        db.query(SurveyResponse)
        .filter(SurveyResponse.survey_id == survey_id, SurveyResponse.respondent_id == respondent_id)
        .first()
    )


def _already_participated(response: SurveyResponse) -> ConflictError:
    return ConflictError(
        "You have already participated in this survey.",
        code="ALREADY_PARTICIPATED",
        submittedAt=response.submitted_at.isoformat(),
    )


def submit_response(db: Session, survey_id: str, data: ResponseSubmit, current_user: User) -> dict:
    if not data.answers:
        raise ValidationError("At least one answer is required.", code="MISSING_ANSWERS")
    survey = _get_survey(db, survey_id)

    existing = _find_response(db, survey.survey_id, current_user.user_id)
    if existing:
        raise _already_participated(existing)

    question_ids = {
        row[0] for row in db.query(Question.question_id).filter(Question.survey_id == survey.survey_id).all()
    }
    for index, answer in enumerate(data.answers, start=1):
        if answer.question_id is None or answer.value is None:
            raise ValidationError(f"Answer {index}: questionId and value are required.")
        if answer.question_id not in question_ids:
            raise ValidationError(
                f"Answer {index}: question {answer.question_id} does not belong to this survey.",
                questionId=answer.question_id,
            )

    try:
        response = SurveyResponse(survey_id=survey.survey_id, respondent_id=current_user.user_id)
        db.add(response)
        db.flush()
        for answer in data.answers:
            stored, kind = encode_answer_value(answer.value)
            db.add(Answer(
                response_id=response.response_id,
                question_id=answer.question_id,
                value=stored,
                value_kind=kind,
            ))
        if is_student(current_user) and survey.owner and survey.owner.role == TEACHER:
            link = roster_service.link_student(db, survey.owner_id, current_user.user_id, survey.survey_id)
            if link is not None:
                logger.info("[roster] student %s linked to teacher %s", current_user.user_id, survey.owner_id)
        db.commit()
    except IntegrityError:
        # A concurrent submission by the same respondent won the unique constraint.
        db.rollback()
        existing = _find_response(db, survey.survey_id, current_user.user_id)
        if existing:
            raise _already_participated(existing)
        raise
    except Exception:
        db.rollback()
        raise
    db.refresh(response)
    logger.info("[survey] response %s submitted to %s by user %s", response.response_id, survey.survey_id, current_user.user_id)
    return {
        "success": True,
        "message": "Response submitted.",
        "response_id": response.response_id,
        "submitted_at": response.submitted_at,
    }


def list_responses(db: Session, survey_id: str, current_user: User) -> list[dict]:
    survey = _get_survey(db, survey_id)
    if not is_teacher(current_user) or not is_owner(current_user, survey.owner_id):
        raise ForbiddenError("Only the survey owner can view its responses.")

    questions = {
        row.question_id: row
        for row in db.query(Question).filter(Question.survey_id == survey.survey_id).all()
    }
    responses = (
        db.query(SurveyResponse)
        .options(joinedload(SurveyResponse.respondent), joinedload(SurveyResponse.answers))
        .filter(SurveyResponse.survey_id == survey.survey_id)
        .order_by(SurveyResponse.submitted_at.desc(), SurveyResponse.response_id.asc())
        .all()
    )
    result = []
    for response in responses:
        answers = []
        for answer in response.answers:
            question = questions.get(answer.question_id)
            if question is None:
                continue
            answers.append({
                "question_id": answer.question_id,
                "question_text": question.question_text,
                "question_type": question.question_type,
                "value": decode_answer_value(answer.value, answer.value_kind),
            })
        result.append({
            "id": response.response_id,
            "respondent": {
                "id": response.respondent.user_id,
                "name": response.respondent.name,
                "email": response.respondent.email,
            },
            "submitted_at": response.submitted_at,
            "answers": answers,
        })
    return result


def check_participation(db: Session, survey_id: str, current_user: User) -> dict:
    response = _find_response(db, str(survey_id), current_user.user_id)
    return {
        "has_participated": response is not None,
        "submitted_at": response.submitted_at if response else None,
    }
