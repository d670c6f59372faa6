"""Teacher roster service: linking students to the teacher whose surveys they answered."""

import logging

from sqlalchemy.orm import Session, joinedload

from survey_api.errors import NotFoundError, ValidationError
from survey_api.models.response import SurveyResponse
from survey_api.models.survey import Survey
from survey_api.models.teacher_student import TeacherStudent
from survey_api.models.user import User
from survey_api.utils.permissions import STUDENT

logger = logging.getLogger(__name__)


def link_student(db: Session, teacher_id: int, student_id: int, survey_id: str | None = None):
    """Stage a teacher/student link; returns ``None`` when the pair is already linked."""
    existing = (
        db.query(TeacherStudent.link_id)
        .filter(TeacherStudent.teacher_id == teacher_id, TeacherStudent.student_id == student_id)
        .first()
    )
    if existing:
        return None
    link = TeacherStudent(teacher_id=teacher_id, student_id=student_id, survey_id=survey_id)
    db.add(link)
    db.flush()
    return link


def _link_payload(link: TeacherStudent) -> dict:
    return {
        "id": link.link_id,
        "student_id": link.student_id,
        "name": link.student.name,
        "email": link.student.email,
        "added_at": link.added_at,
        "survey_id": link.survey_id,
        "survey_title": link.survey.title if link.survey else None,
    }


def list_students(db: Session, current_user: User) -> dict:
    links = (
        db.query(TeacherStudent)
        .join(User, User.user_id == TeacherStudent.student_id)
        .options(joinedload(TeacherStudent.student), joinedload(TeacherStudent.survey))
        .filter(TeacherStudent.teacher_id == current_user.user_id)
        .order_by(User.name.asc(), TeacherStudent.link_id.asc())
        .all()
    )
    return {"success": True, "data": [_link_payload(link) for link in links]}


def add_students_by_survey(db: Session, survey_id: str | None, current_user: User) -> dict:
    if not survey_id:
        raise ValidationError("surveyId is required.")
    survey = (
        db.query(Survey)
        .filter(Survey.survey_id == str(survey_id), Survey.owner_id == current_user.user_id)
        .first()
    )
    if not survey:
        raise NotFoundError(
            "Survey not found or you do not have permission to access it.",
            code="SURVEY_NOT_FOUND",
        )

    participants = (
        db.query(User)
        .join(SurveyResponse, SurveyResponse.respondent_id == User.user_id)
        .filter(SurveyResponse.survey_id == survey.survey_id, User.role == STUDENT)
        .order_by(SurveyResponse.submitted_at.asc())
        .all()
    )
    if not participants:
        raise NotFoundError("No student participants found for this survey.", code="NO_PARTICIPANTS")

    try:
        added = []
        for student in participants:
            link = link_student(db, current_user.user_id, student.user_id, survey.survey_id)
            if link is not None:
                added.append(link)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for link in added:
        db.refresh(link)
    logger.info("[roster] teacher %s linked %d students via survey %s", current_user.user_id, len(added), survey.survey_id)
    return {
        "success": True,
        "message": f"{len(added)} students added.",
        "data": [_link_payload(link) for link in added],
    }


def remove_student(db: Session, student_id: int, current_user: User) -> dict:
    link = (
        db.query(TeacherStudent)
        .filter(TeacherStudent.teacher_id == current_user.user_id, TeacherStudent.student_id == student_id)
        .first()
    )
    if not link:
        raise NotFoundError("Student is not linked to this teacher.", code="STUDENT_NOT_LINKED")
    db.delete(link)
    db.commit()
    logger.info("[roster] teacher %s removed student %s", current_user.user_id, student_id)
    return {"success": True, "message": "Student removed."}
