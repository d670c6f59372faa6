"""Student dashboard: visible surveys with per-student progress."""

from datetime import datetime

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from survey_api.models.response import Answer, SurveyResponse
from survey_api.models.survey import Survey
from survey_api.models.teacher_student import TeacherStudent
from survey_api.models.user import User
from survey_api.services.survey_service import summarize_surveys
from survey_api.services.survey_tree import public_clause


def _linked_teacher_ids(db: Session, current_user: User) -> set[int]:
    return {
        int(row[0])
        for row in db.query(TeacherStudent.teacher_id)
        .filter(TeacherStudent.student_id == current_user.user_id)
        .all()
    }


def _progress(answered: int, total: int) -> tuple[str, int]:
    progress = int(answered * 100 / total + 0.5) if total > 0 else 0
    if total > 0 and answered >= total:
        return "completed", min(progress, 100)
    if answered > 0:
        return "in_progress", progress
    return "open", progress


def list_student_surveys(db: Session, current_user: User) -> dict:
    teacher_ids = _linked_teacher_ids(db, current_user)
    visibility = public_clause()
    if teacher_ids:
        visibility = or_(
            visibility,
            and_(Survey.access_type == "students_only", Survey.owner_id.in_(teacher_ids)),
        )
    surveys = (
        db.query(Survey)
        .filter(visibility)
        .order_by(Survey.created_at.desc(), Survey.survey_id.asc())
        .all()
    )
    # Surveys of linked teachers first; the sort is stable so newest-first holds within each group.
    surveys.sort(key=lambda row: 0 if int(row.owner_id) in teacher_ids else 1)

    answered_counts = dict(
        db.query(SurveyResponse.survey_id, func.count(func.distinct(Answer.question_id)))
        .join(Answer, Answer.response_id == SurveyResponse.response_id)
        .filter(
            SurveyResponse.respondent_id == current_user.user_id,
            SurveyResponse.survey_id.in_([row.survey_id for row in surveys]),
        )
        .group_by(SurveyResponse.survey_id)
        .all()
    ) if surveys else {}

    data = []
    for summary in summarize_surveys(db, surveys):
        answered = int(answered_counts.get(summary["id"], 0))
        status, progress = _progress(answered, summary["total_questions"])
        summary.update(
            is_from_teacher=int(summary["owner_id"]) in teacher_ids,
            status=status,
            progress=progress,
            answered_questions=answered,
        )
        data.append(summary)
    return {"success": True, "data": data, "timestamp": datetime.utcnow()}
