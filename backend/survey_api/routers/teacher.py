"""Teacher API router: own surveys and the student roster."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from survey_api.database import get_db
from survey_api.middleware.auth_middleware import require_roles
from survey_api.models.user import User
from survey_api.schemas.roster import AddBySurveyOut, AddBySurveyRequest, MessageOut, StudentLinkListOut
from survey_api.schemas.survey import SurveyTreeOut
from survey_api.services import roster_service, survey_service
from survey_api.utils.permissions import TEACHER

router = APIRouter(prefix="/api/teacher", tags=["teacher"])


@router.get("/surveys", response_model=List[SurveyTreeOut])
def list_my_surveys(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(TEACHER)),
):
    return survey_service.list_teacher_surveys(db, current_user)


@router.get("/students", response_model=StudentLinkListOut)
def list_students(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(TEACHER)),
):
    return roster_service.list_students(db, current_user)


@router.post("/students/add-by-survey", response_model=AddBySurveyOut)
def add_students_by_survey(
    data: AddBySurveyRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(TEACHER)),
):
    return roster_service.add_students_by_survey(db, data.survey_id, current_user)


@router.delete("/students/{student_id}", response_model=MessageOut)
def remove_student(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(TEACHER)),
):
    return roster_service.remove_student(db, student_id, current_user)
