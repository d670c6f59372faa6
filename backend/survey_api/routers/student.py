"""Student API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from survey_api.database import get_db
from survey_api.middleware.auth_middleware import require_roles
from survey_api.models.user import User
from survey_api.schemas.survey import StudentSurveyListOut
from survey_api.services import student_service
from survey_api.utils.permissions import STUDENT

router = APIRouter(prefix="/api/student", tags=["student"])


@router.get("/surveys", response_model=StudentSurveyListOut)
def list_surveys(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(STUDENT)),
):
    return student_service.list_student_surveys(db, current_user)
