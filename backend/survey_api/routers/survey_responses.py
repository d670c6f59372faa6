"""Survey response API router: submit, owner listing and participation check."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from survey_api.database import get_db
from survey_api.middleware.auth_middleware import get_current_user
from survey_api.models.user import User
from survey_api.schemas.response import (
    ParticipationOut,
    ResponseCreatedOut,
    ResponseSubmit,
    SurveyResponseOut,
)
from survey_api.services import response_service

router = APIRouter(prefix="/api/surveys", tags=["survey-responses"])


@router.post("/{survey_id}/responses", response_model=ResponseCreatedOut, status_code=status.HTTP_201_CREATED)
def submit_response(
    survey_id: str,
    data: ResponseSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return response_service.submit_response(db, survey_id, data, current_user)


@router.get("/{survey_id}/responses", response_model=List[SurveyResponseOut])
def list_responses(
    survey_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return response_service.list_responses(db, survey_id, current_user)


@router.get("/{survey_id}/responses/check", response_model=ParticipationOut)
def check_participation(
    survey_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return response_service.check_participation(db, survey_id, current_user)
