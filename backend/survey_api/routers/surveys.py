"""Survey API router: public listings, survey trees, mutations and analysis."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from survey_api.database import get_db
from survey_api.middleware.auth_middleware import get_current_user, require_roles
from survey_api.models.user import User
from survey_api.schemas.analysis import SurveyAnalysisOut
from survey_api.schemas.survey import (
    SurveyCreate,
    SurveyCreatedOut,
    SurveySummaryListOut,
    SurveyTreeOut,
    SurveyUpdate,
)
from survey_api.services import analysis_service, survey_service
from survey_api.utils.permissions import TEACHER

router = APIRouter(prefix="/api/surveys", tags=["surveys"])


@router.get("", response_model=List[SurveyTreeOut])
def list_surveys(db: Session = Depends(get_db)):
    return survey_service.list_public_surveys(db)


@router.get("/recommended", response_model=SurveySummaryListOut)
def list_recommended(db: Session = Depends(get_db)):
    return survey_service.list_recommended(db)


@router.get("/{survey_id}", response_model=SurveyTreeOut)
def get_survey(survey_id: str, db: Session = Depends(get_db)):
    return survey_service.get_survey(db, survey_id)


@router.post("", response_model=SurveyCreatedOut, status_code=status.HTTP_201_CREATED)
def create_survey(
    data: SurveyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(TEACHER)),
):
    return survey_service.create_survey(db, data, current_user)


@router.put("/{survey_id}", response_model=SurveyTreeOut)
def update_survey(
    survey_id: str,
    data: SurveyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(TEACHER)),
):
    return survey_service.update_survey(db, survey_id, data, current_user)


@router.delete("/{survey_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_survey(
    survey_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(TEACHER)),
):
    survey_service.delete_survey(db, survey_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{survey_id}/analysis",
    response_model=SurveyAnalysisOut,
    response_model_exclude_none=True,
)
def get_analysis(
    survey_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analysis_service.get_analysis(db, survey_id, current_user)
