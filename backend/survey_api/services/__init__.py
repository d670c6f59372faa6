"""Service layer package."""

from survey_api.services import (
    auth_service,
    survey_tree,
    survey_service,
    analysis_service,
    response_service,
    roster_service,
    student_service,
)
