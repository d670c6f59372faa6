"""Auth API router. Validates requests and delegates to the auth service."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from survey_api.database import get_db
from survey_api.schemas.user import (
    AuthMessageOut,
    ForgotPasswordRequest,
    LoginRequest,
    ProfileOut,
    RegisterOut,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    VerifyEmailOut,
)
from survey_api.services import auth_service
from survey_api.middleware.auth_middleware import get_current_user
from survey_api.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, request)
    return {"message": "Registration successful.", "user_id": user.user_id}


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.login(db, request)
    token = auth_service.create_access_token(user)
    return {
        "message": "Logged in successfully.",
        "token": token,
        "user": auth_service.user_payload(user),
    }


@router.get("/profile", response_model=ProfileOut)
def profile(current_user: User = Depends(get_current_user)):
    return {"user": auth_service.user_payload(current_user), "is_authenticated": True}


@router.get("/verify-email", response_model=VerifyEmailOut)
def verify_email(token: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return auth_service.verify_email(db, token)


@router.post("/forgot-password", response_model=AuthMessageOut)
def forgot_password(request: ForgotPasswordRequest, db: Session = Depends(get_db)):
    return auth_service.request_password_reset(db, request.email)


@router.post("/reset-password", response_model=AuthMessageOut)
def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    return auth_service.reset_password(db, request.token, request.new_password)
