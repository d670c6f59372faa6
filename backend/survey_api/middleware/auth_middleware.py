from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from survey_api.database import get_db
from survey_api.errors import ForbiddenError, UnauthorizedError
from survey_api.models.user import User
from survey_api.config import settings

# auto_error is off so a missing header is reported as MISSING_TOKEN, not a bare 403.
security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        raise UnauthorizedError("Invalid or expired token.", code="INVALID_TOKEN")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("No authentication token provided.", code="MISSING_TOKEN")
    payload = decode_token(credentials.credentials)
    # Verification and reset tokens are not session tokens.
    if payload.get("purpose"):
        raise UnauthorizedError("Invalid token type.", code="INVALID_TOKEN")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token payload.", code="INVALID_TOKEN")

    user = db.query(User).filter(User.user_id == user_id, User.is_active == True).first()  # noqa: E712
    if not user:
        raise UnauthorizedError("User not found or inactive.", code="INVALID_TOKEN")
    return user


def require_roles(*roles: str):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise ForbiddenError(
                f"Requires role: {', '.join(roles)}",
                userRole=current_user.role,
            )
        return current_user
    return checker
