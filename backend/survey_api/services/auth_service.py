"""Account service layer: registration, password login, token issuing, e-mail verification and password reset."""

import hashlib
import logging
from datetime import datetime, timedelta
from urllib.parse import quote

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from survey_api.config import settings
from survey_api.errors import ConflictError, UnauthorizedError, ValidationError
from survey_api.models.user import User
from survey_api.schemas.user import LoginRequest, RegisterRequest
from survey_api.utils.permissions import ALL_ROLES

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def create_access_token(user: User) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user.user_id),
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def user_payload(user: User) -> dict:
    return {
        "id": int(user.user_id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "email_verified": bool(user.email_verified),
        "created_at": user.created_at,
        "last_login": user.last_login,
    }


def register_user(db: Session, data: RegisterRequest) -> User:
    role = str(data.role or "").strip().lower()
    if role not in ALL_ROLES:
        raise ValidationError("Role must be either 'teacher' or 'student'.")
    email = data.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("This e-mail address is already in use.", code="EMAIL_IN_USE")
    user = User(
        email=email,
        name=data.name.strip(),
        role=role,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("[auth] registered user %s (%s)", user.user_id, role)
    send_verification_link(user)
    return user


def login(db: Session, data: LoginRequest) -> User:
    email = str(data.email or "").strip().lower()
    user = db.query(User).filter(User.email == email, User.is_active == True).first()  # noqa: E712
    if not user or not verify_password(data.password, user.password_hash):
        logger.info("[auth] failed login for %s", email)
        raise UnauthorizedError("Invalid credentials.", code="INVALID_CREDENTIALS")
    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


# ---------------------------------------------------------------------------
# E-mail verification and password reset
#
# Both flows use short lived signed tokens instead of stored ones. The reset
# token carries a fingerprint of the current password hash, so it stops
# working once the password has been changed.

VERIFY_PURPOSE = "verify_email"
RESET_PURPOSE = "reset_password"


def _password_fingerprint(user: User) -> str:
    return hashlib.sha256(str(user.password_hash or "").encode()).hexdigest()[:16]


def _create_action_token(user: User, purpose: str, minutes: int) -> str:
    payload = {
        "sub": str(user.user_id),
        "purpose": purpose,
        "exp": datetime.utcnow() + timedelta(minutes=minutes),
    }
    if purpose == RESET_PURPOSE:
        payload["pwd"] = _password_fingerprint(user)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_verification_token(user: User) -> str:
    return _create_action_token(user, VERIFY_PURPOSE, settings.VERIFY_TOKEN_EXPIRE_MINUTES)


def create_reset_token(user: User) -> str:
    return _create_action_token(user, RESET_PURPOSE, settings.RESET_TOKEN_EXPIRE_MINUTES)


def _user_from_action_token(db: Session, token: str, purpose: str) -> User:
    invalid = ValidationError("Invalid or expired token.", code="INVALID_OR_EXPIRED_TOKEN")
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise invalid
    if payload.get("purpose") != purpose:
        raise invalid
    user = db.query(User).filter(User.user_id == user_id, User.is_active == True).first()  # noqa: E712
    if not user:
        raise invalid
    if purpose == RESET_PURPOSE and payload.get("pwd") != _password_fingerprint(user):
        raise invalid
    return user


def _deliver_link(kind: str, user: User, path: str, token: str) -> str:
    # No mail transport: the link is handed to the log for the operator.
    link = f"{settings.APP_URL.rstrip('/')}/{path}?token={token}"
    logger.info("[auth] %s link for %s: %s", kind, user.email, link)
    return link


def send_verification_link(user: User) -> str:
    return _deliver_link("verification", user, "verify-email", create_verification_token(user))


def verify_email(db: Session, token: str) -> dict:
    user = _user_from_action_token(db, token, VERIFY_PURPOSE)
    if not user.email_verified:
        user.email_verified = True
        db.commit()
        logger.info("[auth] e-mail verified for user %s", user.user_id)
    redirect = f"{settings.APP_URL.rstrip('/')}/forgot-password?email={quote(user.email)}"
    return {"message": "E-mail address verified.", "email": user.email, "redirect": redirect}


def request_password_reset(db: Session, email: str) -> dict:
    """Issue a reset link when the account exists; the answer never reveals which."""
    normalized = str(email or "").strip().lower()
    user = db.query(User).filter(User.email == normalized, User.is_active == True).first()  # noqa: E712
    if user:
        _deliver_link("password reset", user, "reset-password", create_reset_token(user))
    else:
        logger.info("[auth] password reset requested for unknown address")
    return {"message": "If an account with this e-mail address exists, a reset link has been sent."}


def reset_password(db: Session, token: str, new_password: str) -> dict:
    user = _user_from_action_token(db, token, RESET_PURPOSE)
    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("[auth] password reset for user %s", user.user_id)
    return {"message": "Password has been reset."}
