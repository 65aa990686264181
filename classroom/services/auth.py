import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.core.config import get_settings
from classroom.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_reset_token,
    hash_password,
    verify_password,
)
from classroom.models import PasswordResetToken, User, UserRole, UserSession
from classroom.services.errors import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidResetTokenError,
    SessionNotFoundError,
    WrongPasswordError,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def build_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
    expires_delta = timedelta(minutes=expires_minutes) if expires_minutes else None
    return create_access_token(subject=str(user.id), role=user.role.value, expires_delta=expires_delta)


def register_user(db: Session, email: str, password: str, full_name: str, role: UserRole) -> User:
    if get_user_by_email(db, email):
        raise EmailAlreadyRegisteredError()

    user = User(
        email=normalize_email(email),
        full_name=full_name.strip(),
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise EmailAlreadyRegisteredError() from exc
    db.refresh(user)
    logger.info("Registered %s account %s", user.role.value, user.email)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed sign-in for %s", normalize_email(email))
        raise InvalidCredentialsError()
    return user


def issue_tokens(db: Session, user: User) -> Tuple[str, str]:
    """Create an access token and a refresh token backed by a stored session."""
    settings = get_settings()
    access_token = build_access_token(user)
    refresh_token = create_refresh_token(subject=str(user.id), role=user.role.value)

    session = UserSession(
        user_id=user.id,
        refresh_token=refresh_token,
        created_at=datetime.utcnow(),
        expires_at=datetime.utcnow() + timedelta(days=settings.refresh_token_expire_days),
    )
    db.add(session)
    db.commit()
    return access_token, refresh_token


def rotate_refresh_token(db: Session, refresh_token: str) -> Tuple[User, str, str]:
    try:
        payload = decode_token(refresh_token)
    except JWTError as exc:
        raise InvalidRefreshTokenError() from exc
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise InvalidRefreshTokenError()

    session = db.query(UserSession).filter(UserSession.refresh_token == refresh_token).first()
    if not session or session.expires_at < datetime.utcnow():
        raise InvalidRefreshTokenError()

    settings = get_settings()
    user = session.user
    new_refresh_token = create_refresh_token(subject=str(user.id), role=user.role.value)
    session.refresh_token = new_refresh_token
    session.expires_at = datetime.utcnow() + timedelta(days=settings.refresh_token_expire_days)
    db.commit()

    return user, build_access_token(user), new_refresh_token


def revoke_session(db: Session, refresh_token: str, user: Optional[User] = None) -> None:
    query = db.query(UserSession).filter(UserSession.refresh_token == refresh_token)
    if user is not None:
        query = query.filter(UserSession.user_id == user.id)
    session = query.first()
    if not session:
        raise SessionNotFoundError()
    db.delete(session)
    db.commit()


def revoke_all_sessions(db: Session, user: User) -> None:
    db.query(UserSession).filter(UserSession.user_id == user.id).delete(synchronize_session=False)


def create_password_reset(db: Session, email: str) -> Optional[str]:
    """Return a fresh reset token, or None when no account has this email."""
    user = get_user_by_email(db, email)
    if not user:
        return None

    settings = get_settings()
    # only the newest token stays valid
    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == user.id).delete(synchronize_session=False)
    token = generate_reset_token()
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=datetime.utcnow() + timedelta(minutes=settings.password_reset_expire_minutes),
        )
    )
    db.commit()
    logger.info("Password reset requested for %s", user.email)
    return token


def reset_password(db: Session, token: str, new_password: str) -> User:
    reset_token = db.query(PasswordResetToken).filter(PasswordResetToken.token == token).first()
    if not reset_token:
        raise InvalidResetTokenError()
    if reset_token.expires_at < datetime.utcnow():
        db.delete(reset_token)
        db.commit()
        raise InvalidResetTokenError()

    user = db.query(User).filter(User.id == reset_token.user_id).first()
    if not user:
        raise InvalidResetTokenError()

    user.password_hash = hash_password(new_password)
    db.delete(reset_token)
    revoke_all_sessions(db, user)
    db.commit()
    logger.info("Password reset completed for %s", user.email)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise WrongPasswordError()
    user.password_hash = hash_password(new_password)
    db.commit()
