import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classroom.api.deps import get_db, get_current_user
from classroom.core.config import get_settings
from classroom.models import User, UserRole
from classroom.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    OkResponse,
    PasswordChange,
    PasswordReset,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    ProfileUpdate,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserOut,
)
from classroom.services import auth as auth_service

router = APIRouter()
logger = logging.getLogger(__name__)

RESET_MESSAGE = "If an account with this email exists, a password reset link has been sent."


def _login_response(db: Session, user: User) -> LoginResponse:
    access_token, refresh_token = auth_service.issue_tokens(db, user)
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        role=user.role.value,
        user=UserOut.model_validate(user),
    )


@router.post("/auth/register", response_model=LoginResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)) -> LoginResponse:
    user = auth_service.register_user(
        db,
        email=request.email,
        password=request.password,
        full_name=request.full_name,
        role=UserRole(request.role),
    )
    return _login_response(db, user)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    user = auth_service.authenticate(db, request.email, request.password)
    logger.info("User %s signed in", user.email)
    return _login_response(db, user)


@router.post("/auth/refresh", response_model=TokenResponse)
def refresh(request: RefreshTokenRequest, db: Session = Depends(get_db)) -> TokenResponse:
    _, access_token, refresh_token = auth_service.rotate_refresh_token(db, request.refresh_token)
    return TokenResponse(access_token=access_token, refresh_token=refresh_token, token_type="bearer")


@router.post("/auth/logout", response_model=OkResponse)
def logout(
    request: LogoutRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OkResponse:
    auth_service.revoke_session(db, request.refresh_token, user=current_user)
    logger.info("User %s signed out", current_user.email)
    return OkResponse(ok=True)


@router.post("/auth/reset-password-request", response_model=PasswordResetRequestResponse)
def reset_password_request(
    request: PasswordResetRequest,
    db: Session = Depends(get_db),
) -> PasswordResetRequestResponse:
    token = auth_service.create_password_reset(db, request.email)
    settings = get_settings()
    return PasswordResetRequestResponse(
        message=RESET_MESSAGE,
        reset_token=token if settings.expose_reset_token else None,
    )


@router.post("/auth/reset-password", response_model=OkResponse)
def reset_password(request: PasswordReset, db: Session = Depends(get_db)) -> OkResponse:
    auth_service.reset_password(db, request.token, request.new_password)
    return OkResponse(ok=True)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(current_user)


@router.patch("/me", response_model=UserOut)
def update_me(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserOut:
    current_user.full_name = payload.full_name.strip()
    db.commit()
    db.refresh(current_user)
    return UserOut.model_validate(current_user)


@router.post("/me/password", response_model=OkResponse)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OkResponse:
    auth_service.change_password(db, current_user, payload.current_password, payload.new_password)
    return OkResponse(ok=True)
