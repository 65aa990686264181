import secrets
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import jwt

from classroom.core.config import get_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
# bcrypt refuses anything longer
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    pw = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(pw, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    pw = plain_password.encode("utf-8")
    if len(pw) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(pw, hashed_password.encode("utf-8"))


def create_access_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {"sub": subject, "role": role, "type": ACCESS_TOKEN_TYPE, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_refresh_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.refresh_token_expire_days))
    # jti keeps two tokens issued in the same second distinct
    payload = {
        "sub": subject,
        "role": role,
        "type": REFRESH_TOKEN_TYPE,
        "exp": expire,
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict:
    settings = get_settings()
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)
