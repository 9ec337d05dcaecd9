import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from skyjourney.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGO = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def new_session_id() -> str:
    return uuid.uuid4().hex


def _encode(subject: str, token_type: str, exp: datetime, session_id: str | None) -> str:
    payload = {
        "sub": subject,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        # shared by the access and refresh token of one login
        "sid": session_id or new_session_id(),
        "exp": exp,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO)


def create_access_token(subject: str, expires_minutes: int | None = None, session_id: str | None = None) -> str:
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    exp = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return _encode(subject, "access", exp, session_id)


def create_refresh_token(subject: str, expires_days: int | None = None, session_id: str | None = None) -> str:
    if expires_days is None:
        expires_days = settings.REFRESH_TOKEN_EXPIRE_DAYS
    exp = datetime.now(timezone.utc) + timedelta(days=expires_days)
    return _encode(subject, "refresh", exp, session_id)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])


def is_revoked(payload: dict, store) -> bool:
    """A token is dead once its own jti or its session id has been revoked."""
    return store.is_token_revoked(payload.get("jti", "")) or store.is_token_revoked(payload.get("sid", ""))
