from fastapi import APIRouter, Depends, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError

from skyjourney.api.deps import bearer, get_current_user
from skyjourney.core.errors import Unauthenticated, ValidationError
from skyjourney.core.logging import get_logger
from skyjourney.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    is_revoked,
    new_session_id,
    verify_password,
)
from skyjourney.db.store import Storage, get_store
from skyjourney.models.user import Role, User
from skyjourney.schemas.auth import LoginRequest, RefreshRequest, RegisterRequest, TokenPair, UserOut

router = APIRouter(tags=["auth"])
logger = get_logger(__name__)


def _token_pair(user: User, session_id: str | None = None) -> TokenPair:
    session_id = session_id or new_session_id()
    return TokenPair(
        access_token=create_access_token(str(user.id), session_id=session_id),
        refresh_token=create_refresh_token(str(user.id), session_id=session_id),
    )


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, store: Storage = Depends(get_store)):
    with store.transaction():
        if store.get_user_by_username(body.username):
            raise ValidationError("Username already exists")
        user = store.create_user(
            username=body.username,
            password_hash=hash_password(body.password),
            email=body.email,
            role=Role.USER,
        )
    logger.info("user %s registered", user.username)
    return user


@router.post("/login", response_model=TokenPair)
def login(body: LoginRequest, store: Storage = Depends(get_store)):
    user = store.get_user_by_username(body.username)
    if not user or not verify_password(body.password, user.password_hash):
        logger.warning("failed login for %r", body.username)
        raise Unauthenticated("Invalid credentials")
    return _token_pair(user)


@router.post("/refresh", response_model=TokenPair)
def refresh(body: RefreshRequest, store: Storage = Depends(get_store)):
    try:
        payload = decode_token(body.refresh_token)
    except JWTError:
        raise Unauthenticated("Invalid refresh token")
    if payload.get("type") != "refresh" or is_revoked(payload, store):
        raise Unauthenticated("Invalid refresh token")
    try:
        user = store.get_user(int(payload.get("sub")))
    except (TypeError, ValueError):
        user = None
    if not user:
        raise Unauthenticated("User not found")
    # the used refresh token is single-use; the new pair stays in the same session
    if payload.get("jti"):
        store.revoke_token(payload["jti"])
    return _token_pair(user, payload.get("sid"))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(creds: HTTPAuthorizationCredentials | None = Depends(bearer),
           me: User = Depends(get_current_user),
           store: Storage = Depends(get_store)):
    # get_current_user has already validated the token
    payload = decode_token(creds.credentials)
    # the sid also ends the refresh token of the same login
    for key in ("jti", "sid"):
        if payload.get(key):
            store.revoke_token(payload[key])
    logger.info("user %s logged out", me.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/user", response_model=UserOut)
def current_user(me: User = Depends(get_current_user)):
    return me
