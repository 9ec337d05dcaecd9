from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from skyjourney.core.errors import Forbidden, Unauthenticated
from skyjourney.core.security import decode_token, is_revoked
from skyjourney.db.store import Storage, get_store
from skyjourney.models.user import Role, User

bearer = HTTPBearer(auto_error=False)


def _resolve_user(creds: HTTPAuthorizationCredentials | None, store: Storage) -> User | None:
    if not creds:
        return None
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        return None
    if payload.get("type") != "access" or is_revoked(payload, store):
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    return store.get_user(user_id)


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    store: Storage = Depends(get_store),
) -> User:
    user = _resolve_user(creds, store)
    if user is None:
        raise Unauthenticated("Unauthorized")
    return user


def require_roles(*roles: Role):
    # anonymous callers get 403 here as well, never 401
    def _guard(
        creds: HTTPAuthorizationCredentials | None = Depends(bearer),
        store: Storage = Depends(get_store),
    ) -> User:
        user = _resolve_user(creds, store)
        if user is None or user.role not in roles:
            raise Forbidden("Forbidden: Admin access required" if Role.ADMIN in roles else "Forbidden")
        return user
    return _guard


require_admin = require_roles(Role.ADMIN)
