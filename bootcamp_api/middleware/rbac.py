# bootcamp_api/middleware/rbac.py
import logging

import jwt
from bson.errors import InvalidId
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bootcamp_api.core.config import Settings
from bootcamp_api.core.exceptions import ForbiddenError, UnauthorizedError
from bootcamp_api.database import Database
from bootcamp_api.dependencies import get_app_settings, get_db
from bootcamp_api.models.user import find_user_by_id
from bootcamp_api.utils.auth_utils import decode_token
from bootcamp_api.utils.documents import same_id

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "token"


def extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return request.cookies.get(TOKEN_COOKIE)


async def protect(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """Resolve the requesting user from a bearer header or the token cookie."""
    token = extract_token(request, credentials)
    if not token or token == "none":
        raise UnauthorizedError()

    try:
        payload = decode_token(token, settings)
        user = await find_user_by_id(db, payload.get("id"))
    except (jwt.PyJWTError, InvalidId, TypeError) as e:
        logger.debug("Rejected token: %s", e)
        raise UnauthorizedError()

    if not user:
        raise UnauthorizedError()
    return user


def authorize(*roles: str):
    """Dependency factory: only the given roles may pass."""

    async def role_dep(user: dict = Depends(protect)) -> dict:
        if user.get("role") not in roles:
            raise ForbiddenError(f"User role {user.get('role')} is not authorized to access this route")
        return user

    return role_dep


def is_admin(user: dict) -> bool:
    return user.get("role") == "admin"


def ensure_owner(resource: dict, user: dict, action: str) -> None:
    """Only the resource's owner or an admin may mutate it."""
    if not same_id(resource.get("user"), user["_id"]) and not is_admin(user):
        raise ForbiddenError(f"User {user['_id']} is not authorized to {action}")
