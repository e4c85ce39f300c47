from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from errors import InvalidToken, Unauthorized
from logging_config import get_logger
from security import PasswordHasher, TokenService

logger = get_logger(__name__)

# auto_error=False: a missing header is reported as our own Unauthorized
bearer_scheme = HTTPBearer(auto_error=False)


def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_tokens),
) -> int:
    """
    Verify the bearer token and attach the caller's id to request.state.

    The reason for a rejection is logged; the client only ever sees
    a plain 401 "Unauthorized".
    """
    if credentials is None:
        logger.info("auth_rejected", reason="missing bearer token", path=request.url.path)
        raise Unauthorized()

    try:
        user_id = tokens.verify(credentials.credentials)
    except InvalidToken as exc:
        logger.info("auth_rejected", reason=exc.reason, path=request.url.path)
        raise Unauthorized()

    request.state.user_id = user_id
    return user_id


def current_identity(request: Request) -> int:
    """Identity attached by get_current_user_id; fails closed without it."""
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise Unauthorized()
    return user_id
