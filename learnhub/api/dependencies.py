from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from learnhub.api.sessions import sessions
from learnhub.models.principal import Principal
from learnhub.services import token_service
from learnhub.services.engine import LearningEngine
from learnhub.services.errors import (
    AlreadyEnrolledError,
    EngineError,
    NotFoundError,
    PersistenceError,
    PreconditionFailedError,
    ValidationGapError,
)
from learnhub.services.identity import principal_from_claims

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and return the caller's Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    return principal_from_claims(claims)


def require_role(role: str):
    """Dependency factory: demand a specific role, else 403."""

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s", principal.user_id, role
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


async def get_engine(
    principal: Annotated[Principal, Depends(require_user)],
) -> LearningEngine:
    return await sessions.get(principal)


def http_error(e: EngineError) -> HTTPException:
    """Translate an engine error into the HTTP status a client can act on."""
    if isinstance(e, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, AlreadyEnrolledError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(e, (PreconditionFailedError, ValidationGapError)):
        code = 422
    elif isinstance(e, PersistenceError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(e))


CurrentUser = Annotated[Principal, Depends(require_user)]
Engine = Annotated[LearningEngine, Depends(get_engine)]
