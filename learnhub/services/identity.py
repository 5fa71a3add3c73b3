from __future__ import annotations

import logging
from typing import Protocol

import jwt

from learnhub.models.principal import Principal
from learnhub.services import token_service

logger = logging.getLogger(__name__)


class IdentityService(Protocol):
    async def current_user(self) -> Principal | None: ...


class StaticIdentity:
    """Identity fixed at construction; None means anonymous."""

    def __init__(self, principal: Principal | None = None) -> None:
        self._principal = principal

    async def current_user(self) -> Principal | None:
        return self._principal


class TokenIdentity:
    """Identity read from a bearer access token.

    An expired or invalid token is treated as anonymous rather than an
    error: the engine then starts with the public catalogue only.
    """

    def __init__(self, raw_token: str | None) -> None:
        self._raw_token = raw_token

    async def current_user(self) -> Principal | None:
        if not self._raw_token:
            return None
        try:
            claims = token_service.decode_access_token(self._raw_token)
        except jwt.InvalidTokenError as e:
            logger.warning("Token rejected by identity service: %s", e)
            return None
        return principal_from_claims(claims)


def principal_from_claims(claims: dict) -> Principal:
    return Principal(
        user_id=str(claims["sub"]),
        roles=frozenset(claims.get("roles", [])),
    )
