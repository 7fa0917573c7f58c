"""Signed identity tokens carrying ``{email, role}``.

Tokens are HS256 JWTs signed with ``JWT_SECRET``.  They embed the caller's
role at issuance time and are trusted for their whole lifetime, so a role
change only takes effect once the user requests a new token.  The lifetime
(``JWT_EXPIRES_IN``, one hour by default) is therefore the longest a stale
role can be honoured.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from flask import current_app
from jose import ExpiredSignatureError, JWTError, jwt

from contestbeaters.core.constants import ROLE_USER
from contestbeaters.errors import TokenExpiredError, TokenInvalidError

from .models import Principal

if TYPE_CHECKING:
    from flask import Flask

DEFAULT_LIFETIME = datetime.timedelta(hours=1)


def _timestamp(moment: datetime.datetime) -> int:
    return int(moment.timestamp())


class TokenService:
    """Issues and verifies signed identity tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: datetime.timedelta = DEFAULT_LIFETIME,
    ) -> None:
        """Initialize the service."""
        if not secret:
            raise ValueError("A token secret is required.")
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(
        self, claims: dict[str, Any], now: datetime.datetime | None = None
    ) -> str:
        """Sign ``claims`` into a token that expires after the service lifetime."""
        if not claims.get("email"):
            raise TokenInvalidError("Token claims must include an email.")
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)

        payload = dict(claims)
        payload.setdefault("role", ROLE_USER)
        payload["iat"] = _timestamp(now)
        payload["exp"] = _timestamp(now + self.lifetime)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(
        self, token: str, now: datetime.datetime | None = None
    ) -> dict[str, Any]:
        """Validate signature and expiry and return the token claims.

        Expiry is checked against the clock unless ``now`` is given.

        Raises:
            TokenExpiredError: If the token lifetime has elapsed.
            TokenInvalidError: If the token is malformed, signed with another
                key, or carries no email.
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": now is None},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired.") from e
        except JWTError as e:
            raise TokenInvalidError(f"Invalid token: {e}") from e

        if now is not None and _timestamp(now) > int(claims.get("exp", 0)):
            raise TokenExpiredError("Token has expired.")

        if not claims.get("email"):
            raise TokenInvalidError("Token carries no email claim.")
        return claims

    @staticmethod
    def principal_from(claims: dict[str, Any]) -> Principal:
        """Build the request principal from verified claims."""
        return Principal(email=claims["email"], role=claims.get("role") or ROLE_USER)

    def init_app(self, app: Flask) -> None:
        """Register this service on ``app``."""
        app.extensions["token_service"] = self

    @classmethod
    def from_config(cls, app: Flask) -> TokenService:
        """Build and register a service from the app configuration."""
        service = cls(
            secret=app.config["JWT_SECRET"],
            algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
            lifetime=datetime.timedelta(
                seconds=int(app.config.get("JWT_EXPIRES_IN", 3600))
            ),
        )
        service.init_app(app)
        return service


def get_token_service() -> TokenService:
    """Return the token service of the current app."""
    return current_app.extensions["token_service"]
