"""
Token service: mints access/refresh token pairs, verifies access tokens
and renews access tokens from the user's current refresh token.

Only one refresh token per user is live at a time: issuing a new pair
overwrites User.refresh_token, and rotate() requires an exact match with
the stored value. A superseded token is rejected by rotate() even though
its signature and expiry are still valid.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict

from sqlalchemy.exc import SQLAlchemyError

from models import storage
from models.user import User
from utils.exceptions import Internal, NotFound, Unauthorized
from utils.security import create_jwt_token, decode_token, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta,
        refresh_expires: timedelta,
        algorithm: str = "HS256",
        issuer: str = "auth-discovery-api",
        clock: Callable = utcnow,
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens must use distinct secrets")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm
        self.issuer = issuer
        self.clock = clock

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            access_secret=config["ACCESS_TOKEN_SECRET"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            access_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "auth-discovery-api"),
        )

    def _mint(self, user_id: str, token_type: str) -> str:
        if token_type == "access":
            secret, lifetime = self.access_secret, self.access_expires
        else:
            secret, lifetime = self.refresh_secret, self.refresh_expires
        return create_jwt_token(
            subject=user_id,
            secret=secret,
            expires_in=lifetime,
            token_type=token_type,
            algorithm=self.algorithm,
            issuer=self.issuer,
            now=self.clock(),
        )

    def issue_pair(self, user_id: str) -> TokenPair:
        """Mint both tokens and make the refresh token the user's only valid one."""
        user = storage.get(User, user_id)
        if not user:
            raise NotFound("User not found for token generation")
        try:
            pair = TokenPair(
                access_token=self._mint(user.id, "access"),
                refresh_token=self._mint(user.id, "refresh"),
            )
            user.refresh_token = pair.refresh_token
            user.save()
        except (SQLAlchemyError, ValueError, TypeError) as exc:
            logger.error("Token generation failed for user %s: %s", user_id, exc)
            raise Internal("Error generating tokens")
        return pair

    def verify_access(self, token: str) -> Dict[str, Any]:
        return decode_token(
            token, self.access_secret, expected_type="access", algorithm=self.algorithm, issuer=self.issuer
        )

    def verify_refresh(self, token: str) -> Dict[str, Any]:
        return decode_token(
            token, self.refresh_secret, expected_type="refresh", algorithm=self.algorithm, issuer=self.issuer
        )

    def rotate(self, refresh_token: str) -> str:
        """Return a fresh access token; the refresh token itself is left in place."""
        claims = self.verify_refresh(refresh_token)
        user = storage.get(User, claims.get("sub"))
        if not user:
            raise Unauthorized("Invalid refresh token")
        current = user.refresh_token or ""
        if not hmac.compare_digest(current.encode(), refresh_token.encode()):
            raise Unauthorized("Refresh token is expired or used")
        return self._mint(user.id, "access")

    def revoke(self, user: User) -> None:
        """Forget the user's refresh token (logout)."""
        user.refresh_token = None
        try:
            user.save()
        except SQLAlchemyError:
            raise Internal("Error revoking refresh token")
