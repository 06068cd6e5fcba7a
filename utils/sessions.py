"""
Session tracking.

A SessionDescriptor is created at login and handed to the client in the
sessionData cookie. It is not stored server side; every request that
presents it is checked against an absolute age ceiling measured from
login time, independent of token validity.
"""
from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from utils.exceptions import SessionExpired, Unauthorized
from utils.security import utcnow

logger = logging.getLogger(__name__)

SESSION_MAX_AGE = timedelta(hours=24)


@dataclass(frozen=True)
class SessionDescriptor:
    session_id: str
    login_time: datetime
    client_agent: Optional[str]
    client_address: Optional[str]

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "loginTime": self.login_time.isoformat(),
            "userAgent": self.client_agent,
            "ipAddress": self.client_address,
        }

    def to_cookie(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass(frozen=True)
class SessionInfo:
    """Per-request tracking record exposed to logging."""
    session_id: Optional[str]
    user_agent: Optional[str]
    ip_address: Optional[str]
    timestamp: datetime
    request_path: str
    method: str


class SessionTracker:
    def __init__(self, max_age: timedelta = SESSION_MAX_AGE, clock: Callable[[], datetime] = utcnow):
        self.max_age = max_age
        self.clock = clock

    def begin(self, user_id: str, client_agent: str | None, client_address: str | None) -> SessionDescriptor:
        now = self.clock()
        descriptor = SessionDescriptor(
            session_id=f"sess_{int(now.timestamp() * 1000)}_{secrets.token_hex(8)}",
            login_time=now,
            client_agent=client_agent,
            client_address=client_address,
        )
        logger.info("Session %s started for user %s from %s", descriptor.session_id, user_id, client_address)
        return descriptor

    def validate(self, descriptor: SessionDescriptor) -> SessionDescriptor:
        age = self.clock() - descriptor.login_time
        if age > self.max_age:
            raise SessionExpired()
        return descriptor

    @staticmethod
    def parse(raw: str) -> SessionDescriptor:
        """Rebuild a descriptor from the sessionData cookie."""
        try:
            data = json.loads(raw)
            login_time = datetime.fromisoformat(data["loginTime"].replace("Z", "+00:00"))
            session_id = data["sessionId"]
        except (ValueError, TypeError, KeyError, AttributeError):
            raise Unauthorized("Invalid session data. Please login again.")
        if login_time.tzinfo is None or not isinstance(session_id, str):
            raise Unauthorized("Invalid session data. Please login again.")
        return SessionDescriptor(
            session_id=session_id,
            login_time=login_time,
            client_agent=data.get("userAgent"),
            client_address=data.get("ipAddress"),
        )

    def track(self, session_id, user_agent, ip_address, path, method, username=None) -> SessionInfo:
        info = SessionInfo(
            session_id=session_id,
            user_agent=user_agent,
            ip_address=ip_address,
            timestamp=self.clock(),
            request_path=path,
            method=method,
        )
        if username:
            logger.info("Session activity: user %s accessed %s from %s", username, path, ip_address)
        return info
