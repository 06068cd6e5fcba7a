"""
Discovery gate: the admin-panel -> diagnostics -> secret-key ladder.

No progress is stored. Stage 2 checks a fixed maintenance code, and
stage 3 checks an access code derived from the caller's identity and the
current hour-of-day in a fixed reference timezone:

    f"{len(username)}{hour}{str(user_id)[-2:]}"

The hour is not zero padded and the bucket is exactly one hour wide, so a
code read from diagnostics stops working when the hour turns over.
"""
from __future__ import annotations

import hmac
import logging
from datetime import datetime, tzinfo
from typing import Callable, Union
from zoneinfo import ZoneInfo

from utils.exceptions import Forbidden, InvalidInput
from utils.security import utcnow

logger = logging.getLogger(__name__)

MAINTENANCE_CODE = "DIAG_7834"
DIAGNOSTICS_ENDPOINT = "/system/diagnostics"


def reference_hour(now: datetime, tz: Union[str, tzinfo] = "UTC") -> int:
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    return now.astimezone(zone).hour


def derive_access_code(username: str, user_id: str, now: datetime, tz: Union[str, tzinfo] = "UTC") -> str:
    return f"{len(username)}{reference_hour(now, tz)}{str(user_id)[-2:]}"


def _matches(presented: str, expected: str) -> bool:
    return hmac.compare_digest(presented.encode(), expected.encode())


class DiscoveryGate:
    def __init__(
        self,
        secret_value: str,
        maintenance_code: str = MAINTENANCE_CODE,
        timezone: str = "UTC",
        clock: Callable[[], datetime] = utcnow,
    ):
        self.secret_value = secret_value
        self.maintenance_code = maintenance_code
        # unknown zone names fail here, at startup
        self.zone = ZoneInfo(timezone)
        self.clock = clock

    @classmethod
    def from_config(cls, config) -> "DiscoveryGate":
        return cls(
            secret_value=config["DISCOVERY_SECRET_KEY"],
            maintenance_code=config.get("MAINTENANCE_CODE", MAINTENANCE_CODE),
            timezone=config.get("DISCOVERY_TIMEZONE", "UTC"),
        )

    def access_code(self, username: str, user_id: str, now: datetime | None = None) -> str:
        return derive_access_code(username, user_id, now or self.clock(), self.zone)

    def admin_clue(self) -> dict:
        """Stage 1: reachable by any authenticated caller."""
        return {
            "lastMaintenance": "2024-01-15T10:30:00Z",
            "nextScheduled": "2024-02-15T02:00:00Z",
            "debugEndpoint": DIAGNOSTICS_ENDPOINT,
            "maintenanceCode": self.maintenance_code,
        }

    def unlock_diagnostics(self, maintenance_code: str | None, username: str, user_id: str) -> str:
        """Stage 2: trade the maintenance code for the current access code."""
        if not maintenance_code or not _matches(maintenance_code, self.maintenance_code):
            logger.info("Diagnostics denied for user %s", username)
            raise Forbidden(
                "Valid maintenance code required",
                hint="Check system logs for the current maintenance code",
            )
        logger.info("Diagnostics unlocked by user %s", username)
        return self.access_code(username, user_id)

    def reveal_secret(self, access_code: str | None, username: str, user_id: str) -> str:
        """Stage 3: the access code must match the one derived for this hour."""
        if not access_code:
            raise InvalidInput(
                "Access code required",
                hint="Run system diagnostics to obtain the current access code",
            )
        if not _matches(access_code, self.access_code(username, user_id)):
            logger.info("Invalid access code from user %s", username)
            raise Forbidden(
                "Access code is incorrect or expired",
                hint="Access codes are time-sensitive and user-specific",
            )
        logger.info("Secret revealed to user %s", username)
        return self.secret_value
