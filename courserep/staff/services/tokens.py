"""Signed, time-limited attendance tokens"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

import jwt

from courserep.core.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedPayloadError,
)

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ("instanceId", "courseId", "classType")
DEFAULT_TTL = timedelta(minutes=15)


class AttendanceTokenService:
    """
    Issues and verifies the JWT bound to one attendance session.

    The signature covers the class type and coordinates, so a client cannot
    downgrade a physical session to online or move the classroom.
    """

    def __init__(
        self,
        secret_key: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.secret_key = secret_key
        self.ttl = ttl
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, payload: Dict[str, Any]) -> Tuple[str, datetime]:
        """Return (token, expires_at)"""
        issued_at = self.clock()
        expires_at = issued_at + self.ttl
        claims = dict(payload)
        claims.update({"iat": issued_at, "exp": expires_at})

        token = jwt.encode(claims, self.secret_key, algorithm=ALGORITHM)
        logger.debug(f"Attendance token issued for instance {payload.get('instanceId')}")
        return token, expires_at

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Expired attendance token presented")
            raise ExpiredTokenError()
        except jwt.MissingRequiredClaimError as e:
            logger.warning(f"Attendance token without {e.claim} presented")
            raise MalformedPayloadError()
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid attendance token presented: {e}")
            raise InvalidTokenError()

        if any(not claims.get(claim) for claim in REQUIRED_CLAIMS):
            raise MalformedPayloadError()

        return claims
