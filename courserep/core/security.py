"""Password hashing and login access tokens"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from courserep.core.config import Settings
from courserep.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


class AccessTokenManager:
    """JWT access tokens for authenticated users"""

    def __init__(self, settings: Settings):
        self.secret_key = settings.jwt_secret
        self.expire_minutes = settings.access_token_expire_minutes

    def create_access_token(self, subject: str, role: str) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        expire = now + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": subject,
            "role": role,
            "iat": now,
            "exp": expire,
            "type": "access_token",
        }
        token = jwt.encode(payload, self.secret_key, algorithm=ALGORITHM)
        logger.info(f"Access token created for {role} {subject}")
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": self.expire_minutes * 60,
        }

    def decode_token(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")

        if payload.get("type") != "access_token":
            raise AuthenticationError("Invalid token type")
        return payload
