from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from courserep.core.config import Settings
from courserep.core.exceptions import AuthenticationError
from courserep.core.security import AccessTokenManager

jwt_security = HTTPBearer(
    scheme_name="JWT Token",
    description="Access token returned by /auth/login",
    auto_error=False,
)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_access_tokens(request: Request) -> AccessTokenManager:
    return request.app.state.access_tokens


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(jwt_security),
    tokens: AccessTokenManager = Depends(get_access_tokens),
) -> Dict[str, Any]:
    """
    Decoded access token payload: sub (the user's ID) and role.
    """
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError("Authentication credentials are required")
    return tokens.decode_token(credentials.credentials)
