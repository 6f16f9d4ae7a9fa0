from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .errors import AuthenticationError, ConfigurationError
from .settings import Settings

JWT_ALGORITHM = "HS256"

_security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Return the settings the running application was created with."""
    return request.app.state.settings


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.

    Raises:
        ConfigurationError if no signing secret is configured.
        AuthenticationError if the signature, issuer, audience, expiry or age is wrong.
    """
    if not settings.jwt_secret:
        raise ConfigurationError()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as exc:
        raise AuthenticationError() from exc

    issued_at = claims.get("iat")
    if isinstance(issued_at, (int, float)) and time.time() - issued_at > settings.jwt_max_age_seconds:
        raise AuthenticationError()
    return claims


# PUBLIC_INTERFACE
def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """
    FastAPI dependency resolving the authenticated principal.

    Requires 'Authorization: Bearer <token>'. The principal is the token's
    'sub' claim, returned as an opaque string and trusted from here on.
    """
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError()

    claims = decode_access_token(credentials.credentials.strip(), settings)
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise AuthenticationError()
    return subject
