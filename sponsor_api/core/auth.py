from __future__ import annotations

from typing import Any

from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from sponsor_api.core.config import settings

# Bearer token extractor. Tokens are issued by the account service; this API
# only verifies them and reads the user id from the "sub" claim.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def verify_token(token: str) -> dict[str, Any] | None:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None
