"""JWT access-token verification.

Tokens are issued by the external auth service and shared-secret signed
(HS256). This service only verifies them and reads the actor claims:

    sub          user id
    type         must be "access"
    role         CUSTOMER | PROVIDER | SHOP_OWNER | ADMIN
    provider_id  present for PROVIDER actors
    shop_id      present for SHOP_OWNER actors
"""

from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.mk_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token. Raises InvalidCredentialsError."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access" or not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
