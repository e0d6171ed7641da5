"""FastAPI dependencies: get_current_actor / require_admin.

Usage in any protected router:
    from src.mk_gateway.auth.dependencies import get_current_actor

    @router.get("/protected")
    async def protected(actor: Actor = Depends(get_current_actor)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.mk_common.errors import InvalidCredentialsError, NotAuthorizedError
from src.mk_gateway.auth.actor import Actor
from src.mk_gateway.auth.jwt_handler import decode_access_token

# Tokens come from the external auth service; tokenUrl only feeds Swagger UI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    """Validate the Bearer token and return the Actor. Raises HTTP 401."""
    try:
        claims = decode_access_token(token)
        return Actor.from_claims(claims)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Raises NotAuthorizedError (403) unless the caller is a platform admin."""
    if not actor.is_admin:
        raise NotAuthorizedError("Admin role required")
    return actor
