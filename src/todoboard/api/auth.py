"""Authentication for the API."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader, APIKeyQuery

from todoboard.config import get_settings

# Support API key via header or query parameter
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
api_key_query = APIKeyQuery(name="api_key", auto_error=False)

# Identity of the user the request acts for
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)


async def verify_api_key(
    header_key: Annotated[str | None, Security(api_key_header)] = None,
    query_key: Annotated[str | None, Security(api_key_query)] = None,
) -> None:
    """Verify API key if authentication is enabled.

    API key can be provided via:
    - X-API-Key header (preferred)
    - api_key query parameter (for convenience in browsers)

    If TODOBOARD_API_KEY is not set, the check is skipped.
    """
    settings = get_settings()

    if settings.api_key is None:
        return

    provided_key = header_key or query_key

    if provided_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide via X-API-Key header or api_key query parameter.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(provided_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )


async def get_current_user_id(
    user_id: Annotated[str | None, Security(user_id_header)] = None,
) -> str | None:
    """Resolve the current user, or None when the request carries none.

    Services reject a missing user themselves, before touching the store.
    """
    if user_id is None:
        return None
    return user_id.strip() or None


# Dependencies for use in routes
RequireAuth = Annotated[None, Depends(verify_api_key)]
CurrentUser = Annotated[str | None, Depends(get_current_user_id)]
