"""
FastAPI dependency injection functions.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from classmate.core.database import create_request_client
from classmate.core.security import decode_access_token

# Bearer token scheme for Swagger UI
bearer_scheme = HTTPBearer()


def get_db() -> Client:
    """Dependency: a fresh Supabase client for this request."""
    return create_request_client()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """Dependency: extract and validate user_id from the Supabase JWT.

    Returns:
        str: The user's UUID as string.

    Raises:
        HTTPException 401: If token is invalid or expired.
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token does not identify a user",
        )

    return user_id
