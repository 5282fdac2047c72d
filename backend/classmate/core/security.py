"""
Security utilities: verification of Supabase Auth access tokens.
"""

from jose import jwt, JWTError

from classmate.config import get_settings


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a Supabase JWT. Returns payload or None if invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        return payload
    except JWTError:
        return None
