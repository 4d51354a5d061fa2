from jose import JWTError, jwt

from app.config import settings


def _decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def verify_access_token(token: str) -> int:
    """Return the user id carried by an access token issued by the auth service."""
    payload = _decode_token(token)
    if payload.get("type") != "access":
        raise JWTError("Invalid token type")
    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise JWTError("Invalid subject")
