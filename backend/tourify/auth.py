# backend/tourify/auth.py
from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
import jwt
from jwt import PyJWTError
from passlib.context import CryptContext
from pydantic import SecretStr

from .core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login", auto_error=False)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _secret_value(secret_obj: SecretStr) -> str:
    return secret_obj.get_secret_value()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except (ValueError, TypeError) as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return str(pwd_context.hash(password))


def _encode(
    data: Dict[str, Any], secret: SecretStr, token_type: str, expires_delta: timedelta
) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + expires_delta, "iat": now, "type": token_type})
    return cast(str, jwt.encode(to_encode, _secret_value(secret), algorithm=settings.algorithm))


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode; "sub" carries the user id
        expires_delta: Optional expiration time delta
    """
    token = _encode(
        data,
        settings.secret_key,
        ACCESS_TOKEN_TYPE,
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )
    logger.info(f"Created access token for user: {data.get('sub')}")
    return token


def create_refresh_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        data,
        settings.refresh_token_secret,
        REFRESH_TOKEN_TYPE,
        expires_delta or timedelta(minutes=settings.refresh_token_expire_minutes),
    )


def _decode(token: str, secret: SecretStr, token_type: str) -> Dict[str, Any]:
    payload = cast(
        Dict[str, Any],
        jwt.decode(token, _secret_value(secret), algorithms=[settings.algorithm]),
    )
    if payload.get("type") != token_type:
        raise jwt.InvalidTokenError(f"Expected a {token_type} token")
    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.secret_key, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.refresh_token_secret, REFRESH_TOKEN_TYPE)


async def get_current_user(
    request: Request, token: Optional[str] = Depends(oauth2_scheme_optional)
) -> str:
    """
    Dependency returning the authenticated user id from the JWT.

    The token comes from the Authorization header, falling back to the
    session cookie.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    not_authenticated = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="You are not authorized!",
        headers={"WWW-Authenticate": "Bearer"},
    )

    # Cookie fallback when no Authorization header is present
    if not token:
        token = request.cookies.get(settings.session_cookie_name)
        if token:
            logger.debug(f"Using {settings.session_cookie_name} cookie for authentication")
    if not token:
        raise not_authenticated

    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.warning(f"JWT validation error: {str(e)}")
        raise not_authenticated

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        logger.warning("Token payload missing 'sub' field")
        raise not_authenticated
    return user_id
