"""
Password hashing and access-token helpers.

Passwords are hashed with passlib (bcrypt). Access tokens are signed JWTs
carrying the user id (sub) and a unique token id (jti); the jti is recorded
by the auth service so tokens can be revoked on logout.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from .errors import AuthenticationError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenData(BaseModel):
    """Decoded JWT payload."""
    sub: str
    jti: str
    iat: int
    exp: int

    @property
    def user_id(self) -> int:
        return int(self.sub)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def new_token_id() -> str:
    return uuid.uuid4().hex


def create_access_token(
    user_id: int,
    jti: str,
    secret: str,
    algorithm: str = "HS256",
    expires_in: int = 86400,
) -> str:
    """Create a signed JWT for the given user and token id."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "jti": jti,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> TokenData:
    """
    Verify and decode a JWT.

    Raises:
        AuthenticationError: If the token is expired, malformed or badly signed
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
        return TokenData(**payload)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")
    except (TypeError, ValueError):
        # Well-signed payload with missing/invalid claims
        raise AuthenticationError("Invalid token")
