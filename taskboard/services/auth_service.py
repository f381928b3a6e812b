"""
Auth Service - registration, login, logout and request authentication

Acts as the identity provider for the rest of the application:
authenticate() turns a bearer token into a user id.
"""
import logging
from dataclasses import dataclass

from ..db.crud import TokenRepository, UniqueViolation, UserRepository
from ..db.schema import UserRecord
from .errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .security import (
    create_access_token,
    decode_token,
    hash_password,
    new_token_id,
    verify_password,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class AuthResult:
    """A user together with a freshly issued bearer token."""
    user: UserRecord
    token: str


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        tokens: TokenRepository,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        jwt_expires_in: int = 86400,
    ):
        self.users = users
        self.tokens = tokens
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.jwt_expires_in = jwt_expires_in

    async def _issue_token(self, user: UserRecord) -> str:
        jti = new_token_id()
        await self.tokens.add_token(user.id, jti)
        return create_access_token(
            user.id,
            jti,
            self.jwt_secret,
            algorithm=self.jwt_algorithm,
            expires_in=self.jwt_expires_in,
        )

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        if not name or not name.strip():
            raise ValidationError("The name field is required.", field="name")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"The password must be at least {MIN_PASSWORD_LENGTH} characters.",
                field="password",
            )

        try:
            user = await self.users.create_user(
                name.strip(), email.strip().lower(), hash_password(password)
            )
        except UniqueViolation as e:
            raise ConflictError("The email has already been taken.") from e

        logger.info("Registered user %s", user.id)
        return AuthResult(user=user, token=await self._issue_token(user))

    async def login(self, email: str, password: str) -> AuthResult:
        found = await self.users.get_credentials(email.strip().lower())
        if found is None or not verify_password(password, found[1]):
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError("Bad Creds")
        user = found[0]
        return AuthResult(user=user, token=await self._issue_token(user))

    async def logout(self, caller_id: int) -> int:
        """Revoke every token of the caller; returns how many were revoked."""
        revoked = await self.tokens.revoke_all(caller_id)
        logger.info("User %s logged out (%d tokens revoked)", caller_id, revoked)
        return revoked

    async def authenticate(self, token: str) -> int:
        """
        Resolve a bearer token to a user id.

        Raises:
            AuthenticationError: If the token is invalid, expired or revoked
        """
        data = decode_token(token, self.jwt_secret, algorithm=self.jwt_algorithm)
        try:
            user_id = data.user_id
        except ValueError:
            raise AuthenticationError("Invalid token")
        if not await self.tokens.is_active(user_id, data.jti):
            raise AuthenticationError("Token has been revoked")
        return user_id

    async def current_user(self, caller_id: int) -> UserRecord:
        user = await self.users.get_user(caller_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
