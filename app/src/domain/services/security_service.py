import json
from datetime import UTC, datetime, timedelta
from typing import Any, Type, TypeVar

import jwt
from jwt import InvalidKeyError, InvalidTokenError
from pydantic import BaseModel, ValidationError
from src.core.config import settings
from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.schemas.auth import AuthSessionState, AuthSessionToken

logger = get_logger(__name__)

ALGORITHM = "HS256"

T = TypeVar("T")


class SecurityService:
    """Service for issuing and verifying the bearer tokens of the identity provider"""

    def __init__(self):
        self.algorithm = ALGORITHM
        self.secret_key = settings.AUTH_SECRET_KEY

    def create_jwt_token(
        self,
        subject: str | Any,
        expiry_time_in_secs: timedelta = timedelta(seconds=settings.AUTH_TOKEN_MAX_AGE),
    ) -> str:
        """
        Create a JWT token with the given subject and expiry time.

        Args:
            subject: The subject of the token (a user id or a pydantic model)
            expiry_time_in_secs: Token expiry time

        Returns:
            Encoded JWT token string
        """
        if isinstance(subject, BaseModel):
            token_subject = json.dumps(subject.model_dump(mode="json"))
        else:
            token_subject = str(subject)

        now = datetime.now(UTC)
        payload = {
            "aud": settings.APP_NAME,
            "exp": now + expiry_time_in_secs,
            "iat": now,
            "nbf": now,
            "sub": token_subject,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Any:
        """
        Decode and validate a JWT token.

        Raises:
            InvalidTokenError: If the token is invalid or expired
        """
        try:
            return jwt.decode(
                jwt=token,
                audience=settings.APP_NAME,
                key=self.secret_key,
                options={"require": ["exp", "iat", "nbf", "sub", "aud"]},
                algorithms=[self.algorithm],
            )
        except (InvalidTokenError, InvalidKeyError) as error:
            raise errors.InvalidTokenError() from error

    def get_token_data(self, decoded_token: dict[str, Any], target_type: Type[T]) -> T:
        """
        Parse the subject of a decoded token into ``target_type``.

        Raises:
            InvalidTokenError: If the subject cannot be parsed into the target type
        """
        try:
            subject = decoded_token.get("sub")
            if subject is None:
                raise ValueError("Token subject (sub) is missing")

            if isinstance(target_type, type) and issubclass(target_type, BaseModel):
                subject_data = json.loads(subject) if isinstance(subject, str) else subject
                return target_type.model_validate(subject_data)  # type: ignore

            if isinstance(subject, target_type):  # type: ignore[arg-type]
                return subject  # type: ignore
            return target_type(subject)  # type: ignore

        except (ValueError, ValidationError, TypeError) as error:
            logger.error(f"Failed to parse token data into {target_type.__name__}: {error}")
            raise errors.InvalidTokenError() from error

    def issue_session_token(self, state: AuthSessionState) -> AuthSessionToken:
        """Issue a bearer token whose subject is ``state``."""
        return AuthSessionToken(
            access_token=self.create_jwt_token(state),
            expires_in=settings.AUTH_TOKEN_MAX_AGE,
        )

    def get_session_state(self, token: str) -> AuthSessionState:
        """
        Verify ``token`` and return the caller it identifies.

        Raises:
            InvalidTokenError: If the token is invalid, expired or carries no usable subject
        """
        return self.get_token_data(self.decode_jwt_token(token), AuthSessionState)


security_service = SecurityService()
