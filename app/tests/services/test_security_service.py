from datetime import timedelta
from unittest.mock import patch

import jwt
import pytest
from src.core.config import settings
from src.core.exceptions import errors
from src.domain.enums import UserRole
from src.domain.schemas import AuthSessionState
from src.domain.services.security_service import SecurityService, security_service


class TestSecurityService:
    """Test cases for SecurityService"""

    def setup_method(self):
        """Setup method to create a fresh SecurityService instance for each test."""
        self.security_service = SecurityService()

    def test_security_service_singleton(self):
        """Test that the global security_service instance works correctly."""
        assert security_service is not None
        assert isinstance(security_service, SecurityService)

    def test_create_jwt_token(self):
        """Test JWT token creation."""
        token = self.security_service.create_jwt_token("user123")

        assert isinstance(token, str)
        assert len(token.split(".")) == 3

    def test_create_jwt_token_with_custom_expiry(self):
        """Test JWT token creation with custom expiry time."""
        token = self.security_service.create_jwt_token(subject="user123", expiry_time_in_secs=timedelta(minutes=30))

        payload = self.security_service.decode_jwt_token(token)
        assert payload["sub"] == "user123"
        assert payload["exp"] - payload["iat"] == 30 * 60

    def test_decode_valid_token(self):
        """Test decoding a valid JWT token."""
        token = self.security_service.create_jwt_token("user123")

        payload = self.security_service.decode_jwt_token(token)

        assert payload["sub"] == "user123"
        assert payload["aud"] == settings.APP_NAME
        assert "exp" in payload
        assert "iat" in payload
        assert "nbf" in payload

    def test_decode_invalid_token(self):
        """Test decoding an invalid JWT token raises appropriate error."""
        with pytest.raises(errors.InvalidTokenError):
            self.security_service.decode_jwt_token("invalid.jwt.token")

    def test_decode_malformed_token(self):
        """Test decoding a malformed token."""
        with pytest.raises(errors.InvalidTokenError):
            self.security_service.decode_jwt_token("not-a-jwt")

    def test_decode_expired_token(self):
        """Test that an expired token is rejected."""
        token = self.security_service.create_jwt_token("user123", expiry_time_in_secs=timedelta(seconds=-10))

        with pytest.raises(errors.InvalidTokenError):
            self.security_service.decode_jwt_token(token)

    def test_decode_token_signed_with_other_key(self):
        """Test that a token signed with a different secret is rejected."""
        forged = jwt.encode({"sub": "user123", "aud": settings.APP_NAME}, "another-secret" * 4, algorithm="HS256")

        with pytest.raises(errors.InvalidTokenError):
            self.security_service.decode_jwt_token(forged)

    def test_get_token_data_with_pydantic_model(self):
        """Test parsing the token subject into a pydantic model."""
        state = AuthSessionState(user_id="user-1", email="jane@example.com", role=UserRole.ADMIN)
        token = self.security_service.create_jwt_token(state)

        decoded = self.security_service.decode_jwt_token(token)
        parsed = self.security_service.get_token_data(decoded, AuthSessionState)

        assert parsed == state
        assert parsed.is_admin()

    def test_get_token_data_with_string_type(self):
        """Test parsing the token subject as a plain string."""
        decoded = self.security_service.decode_jwt_token(self.security_service.create_jwt_token("user123"))

        assert self.security_service.get_token_data(decoded, str) == "user123"

    def test_get_token_data_with_missing_subject(self):
        """Test that a missing subject raises InvalidTokenError."""
        with pytest.raises(errors.InvalidTokenError):
            self.security_service.get_token_data({}, str)

    @patch("src.domain.services.security_service.logger")
    def test_get_token_data_with_validation_error(self, mock_logger):
        """Test that a subject that does not fit the model raises and logs."""
        decoded = {"sub": '{"email": "no-user-id@example.com"}'}

        with pytest.raises(errors.InvalidTokenError):
            self.security_service.get_token_data(decoded, AuthSessionState)

        mock_logger.error.assert_called_once()

    def test_issue_session_token(self):
        """Test issuing a bearer token for a session state."""
        state = AuthSessionState(user_id="user-1")

        issued = self.security_service.issue_session_token(state)

        assert issued.token_type == "bearer"
        assert issued.expires_in == settings.AUTH_TOKEN_MAX_AGE
        assert self.security_service.get_session_state(issued.access_token) == state

    def test_get_session_state_defaults_role_to_user(self):
        """Test that a token without a role yields a customer session."""
        token = self.security_service.create_jwt_token(AuthSessionState(user_id="user-2"))

        state = self.security_service.get_session_state(token)

        assert state.user_id == "user-2"
        assert state.role == UserRole.USER
        assert not state.is_admin()

    def test_get_session_state_with_plain_subject_raises(self):
        """Test that a token whose subject is not a session state is rejected."""
        token = self.security_service.create_jwt_token("user123")

        with pytest.raises(errors.InvalidTokenError):
            self.security_service.get_session_state(token)
