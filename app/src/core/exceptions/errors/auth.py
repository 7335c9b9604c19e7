from fastapi import status

from .base import ServiceError


class AuthenticationError(ServiceError):
    """
    An base error indicating that authentication credentials were not provided, invalid or expired.
    """

    type_ = "authentication_error"
    title = "Authentication Required"
    detail = "Please sign in to continue."
    status = status.HTTP_401_UNAUTHORIZED


class InvalidTokenError(AuthenticationError):
    """
    An error indicating that the provided bearer token is invalid or expired.
    """

    title = "Invalid or expired authentication token"
    detail = "Please sign in again to continue."
