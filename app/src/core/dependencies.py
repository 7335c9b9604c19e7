import time
from collections.abc import AsyncGenerator
from types import CoroutineType
from typing import Annotated, Any, Callable
from uuid import uuid4

from fastapi import Depends, Header, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from multidict import CIMultiDict
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.constants import GUEST_ID_HEADER
from src.core.database.session import get_db_session
from src.core.exceptions import errors
from src.core.helpers.request import get_client_ip
from src.domain.enums import UserRole
from src.domain.schemas import AuthSessionState, CartIdentity
from src.domain.services import FavoriteService, StorefrontSession, UserProfileService, security_service
from src.libs.kvstore import KeyValueService, get_kv_service
from src.libs.throttler import limiter

bearer_scheme = HTTPBearer(auto_error=False)


def get_key_value_service() -> KeyValueService:
    """
    Dependency to get the key-value service backing carts.
    """
    return get_kv_service()


def create_rate_limit_dependency(
    namespace: str,
    custom_limit: str | None = None,
    key_func: Callable[[Request], str] | None = None,
) -> "Callable[..., CoroutineType[Any, Any, None]]":
    """
    Create a rate limit dependency for specific routes or routers.

    Args:
        namespace (str): The namespace for rate limiting (e.g., "autohub_checkout")
        custom_limit (str | None): Optional custom limit string (e.g., "10/minute")
        key_func (Callable[[Request], str] | None): Optional function to extract client key from request

    Returns:
        Dependency function that can be used with FastAPI routes
    """

    def _default_key_func(request: Request) -> str:
        return get_client_ip(request) or "unknown"

    async def rate_limit_dependency(request: Request) -> None:
        client_key = (key_func or _default_key_func)(request)

        allowed = await limiter.hit(
            namespace=namespace,
            client_key=client_key,
            custom_limit=custom_limit,
        )

        if not allowed:
            stats, limit_amount = await limiter.get_window_stats_with_limit(
                namespace=namespace,
                client_key=client_key,
                custom_limit=custom_limit,
            )

            retry_after = max(1, int(stats.reset_time - time.time()))

            raise errors.RateLimitExceededError(
                headers=CIMultiDict(
                    {
                        "X-RateLimit-Limit": str(limit_amount),
                        "X-RateLimit-Remaining": "0",
                        "X-RateLimit-Reset": str(int(stats.reset_time)),
                        "Retry-After": str(retry_after),
                    }
                ),
            )

    return rate_limit_dependency


checkout_rate_limit = Depends(create_rate_limit_dependency("autohub_checkout"))


async def optional_auth_state(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> AuthSessionState | None:
    """
    Dependency resolving the caller when a bearer token is sent.

    Returns:
        AuthSessionState | None: The caller, or None for anonymous requests

    Raises:
        InvalidTokenError: If a token is sent but is invalid or expired
    """
    if not credentials or not credentials.credentials:
        return None

    return security_service.get_session_state(credentials.credentials)


async def require_auth_state(
    auth_state: Annotated[AuthSessionState | None, Depends(optional_auth_state)],
) -> AuthSessionState:
    """
    Dependency to ensure the request carries a valid bearer token.

    Raises:
        AuthenticationError: If no token is sent
    """
    if auth_state is None:
        raise errors.AuthenticationError(detail="Authentication required")

    return auth_state


async def resolve_role(
    auth_state: Annotated[AuthSessionState, Depends(require_auth_state)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AuthSessionState:
    """
    Dependency promoting the caller to administrator when their profile says so.
    """
    if auth_state.is_admin():
        return auth_state

    role = await UserProfileService(session=session).get_role(auth_state.user_id)
    if role is not None and role.is_admin():
        return auth_state.model_copy(update={"role": UserRole.ADMIN})

    return auth_state


async def require_admin(
    auth_state: Annotated[AuthSessionState, Depends(resolve_role)],
) -> AuthSessionState:
    """
    Dependency to ensure the caller is an administrator, by token role or profile role.

    Raises:
        AdminRequiredError: If the caller is not an administrator
    """
    if not auth_state.is_admin():
        raise errors.AdminRequiredError(detail="Administrator access required")

    return auth_state


def resolve_cart_identity(
    response: Response,
    auth_state: Annotated[AuthSessionState | None, Depends(optional_auth_state)],
    guest_id: Annotated[str | None, Header(alias=GUEST_ID_HEADER, max_length=64)] = None,
) -> CartIdentity:
    """
    Dependency picking the cart bucket of the caller.

    Signed-in callers use their user cart. Guests are tracked by the
    ``X-Guest-Id`` header; a new guest id is issued and echoed back when the
    header is missing.
    """
    if auth_state is not None:
        return CartIdentity(user_id=auth_state.user_id)

    if not guest_id:
        guest_id = uuid4().hex

    response.headers[GUEST_ID_HEADER] = guest_id
    return CartIdentity(guest_id=guest_id)


async def get_storefront_session(
    identity: Annotated[CartIdentity, Depends(resolve_cart_identity)],
    kv_service: Annotated[KeyValueService, Depends(get_key_value_service)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AsyncGenerator[StorefrontSession, None]:
    """
    Dependency opening the caller's storefront session for one request.
    """
    favorite_service = FavoriteService(session=session)
    storefront = StorefrontSession(
        identity,
        kv_service.provider,
        kv_service.channel,
        favorites_loader=favorite_service.get_favorite_product_ids,
    )
    await storefront.open(subscribe=False)
    try:
        yield storefront
    finally:
        await storefront.close()
