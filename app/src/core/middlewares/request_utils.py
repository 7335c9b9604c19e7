import logging
import time
import uuid
from typing import Any

from fastapi import Request, Response
from src.core.constants import GUEST_ID_HEADER, REQUEST_ID_CTX
from src.core.exceptions import errors
from src.core.helpers.request import get_client_ip, get_user_agent
from src.core.logging import add_to_log_context, get_logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 200


class RequestUtilsMiddleware(BaseHTTPMiddleware):
    """
    Tags every storefront request with an id and logs its lifecycle.

    The request id, client ip and, for shoppers browsing without an account,
    the guest id are put in the log context so cart and checkout logs can be
    traced back to a single request.
    """

    def __init__(self, app: ASGIApp, *, trust_request_id: bool = False, enable_request_logging: bool = True) -> None:
        super().__init__(app)
        self.trust_request_id = trust_request_id
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        request_id = self._get_request_id(request)
        REQUEST_ID_CTX.set(request_id)

        request.state.request_id = request_id
        request.state.client_ip = get_client_ip(request)

        start_time = time.perf_counter()

        with add_to_log_context(**self._log_context(request)):
            if self.enable_request_logging:
                logger.info(
                    "Incoming %s request to %s",
                    request.method,
                    request.url.path,
                    extra={"event_type": "request_start", "user_agent": get_user_agent(request)},
                )

            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    "Request %s %s failed after %.2fms",
                    request.method,
                    request.url.path,
                    (time.perf_counter() - start_time) * 1000,
                    exc_info=True,
                    extra={"event_type": "request_error", "exception_type": type(exc).__name__},
                )
                raise errors.InternalServerError(
                    detail="An unexpected error occurred while processing your request."
                ) from exc

            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id

            if self.enable_request_logging:
                logger.log(
                    self._get_log_level_for_status(response.status_code),
                    "%s %s -> %d in %.2fms",
                    request.method,
                    request.url.path,
                    response.status_code,
                    duration_ms,
                    extra={
                        "event_type": "request_complete",
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    },
                )

            return response

    def _log_context(self, request: Request) -> dict[str, str]:
        context = {
            "request_id": request.state.request_id,
            "client_ip": request.state.client_ip or "unknown",
            "method": request.method,
            "path": request.url.path,
        }

        guest_id = request.headers.get(GUEST_ID_HEADER)
        if guest_id and "Authorization" not in request.headers:
            context["guest_id"] = guest_id

        return context

    def _get_request_id(self, request: Request) -> str:
        if self.trust_request_id:
            incoming_id = request.headers.get(REQUEST_ID_HEADER)
            if (
                incoming_id
                and len(incoming_id) <= MAX_REQUEST_ID_LENGTH
                and incoming_id.isprintable()
                and incoming_id.strip() == incoming_id
            ):
                return incoming_id
        return uuid.uuid4().hex

    def _get_log_level_for_status(self, status_code: int) -> int:
        if status_code >= 500:
            return logging.ERROR
        elif status_code >= 400:
            return logging.WARNING
        return logging.INFO
