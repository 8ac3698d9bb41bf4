"""
Global error handling middleware.

The monitoring flow absorbs provider failures itself, so anything reaching
this layer is either a caller error or a defect.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Any, Callable, Dict

from habitat.infrastructure.external_api_client import ExternalAPIError


logger = logging.getLogger(__name__)


def _request_context(request: Request) -> Dict[str, Any]:
    """Log fields identifying the request and, if present, the location."""
    context = {
        "path": request.url.path,
        "method": request.method,
    }
    for key in ("lat", "lng"):
        if key in request.query_params:
            context[key] = request.query_params[key]
    return context


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Converts exceptions escaping the routers into JSON error responses.

    - ExternalAPIError: the provider's status code ("Upstream provider error")
    - ValueError: 400 ("Invalid request")
    - anything else: 500 with a generic message
    """

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)

        except ExternalAPIError as e:
            logger.error(
                f"Upstream provider error: {e.message}",
                extra={**_request_context(request), "status_code": e.status_code},
            )
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "error": "Upstream provider error",
                    "detail": e.message,
                }
            )

        except ValueError as e:
            logger.warning(
                f"Rejected request: {e}",
                extra=_request_context(request),
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": "Invalid request",
                    "detail": str(e),
                }
            )

        except Exception as e:
            logger.exception(
                f"Unhandled exception: {e}",
                extra=_request_context(request),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred",
                }
            )
