"""
Global error handling middleware.
"""

import time
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import SQLAlchemyError

from teacha.api.middleware.auth import get_current_identity
from teacha.utils.config import get_settings
from teacha.utils.logger import get_logger
from teacha.utils.exceptions import AuthenticationError, DatabaseError, TeachaError

logger = get_logger(__name__)


def error_response(exc: TeachaError) -> JSONResponse:
    """JSON response for an application error."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_response(), headers=headers)


async def teacha_error_handler(request: Request, exc: TeachaError) -> JSONResponse:
    """Exception handler registered on the app for errors raised in routes and dependencies."""
    identity = get_current_identity()
    caller = identity.user_id if identity else "anonymous"
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed for {caller}: {exc}", exc_info=exc)
    else:
        logger.warning(f"{request.method} {request.url.path} rejected for {caller}: {exc}")
    return error_response(exc)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for consistent error handling and logging.

    Anything that escapes the route layer ends up here as a JSON error body.
    """

    async def dispatch(self, request: Request, call_next):
        """Process request with error handling."""
        start_time = time.time()

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s"
            )

            return response

        except TeachaError as e:
            return await teacha_error_handler(request, e)

        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}", exc_info=True)
            return error_response(DatabaseError(operation=f"{request.method} {request.url.path}"))

        except Exception as e:
            logger.error(f"Unhandled exception: {e}", exc_info=True)
            message = str(e) if get_settings().debug else "Internal server error"
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": message},
            )
