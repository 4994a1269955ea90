"""
Application exceptions and their HTTP rendering.

Hierarchy
---------
    BlogAPIError (500)
       ├── AuthenticationError (401)  missing/invalid token, bad credentials
       ├── NotFoundError (404)
       │      └── ArticleNotFoundError
       ├── ValidationError (422)      constraint violations at flush time
       └── ConflictError (409)        duplicate sign-up email

Services raise these; they never return ``None`` for a missing record.
``register_exception_handlers`` turns them into::

    {"error": {"code": "NOT_FOUND", "message": "...", "details": {}}}
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BlogAPIError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class AuthenticationError(BlogAPIError):
    status_code = 401
    error_code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication required", details=None) -> None:
        super().__init__(message, details)


class NotFoundError(BlogAPIError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None) -> None:
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ArticleNotFoundError(NotFoundError):
    """
    Raised for a missing article.

    Update and delete use an owner-scoped lookup, so an article that
    exists but belongs to someone else raises this too.
    """

    def __init__(self, article_id: int) -> None:
        super().__init__("Article", article_id)
        self.article_id = article_id


class ValidationError(BlogAPIError):
    status_code = 422
    error_code = "VALIDATION_ERROR"


class ConflictError(BlogAPIError):
    status_code = 409
    error_code = "CONFLICT"


def register_exception_handlers(app: FastAPI) -> None:
    """Attach JSON renderers for ``BlogAPIError`` and unexpected errors."""

    @app.exception_handler(BlogAPIError)
    async def blog_api_error_handler(request: Request, exc: BlogAPIError) -> JSONResponse:
        logger.warning(
            "%s %s -> %d %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.error_code,
            exc.message,
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code, content=exc.to_dict(), headers=headers
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "details": {},
                }
            },
        )
