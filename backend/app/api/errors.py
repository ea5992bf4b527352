"""
Shared error envelope: ``{"error": ..., "details": ..., "message": ...}``.

Every endpoint answers failures in this shape, including the 405s and
404s Starlette raises before a route handler ever runs.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

NO_CACHE = {"Cache-Control": "no-cache"}


def error_response(
    status_code: int,
    error: str,
    details: str | None = None,
    message: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Standard error envelope."""
    content = {"error": error}
    if details is not None:
        content["details"] = details
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        error = "Method not allowed"
    else:
        error = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, error, headers=getattr(exc, "headers", None))


def empty_state_response(empty: BaseModel) -> JSONResponse:
    """A 200 informational body for a backend that is not provisioned yet."""
    return JSONResponse(content=empty.model_dump(exclude_none=True), headers=NO_CACHE)


async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    The database is configured but no session could be opened for it.

    Raised from the ``get_db`` dependency, before any route handler runs, so
    the route-level mapping cannot see it. Reads and writes keep the same
    error text their handlers would have used.
    """
    if request.method == "GET":
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to fetch reviews",
            details=str(exc),
            message="Reviews could not be loaded",
            headers=NO_CACHE,
        )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database unavailable",
        details=str(exc),
        message="Your review was not saved, please try again",
    )
