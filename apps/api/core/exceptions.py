"""
Custom exception classes and error handling.

Provides consistent error responses across the API. Every error body is
``{"error": <detail>}``; the quota error also carries ``message``.
"""
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """Base API exception with consistent structure."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.detail}
        if self.message:
            body["message"] = self.message
        return body


class UnauthorizedError(APIException):
    """Authentication required."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class PreconditionError(APIException):
    """The caller's data is not in a state that allows the request."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="PRECONDITION_FAILED"
        )


class NotFoundError(APIException):
    """Resource not found."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class ConflictError(APIException):
    """Resource conflict (e.g., program no longer proposed)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class DailyLimitError(APIException):
    """Daily AI call quota exhausted. Terminal until the next UTC day."""

    def __init__(self, limit: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="daily_limit",
            error_code="DAILY_LIMIT",
            message=f"You have reached your daily AI limit ({limit}/{limit}). Try again tomorrow.",
        )


class UpstreamFormatError(APIException):
    """Model output unusable after the repair attempt."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code="UPSTREAM_FORMAT"
        )


class UpstreamTransportError(APIException):
    """Model provider unreachable or returned an error."""

    def __init__(self, detail: str = "AI service unavailable. Please try again."):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code="UPSTREAM_TRANSPORT"
        )


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers,
    )
