"""Centralized error translation into problem-detail responses.

Every error that reaches the request boundary passes through this module,
which is the only place an error HTTP status is decided:

1. :func:`classify_exception` turns an exception into one of the
   :data:`ErrorKind` variants (the only place the exception hierarchy
   is inspected).
2. :func:`build_problem_detail` maps a variant to a :class:`ProblemDetail`
   and logs it.

Callers never see stack traces; full detail goes to the server log.
"""

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Literal

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.core.logging import (
    EVENT_DOMAIN_ERROR,
    EVENT_REQUEST_REJECTED,
    EVENT_STATUS_CODE_UNMAPPED,
    EVENT_UNEXPECTED_ERROR,
    log_event,
)
from backend.app.models.problem import PROBLEM_JSON_MEDIA_TYPE, ProblemDetail

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "API Error Occurred"
DEFAULT_MESSAGE = "API Error occurred. Please contact support or administrator."


class DomainError(Exception):
    """Error carrier for failed upstream calls and rejected local input.

    ``status_code`` is the intended response status; ``None`` means unknown
    and is translated to 500.
    """

    def __init__(
        self,
        detail_message: str = "",
        title: str = DEFAULT_TITLE,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(detail_message)
        self.detail_message = detail_message
        self.title = title
        self.status_code = status_code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


def upstream_message(exc: httpx.HTTPStatusError) -> str:
    """Short ``"<status> <reason>"`` text for an upstream error response."""
    response = exc.response
    return f"{response.status_code} {response.reason_phrase}".strip()


# ---------------------------------------------------------------------------
# Error kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UpstreamHttpFailure:
    """Upstream error response that escaped the client unwrapped."""

    status: int
    message: str
    kind: Literal["upstream_http"] = "upstream_http"


@dataclass(frozen=True)
class DomainFailure:
    title: str
    detail: str
    status_code: int | None = None
    kind: Literal["domain"] = "domain"


@dataclass(frozen=True)
class RequestRejected:
    """Local request error: unsupported method, unknown route, bad parameter."""

    status: int
    message: str
    kind: Literal["request_rejected"] = "request_rejected"


@dataclass(frozen=True)
class UnexpectedFailure:
    message: str
    exc: BaseException | None = None
    kind: Literal["unexpected"] = "unexpected"


ErrorKind = UpstreamHttpFailure | DomainFailure | RequestRejected | UnexpectedFailure
"""Tagged union of everything the translator knows how to map."""


def classify_exception(exc: BaseException) -> ErrorKind:
    """Convert *exc* into an :data:`ErrorKind`, in precedence order."""
    if isinstance(exc, httpx.HTTPStatusError):
        return UpstreamHttpFailure(
            status=exc.response.status_code,
            message=upstream_message(exc),
        )
    if isinstance(exc, DomainError):
        return DomainFailure(
            title=exc.title,
            detail=exc.detail_message,
            status_code=exc.status_code,
        )
    if isinstance(exc, StarletteHTTPException):
        return RequestRejected(status=exc.status_code, message=str(exc.detail or ""))
    if isinstance(exc, RequestValidationError):
        messages = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        ]
        return RequestRejected(status=400, message="; ".join(messages))
    return UnexpectedFailure(message=str(exc), exc=exc)


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def _non_blank(message: str | None) -> str:
    if message and message.strip():
        return message
    return DEFAULT_MESSAGE


def resolve_status_code(status_code: int | None) -> int:
    """Return *status_code* if it is a recognised HTTP status, else 500."""
    if status_code is not None:
        try:
            return HTTPStatus(status_code).value
        except ValueError:
            pass
    log_event(
        logger, "info", EVENT_STATUS_CODE_UNMAPPED,
        status_code=status_code,
        fallback=HTTPStatus.INTERNAL_SERVER_ERROR.value,
    )
    return HTTPStatus.INTERNAL_SERVER_ERROR.value


def build_problem_detail(kind: ErrorKind, *, operation: str = "N/A") -> ProblemDetail:
    """Map an error kind to the outbound problem document."""
    if kind.kind == "upstream_http":
        return ProblemDetail(
            status=kind.status,
            title=DEFAULT_TITLE,
            detail=_non_blank(kind.message),
        )

    if kind.kind == "domain":
        log_event(
            logger, "error", EVENT_DOMAIN_ERROR,
            operation=operation,
            title=kind.title,
            status_code=kind.status_code,
            detail=kind.detail,
        )
        return ProblemDetail(
            status=resolve_status_code(kind.status_code),
            title=kind.title,
            detail=_non_blank(kind.detail),
        )

    if kind.kind == "request_rejected":
        status = resolve_status_code(kind.status)
        log_event(
            logger, "warning", EVENT_REQUEST_REJECTED,
            operation=operation,
            status=status,
            detail=kind.message,
        )
        return ProblemDetail(
            status=status,
            title=HTTPStatus(status).phrase,
            detail=_non_blank(kind.message),
        )

    log_event(
        logger, "error", EVENT_UNEXPECTED_ERROR,
        operation=operation,
        detail=kind.message,
        exc_info=kind.exc if kind.exc is not None else True,
    )
    return ProblemDetail(
        status=HTTPStatus.INTERNAL_SERVER_ERROR.value,
        title=DEFAULT_TITLE,
        detail=_non_blank(kind.message),
    )


def translate_exception(exc: BaseException, *, operation: str = "N/A") -> ProblemDetail:
    """Classify and map *exc*. Never raises."""
    try:
        return build_problem_detail(classify_exception(exc), operation=operation)
    except Exception:
        logger.exception("%s: operation=%s translation_failed", EVENT_UNEXPECTED_ERROR, operation)
        return ProblemDetail(
            status=HTTPStatus.INTERNAL_SERVER_ERROR.value,
            title=DEFAULT_TITLE,
            detail=DEFAULT_MESSAGE,
        )


# ---------------------------------------------------------------------------
# FastAPI wiring
# ---------------------------------------------------------------------------


def problem_response(
    problem: ProblemDetail,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.to_body(),
        media_type=PROBLEM_JSON_MEDIA_TYPE,
        headers=headers,
    )


async def _handle_exception(request: Request, exc: Exception) -> JSONResponse:
    problem = translate_exception(exc, operation=f"{request.method} {request.url.path}")
    headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
    return problem_response(problem, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Route every error type through :func:`translate_exception`."""
    for exc_type in (
        DomainError,
        httpx.HTTPStatusError,
        StarletteHTTPException,
        RequestValidationError,
        Exception,
    ):
        app.add_exception_handler(exc_type, _handle_exception)
