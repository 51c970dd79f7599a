"""
The {meta, result, errors} envelope returned by every endpoint.

Routers build successful envelopes with respond(). Failures are raised as
exceptions and turned into envelopes by the handlers installed by
install_envelope(), so a route body only deals with the happy path.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rbac_admin.constants import MESSAGE
from rbac_admin.errors import RbacError, ValidationFailed
from rbac_admin.util.logging import get_logger
from rbac_admin.validation import translate_errors

from .dependencies import record_rejected_request

logger = get_logger(__name__)


def respond(
    code: int,
    message: str,
    result: Any = None,
    errors: Optional[Union[Dict[str, List[str]], List[str]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={
            "meta": {"code": code, "success": code < 400, "message": message},
            "result": jsonable_encoder(result) if result is not None else [],
            "errors": errors if errors is not None else [],
        },
        headers=headers,
    )


async def rbac_error_handler(request: Request, exc: RbacError):
    return respond(exc.status_code, exc.message, errors=exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = translate_errors(exc.errors(), strip_request_location=True)
    await record_rejected_request(request, errors)
    return respond(ValidationFailed.status_code, MESSAGE.VALIDATION_ERROR, errors=errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return respond(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def catch_unexpected_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc}",
            exc_info=exc,
        )
        return respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            MESSAGE.SERVER_ERROR,
            errors=[str(exc)],
        )


def install_envelope(app: FastAPI):
    app.add_exception_handler(RbacError, rbac_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.middleware("http")(catch_unexpected_errors)
