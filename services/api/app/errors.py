"""Error taxonomy for the chat relay and its HTTP mapping."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """Base class for errors that end a request with a user-visible message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Error del servidor al procesar la solicitud."

    def __init__(self, public_message: str | None = None, *, detail: str | None = None) -> None:
        self.public_message = public_message or self.public_message
        # Technical detail stays in server logs.
        self.detail = detail
        super().__init__(detail or self.public_message)


class MessageValidationError(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "El mensaje está vacío o no es válido."


class PolicyViolationError(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "El contenido del mensaje ha sido bloqueado por políticas de seguridad."


class ConfigurationError(RelayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "OpenAI API key not configured."


class UpstreamError(RelayError):
    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Error comunicándose con el servicio de IA."


class MalformedUpstreamResponseError(UpstreamError):
    public_message = "Respuesta inesperada del servicio de IA."


class RelayServerError(RelayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Error del servidor al procesar la solicitud."


async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail or exc.public_message)
    else:
        logger.info("rejected request on %s: %s", request.url.path, exc.public_message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("invalid request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": MessageValidationError.public_message},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RelayError, _relay_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
