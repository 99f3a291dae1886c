# heritage_nest/errors.py
"""Error kinds raised by the service layer and their HTTP mapping.

Services raise ``ServiceError``; the handlers installed by
``register_exception_handlers`` turn it into a JSON envelope
``{"success": false, "error": <kind>, "message": <text>}`` with the status
code of its kind. Store errors that escape a route become ``store_failure``
without exposing the driver message.
"""
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .utils import logger


class ErrorKind(str, Enum):
    duplicate_account = "duplicate_account"
    invalid_credentials = "invalid_credentials"
    not_found = "not_found"
    invalid_bid = "invalid_bid"
    invalid_filter = "invalid_filter"
    invalid_attributes = "invalid_attributes"
    store_failure = "store_failure"


STATUS_CODES = {
    ErrorKind.duplicate_account: 400,
    ErrorKind.invalid_credentials: 401,
    ErrorKind.not_found: 404,
    ErrorKind.invalid_bid: 400,
    ErrorKind.invalid_filter: 400,
    ErrorKind.invalid_attributes: 422,
    ErrorKind.store_failure: 500,
}


class ServiceError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


def error_body(kind: ErrorKind, message: str) -> dict:
    return {"success": False, "error": kind.value, "message": message}


async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.message))


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=STATUS_CODES[ErrorKind.store_failure],
        content=error_body(ErrorKind.store_failure, "Internal storage error"),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
