import uuid
import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from tortoise.exceptions import BaseORMException

from app.core.errors import InventoryError, StoreFailure

log = logging.getLogger("uvicorn")


# Generate a clean request id for every response
def _rid():
    """Generates a unique request ID for tracing."""
    return uuid.uuid4().hex


def _error_body(code: str, message, details=None):
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error, "request_id": _rid()}


# ----------- Exception Handlers (called by FastAPI) -----------

def http_exception_handler(request: Request, exc: HTTPException):
    """Handles exceptions raised by HTTPException (e.g., 404, 400)."""
    return JSONResponse(status_code=exc.status_code, content=_error_body("http_error", exc.detail))


def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reports request validation errors as 400 with one entry per offending field."""
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    body = _error_body("validation_error", "Invalid input data", details)
    return JSONResponse(status_code=400, content=body)


def inventory_exception_handler(request: Request, exc: InventoryError):
    """Handles domain errors raised by the service layer."""
    if exc.status_code >= 500:
        log.error(f"{exc.code} on path {request.url.path}: {exc.message}")
    body = _error_body(exc.code, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=body)


def orm_exception_handler(request: Request, exc: BaseORMException):
    """Database errors that escaped the service layer are store failures."""
    return inventory_exception_handler(request, StoreFailure(str(exc)))


def generic_exception_handler(request: Request, exc: Exception):
    """Handles all unhandled exceptions (500 Internal Server Error)."""
    log.exception(f"Unhandled exception on path: {request.url.path}")
    return JSONResponse(status_code=500, content=_error_body("server_error", str(exc) or "Internal Server Error"))


# ----------- Registration Function -----------

def setup_exception_handlers(app: FastAPI):
    """Registers all custom exception handlers with the FastAPI application."""
    
    # Register handlers
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InventoryError, inventory_exception_handler)
    app.add_exception_handler(BaseORMException, orm_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    
    return app
