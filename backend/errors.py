"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ShippingAssistantError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class MissingFieldError(ShippingAssistantError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class BrowserLaunchError(ShippingAssistantError):
    def __init__(self, reason: str):
        super().__init__(f"Headless browser failed to launch: {reason}", status_code=503)


class BrowserNotReadyError(ShippingAssistantError):
    def __init__(self):
        super().__init__("Headless browser is not running", status_code=503)


class PageCapacityError(ShippingAssistantError):
    def __init__(self, max_pages: int, timeout: float):
        super().__init__(
            f"All {max_pages} browser pages busy for {timeout:g}s",
            status_code=503,
        )


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(ShippingAssistantError)
    async def handle_shipping_error(_request: Request, exc: ShippingAssistantError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "malformed body") if errors else "malformed body"
        return JSONResponse({"error": f"Invalid request: {detail}"}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
