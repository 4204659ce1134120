# wl_app/core/errors.py
from fastapi import Request
from fastapi.responses import JSONResponse


class DatabaseConfigError(RuntimeError):
    """Connection settings are missing; the process must not start."""


class ApiError(Exception):
    """Expected request failure rendered as ``{"ok": false, "error": code}``."""

    def __init__(self, status_code: int, error: str):
        super().__init__(error)
        self.status_code = status_code
        self.error = error


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.error)
