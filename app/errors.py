"""Error taxonomy for performance scoring and its HTTP mapping."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PerformanceError(Exception):
    status_code: int = 400

    def __init__(self, code: str, detail: str, status_code: int | None = None):
        super().__init__(detail)
        self.code = code
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.detail)


class EmployeeNotFoundError(PerformanceError):
    status_code = 404

    def __init__(self, employee_id: str, detail: str | None = None):
        super().__init__("employee_not_found", detail or f"Employee {employee_id} not found")
        self.employee_id = employee_id


class InvalidDateRangeError(PerformanceError):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__("invalid_date_range", detail)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PerformanceError)
    async def _performance_error_handler(request: Request, exc: PerformanceError):
        http_exc = exc.to_http_exception()
        logger.info("performance_error code=%s status=%s path=%s", exc.code, http_exc.status_code, request.url.path)
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail, "code": exc.code})
