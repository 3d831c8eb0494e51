from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.analysis.exceptions import AnalysisCancelled, AnalysisError
from app.database.exceptions import RecordNotFoundError, StoreError
from app.logging.logger import Log


class ApiError(Exception):
    """An error that maps directly to an HTTP status and ``{"error"}`` body."""

    def __init__(self, status_code: int, error: str, detail: str | None = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.detail = detail


def error_body(error: str, *, category: str | None = None, detail: str | None = None) -> dict[str, str]:
    body = {"error": error}
    if category is not None:
        body["category"] = category
    if detail:
        body["detail"] = detail
    return body


async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, detail=exc.detail),
        headers={"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None,
    )


async def _handle_analysis_error(request: Request, exc: AnalysisError) -> JSONResponse:
    Log.error(f"{request.method} {request.url.path} failed: {exc.category}: {exc}")
    return JSONResponse(
        status_code=500,
        content=error_body(str(exc), category=exc.category, detail=exc.detail),
    )


async def _handle_cancelled(request: Request, exc: AnalysisCancelled) -> JSONResponse:
    Log.warning(f"{request.method} {request.url.path} cancelled: {exc}")
    return JSONResponse(status_code=503, content=error_body("cancelled", detail=str(exc)))


async def _handle_not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_body(str(exc)))


async def _handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=error_body("Record store operation failed", category=exc.category, detail=str(exc)),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    Log.exception(f"{request.method} {request.url.path} raised {type(exc).__name__}")
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions onto JSON error responses."""
    app.add_exception_handler(ApiError, _handle_api_error)  # type: ignore[arg-type]
    app.add_exception_handler(AnalysisError, _handle_analysis_error)  # type: ignore[arg-type]
    app.add_exception_handler(AnalysisCancelled, _handle_cancelled)  # type: ignore[arg-type]
    app.add_exception_handler(RecordNotFoundError, _handle_not_found)  # type: ignore[arg-type]
    app.add_exception_handler(StoreError, _handle_store_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected)
