# ── src/main.py ───────────────────────────────────────────────────────────────
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from response_utils import apply_cors, error_response, not_found, preflight

logging.basicConfig(
    level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
_logger = logging.getLogger(__name__)

# no docs routes: every path outside the table below must answer 404
app = FastAPI(title="Console Log Relay", docs_url=None, redoc_url=None, openapi_url=None)


# ── CORS + last-resort error handling
# Fixed wildcard headers on every response, with or without an Origin header.
@app.middleware("http")
async def cors_and_errors(request: Request, call_next):
    if request.method == "OPTIONS":
        return preflight()
    try:
        response = await call_next(request)
    except Exception as exc:  # noqa: BLE001
        _logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(str(exc), 500)
    return apply_cors(response)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    # unknown path and known path with the wrong verb look the same to clients
    if exc.status_code in (404, 405):
        return not_found()
    return error_response(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def body_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    _logger.warning("Rejected body on %s %s: %s", request.method, request.url.path, message)
    return error_response(message, 500)


# ── routes -----------------------------------------------------------------
from routers.healthz.endpoints import router as health_router
from routers.logs.endpoints    import router as logs_router

app.include_router(health_router)
app.include_router(logs_router)
