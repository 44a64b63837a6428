# ── src/response_utils.py ─────────────────────────────────────────────────
"""
Response formatting shared by every route.

Every answer – success, 4xx, 5xx, 404 and preflight – carries the same
fixed cross-origin header set so that browser consoles on any origin can
ship logs here.
"""
from typing import Any, Dict

from fastapi.responses import JSONResponse, PlainTextResponse, Response

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age":       "86400",
}


def json_response(data: Any, status: int = 200) -> JSONResponse:
    return JSONResponse(content=data, status_code=status, headers=CORS_HEADERS)


def error_response(message: str, status: int) -> JSONResponse:
    return json_response({"error": message}, status)


def not_found() -> PlainTextResponse:
    return PlainTextResponse("Not Found", status_code=404, headers=CORS_HEADERS)


def preflight() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


def apply_cors(response: Response) -> Response:
    """Stamp the cross-origin headers onto a response built elsewhere."""
    for key, value in CORS_HEADERS.items():
        response.headers[key] = value
    return response
