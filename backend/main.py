# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register the request-logging middleware.
* Mount the feature routers (public intake, auth, admin).
* Map the error taxonomy in ``core.errors`` onto HTTP responses.
* Probe the database at startup: fatal in production, degraded mode
  otherwise.
* Expose a /health endpoint for container liveness checks.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.exc import OperationalError
from starlette.middleware.base import BaseHTTPMiddleware

from admin.router import router as admin_router
from auth.router import router as auth_router
from intake.router import router as intake_router
from core.config import settings
from core.errors import AppError, RedirectRequired, StoreUnavailableError, ValidationError
from core.logger import logger
from core.pages import render, wants_html
from core.security import get_client_ip
from core.sessions import set_session_cookie
from database import store_status

app = FastAPI(title="Royal Wedding by Ully Sjah", version="1.0.0")


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Form bodies (passwords, customer details) are never echoed.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            get_client_ip(request),
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_RequestLogMiddleware)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(intake_router)
app.include_router(auth_router)
app.include_router(admin_router)

# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def _error_response(request: Request, exc: AppError) -> Response:
    if wants_html(request):
        return render(
            request, "error.html",
            {"error_code": exc.status_code, "error_message": exc.detail},
            status_code=exc.status_code,
        )
    content = {"detail": exc.detail}
    if isinstance(exc, ValidationError):
        content["errors"] = [e.as_dict() for e in exc.errors]
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(AppError)
async def _app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    return _error_response(request, exc)


@app.exception_handler(RedirectRequired)
async def _redirect(request: Request, exc: RedirectRequired):
    response = RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)
    if exc.session_id:
        set_session_cookie(response, exc.session_id)
    return response


@app.exception_handler(OperationalError)
async def _store_lost(request: Request, exc: OperationalError):
    store_status.mark_down()
    return _error_response(request, StoreUnavailableError())


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def _on_startup():
    logger.info("Wedding site starting up (environment=%s)", settings.environment)
    if store_status.ping():
        return
    if settings.production:
        logger.critical("Database unreachable at startup – refusing to start in production")
        raise RuntimeError("database unreachable")
    logger.warning(
        "Database unreachable – serving public pages only, admin routes %s",
        "stay routable" if settings.admin_reachable_when_degraded else "answer 503",
    )


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("Wedding site shutting down")


@app.get("/health")
def health():
    return {"status": "ok", "store": "up" if store_status.available else "down"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
