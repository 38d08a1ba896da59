"""Gold Pass FastAPI application.

Run with:
    uvicorn goldpass.main:app --port 8000
"""
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from goldpass import config
from goldpass.api import claim, health, passes, profile, shortlinks, verify
from goldpass.audit.events import API_ERROR
from goldpass.exceptions import (
    GoldPassError,
    PassGenerationFailed,
    PassPayloadError,
    RateLimitedError,
    ValidationError,
)
from goldpass.logging_config import configure_logging
from goldpass.services import Services, build_services

log = logging.getLogger("goldpass")


def _error_body(exc: GoldPassError) -> dict:
    body = {"error": exc.message}
    if isinstance(exc, ValidationError):
        body["details"] = exc.errors
    elif isinstance(exc, PassGenerationFailed):
        body["reason"] = exc.reason
        body["retryable"] = True
    return body


def create_app(services: Services | None = None) -> FastAPI:
    """Build the application.

    Args:
        services: Pre-built container (tests). When None, the container is
            built from goldpass.config at startup and disposed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Starting Gold Pass service...")
        owned = services is None
        if owned:
            ok, message = config.validate_secrets_config()
            if not ok:
                log.error(f"Refusing to start: {message}")
                raise RuntimeError(message)
            app.state.services = build_services()
        log.info("Gold Pass service started")

        yield

        log.info("Shutting down Gold Pass service...")
        if owned:
            app.state.services.close()
        log.info("Gold Pass service stopped")

    app = FastAPI(
        title="Hushh Gold Pass",
        version="0.1.0",
        description="Gold Pass membership claims, verification and wallet passes",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(GoldPassError)
    async def goldpass_error_handler(request: Request, exc: GoldPassError):
        headers = None
        if isinstance(exc, RateLimitedError):
            headers = {"Retry-After": str(exc.retry_after)}

        if exc.status_code >= 500:
            detail = exc.reason if isinstance(exc, PassGenerationFailed) else str(exc)
            if isinstance(exc, PassPayloadError):
                detail = f"{exc.field}={exc.value!r}"
            log.error(
                f"{request.method} {request.url.path} failed: {exc.__class__.__name__}: {detail}",
                extra={"route": request.url.path, "status": exc.status_code},
            )
            await run_in_threadpool(
                request.app.state.services.events.emit,
                None,
                API_ERROR,
                {"route": request.url.path, "error": exc.__class__.__name__},
            )

        return JSONResponse(status_code=exc.status_code, content=_error_body(exc), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            details.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # -------------------------------------------------------------------------
    # Request logging
    # -------------------------------------------------------------------------

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        """Log all requests with timing."""
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        start = time.time()
        response = await call_next(request)
        duration_ms = int((time.time() - start) * 1000)
        response.headers["X-Request-ID"] = request_id

        log.info(
            f"request_complete status={response.status_code} duration_ms={duration_ms}",
            extra={
                "request_id": request_id,
                "route": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "remote_addr": request.client.host if request.client else None,
            },
        )
        return response

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    @app.get("/version")
    def version():
        """Return service version with commit link."""
        git_sha = os.getenv("GIT_SHA", "unknown")
        repo = os.getenv("GITHUB_REPOSITORY", "hushh-labs/hushh-gold-pass")
        result = {"version": app.version, "git_sha": git_sha}
        if git_sha != "unknown":
            result["github_url"] = f"https://github.com/{repo}/commit/{git_sha}"
            result["short_sha"] = git_sha[:7]
        return result

    app.include_router(health.router)
    app.include_router(claim.router)
    app.include_router(verify.router)
    app.include_router(shortlinks.router)
    app.include_router(profile.router)
    app.include_router(passes.router)

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("goldpass.main:app", host="0.0.0.0", port=config.SERVICE_PORT)
