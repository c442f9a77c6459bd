import uuid
import time
import json
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import SubmissionError
from app.routers import health, submissions


def create_app() -> FastAPI:
    logging.basicConfig(
        level=str(settings.log_level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = FastAPI(title="Quiz Relay API", version="1.0.0")

    logger = logging.getLogger("quizrelay")

    # httpx logs request URLs, and Telegram URLs carry the bot token.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    cors_headers = {
        "Access-Control-Allow-Origin": str(settings.cors_allow_origin or "*"),
        "Access-Control-Allow-Methods": str(settings.cors_allow_methods or "POST, OPTIONS"),
        "Access-Control-Allow-Headers": str(settings.cors_allow_headers or "Content-Type"),
    }

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        t0 = time.perf_counter()
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = rid
        status_code: int | None = None
        try:
            response = await call_next(request)
            status_code = int(getattr(response, "status_code", 0) or 0)
        except Exception:
            status_code = 500
            raise
        finally:
            path = getattr(getattr(request, "url", None), "path", "")
            if not path.startswith("/health"):
                logger.info(
                    json.dumps(
                        {
                            "ts": datetime.now(timezone.utc).isoformat(),
                            "rid": rid,
                            "method": request.method,
                            "path": path,
                            "status": status_code,
                            "duration_ms": int((time.perf_counter() - t0) * 1000),
                        },
                        ensure_ascii=False,
                    )
                )
        response.headers["X-Request-ID"] = rid
        for k, v in cors_headers.items():
            response.headers.setdefault(k, v)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        return response

    @app.exception_handler(SubmissionError)
    async def submission_error_handler(request: Request, exc: SubmissionError):
        if exc.status_code >= 500:
            logger.error("submission failed: %s (%s)", exc.error, exc.details)
        else:
            logger.info("submission rejected: %s", exc.error)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail
        if int(exc.status_code) == 405:
            error_message = "Method not allowed"
        else:
            error_message = str(detail or "request failed")
        return JSONResponse(
            status_code=int(exc.status_code),
            content={"success": False, "error": error_message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled exception", extra={"rid": getattr(request.state, "request_id", None)})
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "details": str(exc)},
            headers=cors_headers,
        )

    app.include_router(health.router)
    app.include_router(submissions.router)

    return app

app = create_app()
