"""
SEND PDF Engine - FastAPI application entry point.
"""
from __future__ import annotations

import logging
import sys
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from packages.shared import settings
from packages.shared.errors import RequestValidationError

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("send_pdf")

app = FastAPI(
    title="SEND PDF Engine",
    description="NEWS2 and MEOWS observation charts as PDF documents",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
)


@app.middleware("http")
async def request_audit_middleware(request: Request, call_next):
    started = time.perf_counter()
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex

    content_length = request.headers.get("Content-Length")
    if content_length and content_length.isdigit() and int(content_length) > settings.MAX_REQUEST_BYTES:
        return JSONResponse(
            status_code=413,
            content={"detail": "Request entity too large"},
            headers={"X-Request-Id": request_id},
        )

    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id

    duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "request_audit request_id=%s method=%s path=%s status=%s duration_ms=%s",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(RequestValidationError)
async def bad_chart_request(request: Request, exc: RequestValidationError):
    logger.warning(f"Badly formed request: {exc.problems}")
    return Response(status_code=400)


@app.exception_handler(BodyValidationError)
async def unreadable_body(request: Request, exc: BodyValidationError):
    logger.warning(f"Unreadable request body: {exc.errors()}")
    return Response(status_code=400)


# Register routes
from apps.api.routes.charts import router as charts_router  # noqa: E402

app.include_router(charts_router)


@app.get("/running")
def running():
    return {"running": True}


@app.get("/healthcheck")
def healthcheck():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    logger.info(f"send-pdf-engine listening on port {settings.PORT}!")
    uvicorn.run("apps.api.main:app", host="0.0.0.0", port=settings.PORT)
