from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trackgate.models.canonical import CollectorApi, PayloadContext, PayloadEnvelope, PayloadSource
from trackgate.runtime import CollectorRuntime
from trackgate.validation import FailureKind, Invalid


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    runtime.close()


app = FastAPI(title="Trackgate Collector", version="0.1.0", lifespan=lifespan)


def _cors_origins() -> list[str]:
    raw = os.getenv("TRACKGATE_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    parsed = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if "*" in parsed:
        return ["*"]
    return parsed


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

runtime = CollectorRuntime()


async def build_envelope(request: Request, vendor: str, version: str) -> PayloadEnvelope:
    raw_body = await request.body()
    return PayloadEnvelope(
        api=CollectorApi(vendor=vendor, version=version),
        querystring=tuple(request.query_params.multi_items()),
        content_type=request.headers.get("content-type"),
        body=raw_body.decode("utf-8", errors="replace") if raw_body else None,
        source=PayloadSource(
            name=os.getenv("TRACKGATE_COLLECTOR_NAME", "trackgate-collector"),
            hostname=request.url.hostname,
        ),
        context=PayloadContext(
            timestamp=datetime.now(timezone.utc),
            ip_address=request.client.host if request.client else None,
            useragent=request.headers.get("user-agent"),
            referer_uri=request.headers.get("referer"),
            headers=tuple(f"{name}: {value}" for name, value in request.headers.items()),
        ),
    )


@app.get("/")
def root() -> dict[str, str]:
    return {"service": "trackgate-collector", "status": "ok"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/summary")
def summary() -> dict[str, Any]:
    return runtime.summary()


@app.api_route("/{vendor}/{version}", methods=["GET", "POST"])
async def collect(vendor: str, version: str, request: Request) -> Any:
    envelope = await build_envelope(request, vendor, version)
    outcome = await run_in_threadpool(runtime.ingest, envelope)
    if isinstance(outcome, Invalid):
        status_code = 404 if FailureKind.UNSUPPORTED_API in outcome.kinds else 400
        return JSONResponse(status_code=status_code, content={"errors": outcome.messages})
    return {"events": [event.model_dump(mode="json") for event in outcome.value]}
