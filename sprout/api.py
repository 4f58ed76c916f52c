# -*- coding: utf-8 -*-
"""
Sprout API

Plant-based cooking companion: onboarding, grocery list, recipe generation and
veganizing, label/menu scanning and the impact forest.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .ai.api import router as ai_router
from .config import settings
from .grocery.api import router as grocery_router
from .impact.api import router as impact_router
from .llm.client import LLMError
from .ocr.vision import OCRError
from .recipes.api import router as recipes_router
from .recipes.api import veganize_router
from .scan.api import router as scan_router
from .store import StorageError
from .users.api import router as users_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Sprout",
    description="Plant-based cooking companion backend",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageError)
async def _storage_error(request: Request, exc: StorageError):
    logger.exception("storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal storage error"})


@app.exception_handler(LLMError)
@app.exception_handler(OCRError)
async def _upstream_error(request: Request, exc: RuntimeError):
    logger.warning("upstream failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Upstream model unavailable"})


app.include_router(users_router)
app.include_router(impact_router)
app.include_router(grocery_router)
app.include_router(recipes_router)
app.include_router(veganize_router)
app.include_router(scan_router)
app.include_router(ai_router)


@app.get("/")
def root():
    return {"status": "ok", "message": "Sprout backend running"}


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("SPROUT_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("SPROUT_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000
    uvicorn.run("sprout.api:app", host=host, port=port, reload=False)
