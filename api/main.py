# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-09-25
# Description: main.py
# -----------------------------------------------------------------------------
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.dependencies import get_container
from api.routers import emoji, feed, health, search
import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    # wake any open /feed/stream responses so shutdown doesn't hang on them
    if get_container.cache_info().currsize:
        get_container().broadcaster.close_all()


app = FastAPI(title="Emojify API", lifespan=lifespan)
app.include_router(emoji.router)
app.include_router(search.router)
app.include_router(feed.router)
app.include_router(health.router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "Invalid search parameters" if request.url.path.startswith("/search") else "Invalid request data"
    logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": jsonable_encoder(exc.errors())},
    )


if settings.MOUNT_UI:
    import gradio as gr

    from ui.gradio_app import build_gradio_app

    # Mount Gradio (served by the SAME uvicorn process/port)
    API_BASE_URL = os.getenv("EMOJIFY_API_BASE_URL", "http://127.0.0.1:8000")
    gradio_blocks = build_gradio_app(api_base_url=API_BASE_URL)
    app = gr.mount_gradio_app(app, gradio_blocks, path="/ui")
