# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-28
# Updated: 2026-09-27
# Description: gradio_app.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import asyncio
import base64
import json
import mimetypes
import os
from typing import Any, Dict, List, Optional, Tuple

import gradio as gr
import pandas as pd
import requests

from feed.EmojiFeedClient import EmojiFeedClient
from feed.EmojiFeedReconciler import EmojiFeedReconciler, FeedStatus
from record.EmojiRecord import EmojiRecord
from search.DebouncedSearch import DebouncedSearch
from settings import (
    ALLOWED_MIME_TYPES,
    MAX_UPLOAD_BYTES,
    SEARCH_DEBOUNCE_SECONDS,
    SEARCH_LIMIT_DEFAULT,
    SEARCH_LIMIT_MAX,
    SEARCH_THRESHOLD_DEFAULT,
)
from utility.logging_utils import get_logger

logger = get_logger(__name__)

# Environment configuration
API_BASE_URL = os.getenv("EMOJIFY_API_BASE_URL", "http://127.0.0.1:8000").rstrip("/")
LOG_FILE = os.getenv("EMOJIFY_LOG_FILE", "./logs/emojify.log")
LOG_TAIL_LINES = int(os.getenv("EMOJIFY_UI_LOG_TAIL_LINES", "400"))
TIMEOUT_SECONDS = int(os.getenv("EMOJIFY_UI_TIMEOUT_SECONDS", "60"))
FEED_REFRESH_SECONDS = float(os.getenv("EMOJIFY_UI_FEED_REFRESH_SECONDS", "2.0"))

FEED_COLUMNS = ["visual", "description", "created_at"]
SEARCH_COLUMNS = ["visual", "description", "similarity", "created_at"]

STATUS_LABELS = {
    FeedStatus.CONNECTING: "🟡 Connecting...",
    FeedStatus.SUBSCRIBED: "🟢 Live",
    FeedStatus.ERROR: "🔴 Connection error",
    FeedStatus.CLOSED: "⚪ Disconnected",
}


# Small URL helpers
def _url(path: str) -> str:
    return f"{API_BASE_URL}{path}"


def _get(path: str, params: Optional[dict] = None) -> Dict[str, Any]:
    try:
        r = requests.get(_url(path), params=params, timeout=TIMEOUT_SECONDS)
        if not r.ok:
            return {"error": f"HTTP {r.status_code}: {r.text}"}
        return r.json()
    except requests.exceptions.RequestException as e:
        return {"error": f"API request failed: {e}"}


def _post(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        r = requests.post(_url(path), json=payload, timeout=TIMEOUT_SECONDS)
        if not r.ok:
            return {"error": f"HTTP {r.status_code}: {r.text}"}
        return r.json()
    except requests.exceptions.RequestException as e:
        return {"error": f"RequestException: {e}"}


# Log tailing for UI
def tail_log_file(path: str, n_lines: int = 200) -> str:
    """
    Tail last n_lines from a local log file path.
    """
    try:
        if not path or not os.path.exists(path):
            return f"[log] file not found: {path}"
        with open(path, "rb") as f:
            data = f.read()
        text = data.decode("utf-8", errors="replace")
        lines = text.splitlines()[-int(n_lines):]
        return "\n".join(lines)
    except OSError as e:
        return f"[log] failed to read log file: {e}"


def _visual_markdown(visual: str) -> str:
    if visual.startswith("http://") or visual.startswith("https://"):
        return f"![sticker]({visual})"
    return f"# {visual}"


def _records_frame(rows: List[Dict[str, Any]], columns: List[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows)[columns]


# Upload UI functions
def check_upload(path: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Client-side checks before we spend an API call.
    Returns (mime_type, error).
    """
    if not path:
        return None, "Please choose an image first."
    mime_type, _ = mimetypes.guess_type(path)
    if mime_type not in ALLOWED_MIME_TYPES:
        return None, "Please upload a JPEG or PNG image."
    if os.path.getsize(path) > MAX_UPLOAD_BYTES:
        return None, "File size must be less than 5MB"
    return mime_type, None


def ui_upload(path: Optional[str]) -> Tuple[str, str]:
    mime_type, error = check_upload(path)
    if error:
        return f"**{error}**", ""

    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")

    out = _post("/emoji", payload={"file": encoded, "mimeType": mime_type})
    if "error" in out:
        return f"**Upload failed:** {out['error']}", json.dumps(out, indent=2)

    record = out.get("emoji") or out.get("sticker") or {}
    record.pop("embedding", None)
    return _visual_markdown(record.get("visual", "")), json.dumps(record, indent=2)


# Search UI functions
_debouncers: Dict[str, DebouncedSearch] = {}


def _search_api(query: str, limit: int, threshold: float) -> Dict[str, Any]:
    return _get("/search", params={"q": query, "limit": int(limit), "threshold": float(threshold)})


async def _search_async(query: str, *, limit: int, threshold: float) -> Dict[str, Any]:
    return await asyncio.to_thread(_search_api, query, limit, threshold)


def _session_key(request: Optional[gr.Request]) -> str:
    return getattr(request, "session_hash", None) or "default"


async def ui_search(text: str, limit: int, threshold: float, request: gr.Request):
    key = _session_key(request)
    debouncer = _debouncers.get(key)
    if debouncer is None:
        debouncer = _debouncers[key] = DebouncedSearch(_search_async, delay=SEARCH_DEBOUNCE_SECONDS)

    if not (text or "").strip():
        debouncer.cancel()
        return _records_frame([], SEARCH_COLUMNS), ""

    out = await debouncer.submit(text, limit=limit, threshold=threshold)
    if out is None:
        # superseded by newer input
        return gr.update(), gr.update()
    if "error" in out:
        return _records_frame([], SEARCH_COLUMNS), f"**{out['error']}**"

    count = out.get("count", 0)
    note = f"{count} result(s) for *{out.get('query', '')}*" if count else "No matching emojis found."
    return _records_frame(out.get("results") or [], SEARCH_COLUMNS), note


# Live feed UI functions
_feeds: Dict[str, Tuple[EmojiFeedReconciler, EmojiFeedClient, asyncio.AbstractEventLoop]] = {}


async def ui_start_feed(request: gr.Request):
    key = _session_key(request)
    if key not in _feeds:
        client = EmojiFeedClient(API_BASE_URL)
        reconciler = EmojiFeedReconciler(client)
        _feeds[key] = (reconciler, client, asyncio.get_running_loop())
        reconciler.start()
        logger.info("Live feed started for session %s", key)
    return ui_render_feed(request)


def _feed_rows(records: List[EmojiRecord]) -> List[Dict[str, Any]]:
    return [r.to_dict(include_embedding=False) for r in records]


def ui_render_feed(request: gr.Request):
    entry = _feeds.get(_session_key(request))
    if entry is None:
        return _records_frame([], FEED_COLUMNS), STATUS_LABELS[FeedStatus.CLOSED]

    reconciler = entry[0]
    status = STATUS_LABELS[reconciler.status]
    if reconciler.last_update is not None:
        status += f"  (last update {reconciler.last_update.strftime('%H:%M:%S')} UTC)"
    return _records_frame(_feed_rows(reconciler.records), FEED_COLUMNS), status


async def _close_feed(reconciler: EmojiFeedReconciler, client: EmojiFeedClient) -> None:
    await reconciler.close()
    await client.aclose()


def ui_stop_session(request: gr.Request) -> None:
    key = _session_key(request)
    _debouncers.pop(key, None)
    entry = _feeds.pop(key, None)
    if entry is not None:
        reconciler, client, loop = entry
        asyncio.run_coroutine_threadsafe(_close_feed(reconciler, client), loop)
        logger.info("Live feed closed for session %s", key)


# Build Gradio UI
def build_gradio_app(api_base_url: str = API_BASE_URL) -> gr.Blocks:
    global API_BASE_URL
    API_BASE_URL = api_base_url.rstrip("/")

    with gr.Blocks(title="Emojify", analytics_enabled=False) as demo:
        gr.Markdown(f""" # Emojify **API:** `{API_BASE_URL}`  **Log file:** `{LOG_FILE}`""")

        with gr.Tab("Upload"):
            u_image = gr.Image(label="Photo (JPEG or PNG, max 5MB)", type="filepath", sources=["upload", "webcam"])
            u_btn = gr.Button("Emojify!")
            u_visual = gr.Markdown()
            u_json = gr.Code(label="Record", language="json")
            u_btn.click(fn=ui_upload, inputs=[u_image], outputs=[u_visual, u_json])

        with gr.Tab("Search"):
            s_text = gr.Textbox(label="Search", placeholder="happy dog, sunset beach...")
            with gr.Row():
                s_limit = gr.Slider(1, SEARCH_LIMIT_MAX, value=SEARCH_LIMIT_DEFAULT, step=1, label="limit")
                s_threshold = gr.Slider(0.0, 1.0, value=SEARCH_THRESHOLD_DEFAULT, step=0.05, label="threshold")
            s_note = gr.Markdown()
            s_results = gr.Dataframe(label="Results", interactive=False)
            s_text.change(
                fn=ui_search,
                inputs=[s_text, s_limit, s_threshold],
                outputs=[s_results, s_note],
                concurrency_limit=None,
                show_progress="hidden",
            )

        with gr.Tab("Live Feed"):
            f_status = gr.Markdown(STATUS_LABELS[FeedStatus.CONNECTING])
            f_table = gr.Dataframe(label="Newest first", interactive=False)
            f_timer = gr.Timer(value=FEED_REFRESH_SECONDS)
            f_timer.tick(fn=ui_render_feed, outputs=[f_table, f_status], show_progress="hidden")

        with gr.Tab("Logs"):
            with gr.Row():
                log_path = gr.Textbox(label="Log file path", value=LOG_FILE)
                tail_lines = gr.Slider(50, 2000, value=LOG_TAIL_LINES, step=50, label="Tail lines")
                refresh_logs_btn = gr.Button("Refresh logs")
            log_view = gr.Textbox(label="Logs", value="", lines=25, interactive=False)
            refresh_logs_btn.click(fn=tail_log_file, inputs=[log_path, tail_lines], outputs=[log_view])

        demo.load(fn=ui_start_feed, outputs=[f_table, f_status])
        demo.unload(ui_stop_session)

    return demo


if __name__ == "__main__":
    import threading
    import uvicorn

    API_HOST = os.getenv("EMOJIFY_API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("EMOJIFY_API_PORT", "8000"))

    UI_HOST = os.getenv("EMOJIFY_UI_HOST", "127.0.0.1")
    UI_PORT = int(os.getenv("EMOJIFY_UI_PORT", "7860"))

    def run_api() -> None:
        uvicorn.run("api.main:app", host=API_HOST, port=API_PORT, log_level="info", reload=False)

    api_thread = threading.Thread(target=run_api, daemon=True)
    api_thread.start()

    demo = build_gradio_app()
    demo.launch(server_name=UI_HOST, server_port=UI_PORT)
