"""FastAPI server for Strata.

Hosts the live document and relays the hierarchy message protocol over
a WebSocket, standing in for the parent-frame channel a browser embed
would use. Endpoints are registered on an ``APIRouter`` so a larger
application can mount them; the standalone ``app`` includes it directly::

    uvicorn strata.server:app --reload --port 8430
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from strata import __version__
from strata.config import ExtractorConfig
from strata.core.document import HtmlDocument
from strata.hierarchy import HierarchyExtractor, IdentityCache

logger = logging.getLogger(__name__)

router = APIRouter()

app = FastAPI(
    title="Strata API",
    description="Document hierarchy inference and viewer synchronization",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory state: one live document shared by every connection
_state: dict[str, Any] = {
    "document": None,
    "identity": IdentityCache(),
    "config": ExtractorConfig.from_env(),
}

# Extractors of connected viewers, re-pointed when the document is replaced
_viewers: set[HierarchyExtractor] = set()


# ============================================================================
# Pydantic Models for API
# ============================================================================


class LoadDocumentRequest(BaseModel):
    """Request body for replacing the live document."""

    html: str = Field(..., max_length=5_000_000)


class AppendSectionRequest(BaseModel):
    """Request body for appending markup to the live document."""

    html: str = Field(..., min_length=1, max_length=1_000_000)
    parent_section_id: str | None = None


class ClickRequest(BaseModel):
    """A click on a section, or on the page background when empty."""

    section_id: str | None = None


# ============================================================================
# Helpers
# ============================================================================


def _require_document() -> HtmlDocument:
    document = _state["document"]
    if document is None:
        raise HTTPException(status_code=400, detail="No document loaded")
    return document


def _find_section(document: HtmlDocument, section_id: str) -> Any:
    config: ExtractorConfig = _state["config"]
    element = document.find_by_attribute(config.section_id_attribute, section_id)
    if element is None:
        element = document.find_by_attribute("id", section_id)
    if element is None:
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    return element


def _make_extractor(document: HtmlDocument, listener: Any) -> HierarchyExtractor:
    return HierarchyExtractor(
        document,
        listener,
        config=_state["config"],
        identity=_state["identity"],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/api/health")
async def health_check() -> dict[str, Any]:
    return {"status": "ok", "version": __version__}


@router.post("/api/document")
async def load_document(request: LoadDocumentRequest) -> dict[str, Any]:
    """Replace the live document."""
    previous: HtmlDocument | None = _state["document"]
    if previous is not None:
        previous.detach()

    document = HtmlDocument(request.html)
    _state["document"] = document
    _state["identity"].clear()

    for viewer in list(_viewers):
        viewer.attach(document)

    extractor = _make_extractor(document, lambda message: None)
    return {"status": "loaded", "candidates": len(extractor.candidates())}


@router.get("/api/hierarchy")
async def get_hierarchy() -> dict[str, Any]:
    """Run a one-off scan of the live document."""
    document = _require_document()
    roots = _make_extractor(document, lambda message: None).scan()
    return {"hierarchy": [root.to_dict() for root in roots]}


@router.post("/api/document/sections")
async def append_section(request: AppendSectionRequest) -> dict[str, Any]:
    """Append markup, optionally inside an existing section."""
    document = _require_document()
    parent = None
    if request.parent_section_id:
        parent = _find_section(document, request.parent_section_id)

    added = document.append_html(request.html, parent=parent)
    return {"status": "ok", "added": len(added)}


@router.delete("/api/document/sections/{section_id}")
async def remove_section(section_id: str) -> dict[str, Any]:
    document = _require_document()
    document.remove(_find_section(document, section_id))
    return {"status": "ok"}


@router.post("/api/document/click")
async def click_document(request: ClickRequest) -> dict[str, Any]:
    document = _require_document()
    target = _find_section(document, request.section_id) if request.section_id else None
    document.click(target)
    return {"status": "ok"}


@router.websocket("/ws/hierarchy")
async def hierarchy_socket(websocket: WebSocket) -> None:
    """
    Hierarchy viewer channel.

    Inbound JSON messages go to a per-connection extractor; everything it
    emits is sent back in order.
    """
    await websocket.accept()

    document: HtmlDocument | None = _state["document"]
    if document is None:
        document = HtmlDocument()
        _state["document"] = document

    outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
    extractor = _make_extractor(document, outbox.put_nowait)
    extractor.mount()
    _viewers.add(extractor)
    sender = asyncio.create_task(_pump(websocket, outbox))
    logger.info("Hierarchy viewer connected")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug("Ignoring non-JSON frame")
                continue
            extractor.handle_message(data)
    except WebSocketDisconnect:
        logger.info("Hierarchy viewer disconnected")
    finally:
        _viewers.discard(extractor)
        extractor.unmount()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            try:
                await sender
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.debug("Hierarchy sender stopped: %r", exc)


async def _pump(websocket: WebSocket, outbox: asyncio.Queue[dict[str, Any]]) -> None:
    while True:
        message = await outbox.get()
        await websocket.send_json(message)


app.include_router(router)


# ============================================================================
# Main entry point
# ============================================================================


def run_server(host: str = "127.0.0.1", port: int = 8430) -> None:
    """Start the Strata server via uvicorn.

    Args:
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8430.
    """
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    run_server()
