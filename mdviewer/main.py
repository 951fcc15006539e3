from __future__ import annotations

import asyncio
import mimetypes
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI, Depends, HTTPException, Query, Response, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from . import __version__
from .config import settings
from .models import DocumentContent, ErrorKind, ErrorResult, FileNode
from .notify import NotificationHub, QueueChannel
from .presentation import DocumentPresenter, HtmlRenderer, TreePresenter
from .security import require_api_key
from .service import FileService


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    HUB.close_all()


app = FastAPI(title="mdviewer", version=__version__, lifespan=lifespan)

origins = (
    [o.strip() for o in settings.cors_origins.split(",")]
    if getattr(settings, "cors_origins", None)
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

SERVICE = FileService(Path(settings.workspace_root))

# Entry point for the external file watcher: HUB.broadcast(ChangeEvent(...))
HUB = NotificationHub()

ERROR_STATUS = {
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DISCOVERY_FAILED: 500,
}


def error_response(result: ErrorResult) -> JSONResponse:
    return JSONResponse(status_code=ERROR_STATUS[result.kind], content=result.model_dump(mode="json"))


def raise_for_page(result: ErrorResult):
    raise HTTPException(ERROR_STATUS[result.kind], detail=result.message)


@app.get("/health")
def health(response: Response):
    response.headers["Cache-Control"] = "no-store"
    return {
        "status": "ok",
        "service": "mdviewer",
        "version": __version__,
        "workspace_root": str(SERVICE.root),
        "subscribers": HUB.subscriber_count,
        "time": datetime.now().astimezone().isoformat()
    }


@app.get("/api/files", dependencies=[Depends(require_api_key)],
         response_model=FileNode, response_model_exclude_none=True)
def files():
    result = SERVICE.list_tree()
    if isinstance(result, ErrorResult):
        return error_response(result)
    return result


@app.get("/api/file", dependencies=[Depends(require_api_key)],
         response_model=DocumentContent, response_model_exclude_none=True)
def document(path: str = Query(..., description="Workspace-relative path like docs/intro.md")):
    result = SERVICE.get_document(path)
    if isinstance(result, ErrorResult):
        return error_response(result)
    return result


@app.get("/api/asset", dependencies=[Depends(require_api_key)])
def asset(path: str = Query(..., description="Workspace-relative path like docs/img/diagram.png")):
    result = SERVICE.get_asset(path)
    if isinstance(result, ErrorResult):
        return error_response(result)
    media_type, _ = mimetypes.guess_type(path)
    return Response(content=result, media_type=media_type or "application/octet-stream")


@app.get("/api/search", dependencies=[Depends(require_api_key)])
def search(q: str = Query(..., min_length=1), limit: int = Query(default=30, ge=1, le=500)):
    result = SERVICE.search(q, limit=limit)
    if isinstance(result, ErrorResult):
        return error_response(result)
    return {"q": q, "hits": [hit.model_dump() for hit in result]}


@app.get("/", dependencies=[Depends(require_api_key)], response_class=HTMLResponse)
def index():
    result = SERVICE.list_tree()
    if isinstance(result, ErrorResult):
        raise_for_page(result)
    md_text = TreePresenter().to_markdown(result)
    return HtmlRenderer().render(md_text, title=result.name)


@app.get("/view", dependencies=[Depends(require_api_key)], response_class=HTMLResponse)
def view(path: str = Query(..., description="Workspace-relative path like docs/intro.md")):
    result = SERVICE.get_document(path)
    if isinstance(result, ErrorResult):
        raise_for_page(result)
    title = (result.frontmatter or {}).get("title") or path.rsplit("/", 1)[-1]
    md_text = DocumentPresenter().to_markdown(result)
    return HtmlRenderer().render(md_text, title=str(title), doc_path=path)


@app.websocket("/ws")
async def change_feed(websocket: WebSocket):
    channel = QueueChannel(asyncio.get_running_loop())
    # Subscribed before accept: every event after the handshake reaches this client
    subscription = HUB.subscribe(channel)

    async def pump():
        while True:
            message = await channel.get()
            if message is None:
                return
            await websocket.send_text(message)

    sender = None
    try:
        await websocket.accept()
        sender = asyncio.create_task(pump())
        while True:
            # Client messages are ignored; this only waits for the disconnect
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        HUB.unsubscribe(subscription)
        channel.close()
        if sender is not None:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
