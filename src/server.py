"""HTTP API for the dashboard: collection saves, markdown and image assets."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import Body, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from inkpact import __version__
from inkpact.config import DashboardConfig
from inkpact.content.images import ImageGateway
from inkpact.content.markdown import MarkdownGateway
from inkpact.content.models import CollectionKind
from inkpact.content.store import CollectionStore
from inkpact.errors import InkpactError, NotFoundError

logger = logging.getLogger(__name__)


class MarkdownSaveRequest(BaseModel):
    filename: str | None = None
    content: str | None = None


def _now() -> str:
    return datetime.now().isoformat()


def create_app(config: DashboardConfig | None = None) -> FastAPI:
    """Build the FastAPI application around the configured data directory."""
    config = config or DashboardConfig()
    data_dir = config.storage.path
    store = CollectionStore(data_dir, atomic_writes=config.storage.atomic_writes)
    markdown = MarkdownGateway(data_dir)
    images = ImageGateway(
        data_dir,
        max_bytes=config.uploads.max_bytes,
        allowed_types=config.uploads.allowed_types,
    )

    data_dir.mkdir(parents=True, exist_ok=True)
    images.ensure_directories()

    app = FastAPI(title="InkPact Dashboard", version=__version__)
    app.state.config = config
    app.state.store = store
    app.state.markdown = markdown
    app.state.images = images

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InkpactError)
    async def inkpact_error_handler(request: Request, exc: InkpactError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    # -----------------------------
    # Collections
    # -----------------------------
    def _replace(kind: CollectionKind, document: Any) -> dict[str, object]:
        result = store.replace(kind, document)
        return result.to_response()

    @app.post("/save-blogs")
    def save_blogs(document: Any = Body(...)) -> dict[str, object]:
        return _replace(CollectionKind.BLOG, document)

    @app.post("/save-books")
    def save_books(document: Any = Body(...)) -> dict[str, object]:
        return _replace(CollectionKind.BOOK, document)

    @app.post("/save-profiles")
    def save_profiles(document: Any = Body(...)) -> dict[str, object]:
        return _replace(CollectionKind.PROFILE, document)

    @app.get("/debug/{collection}")
    def debug_collection(collection: str) -> JSONResponse:
        try:
            kind = CollectionKind.parse(collection)
        except ValueError as exc:
            raise NotFoundError(str(exc)) from exc
        data = store.read(kind)
        loaded = store.load(kind)
        return JSONResponse(
            {
                "success": True,
                "filePath": str(store.path_for(kind)),
                f"{kind.plural}Count": len(loaded),
                "data": data,
            }
        )

    # -----------------------------
    # Markdown
    # -----------------------------
    @app.post("/save-markdown")
    def save_markdown(payload: MarkdownSaveRequest) -> JSONResponse:
        if not payload.filename or payload.content is None:
            return JSONResponse(
                status_code=400,
                content={"success": False, "message": "Filename and content are required"},
            )
        doc = markdown.write(payload.filename, payload.content)
        return JSONResponse(
            {
                "success": True,
                "message": "Markdown file saved successfully",
                "filename": doc.filename,
                "filePath": doc.path,
                "timestamp": doc.timestamp.isoformat(),
            }
        )

    @app.get("/get-markdown/{filename}")
    def get_markdown(filename: str) -> dict[str, object]:
        doc = markdown.read(filename)
        return {"success": True, "content": doc.content, "filename": doc.filename, "path": doc.path}

    # -----------------------------
    # Images
    # -----------------------------
    @app.post("/upload-image/{section}")
    async def upload_image(section: str, image: UploadFile | None = File(None)) -> JSONResponse:
        if image is None:
            return JSONResponse(
                status_code=400, content={"success": False, "message": "No image uploaded"}
            )
        content_type = image.content_type or ""
        images.check_upload(content_type, 0)
        data = await image.read(images.max_bytes + 1)
        stored = images.save(section, image.filename or "", content_type, data)
        return JSONResponse(
            {
                "success": True,
                "message": "Image uploaded successfully",
                "filename": stored.filename,
                "path": stored.path,
                "section": stored.section,
                "size": stored.size,
                "timestamp": stored.timestamp.isoformat(),
            }
        )

    @app.get("/images/{section}")
    def list_images(section: str) -> dict[str, object]:
        names = images.list_images(section)
        return {"success": True, "images": names, "count": len(names)}

    @app.delete("/delete-image/{section}/{filename}")
    def delete_image(section: str, filename: str) -> dict[str, object]:
        images.delete(section, filename)
        return {"success": True, "message": "Image deleted successfully", "filename": filename}

    # -----------------------------
    # Health
    # -----------------------------
    @app.get("/health")
    def health() -> dict[str, object]:
        return {
            "success": True,
            "message": "InkPact Dashboard Server is running",
            "timestamp": _now(),
            "version": __version__,
        }

    # Collections are fetched as static files (clients append ?t=<ms> to defeat caches)
    app.mount("/data", StaticFiles(directory=data_dir), name="data")

    return app
