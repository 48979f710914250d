"""FastAPI surface for exporting sprite sheets as animated GIFs."""

from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator, model_validator
from starlette.concurrency import run_in_threadpool

from ..core import Direction, ExportRequest, GridSpec, MAX_FPS, MIN_FPS
from ..core.chroma_key import ChromaKeySynthesizer, make_detector
from ..core.errors import ExportError, ValidationError
from ..core.exporter import AnimationExporter
from ..core.grid_overlay import render_overlay
from ..core.history import ArtifactHistory
from ..utils import validators
from . import image_tools

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = int(os.environ.get("S2G_MAX_UPLOAD_MB", "20")) * 1024 * 1024
HISTORY_LIMIT = int(os.environ.get("S2G_HISTORY_LIMIT", "50"))
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("S2G_ALLOWED_ORIGINS", "http://localhost:8000").split(",")
    if origin.strip()
]


class ExportSettings(BaseModel):
    """Incoming settings payload for an export or grid overlay."""

    rows: int = Field(4, ge=1)
    cols: int = Field(4, ge=1)
    total_frames: Optional[int] = Field(None, ge=0)
    fps: int = Field(12, ge=MIN_FPS, le=MAX_FPS)
    scale: int = 1
    direction: Direction = Direction.ROW_MAJOR
    auto_transparent: bool = True
    background_detection: str = "corner"
    background_color: Optional[tuple[int, int, int, int]] = None

    @field_validator("direction", mode="before")
    @classmethod
    def _parse_direction(cls, value):
        return Direction.parse(value)

    @field_validator("scale", mode="before")
    @classmethod
    def _parse_scale(cls, value):
        return validators.parse_scale(value)

    @field_validator("background_color", mode="before")
    @classmethod
    def _parse_color(cls, value):
        if value in (None, "", "null"):
            return None
        if isinstance(value, (list, tuple)):
            if len(value) == 3:
                return (*value, 255)
            return tuple(value)
        if isinstance(value, str):
            return validators.parse_color_tuple(value)
        raise ValueError("Color must be R,G,B[,A]")

    @field_validator("total_frames")
    @classmethod
    def _normalize_total_frames(cls, value):
        if value == 0:
            return None
        return value

    @model_validator(mode="after")
    def _check_grid(self):
        self.to_grid()
        make_detector(self.background_detection, self.background_color)
        return self

    def to_grid(self) -> GridSpec:
        total = self.total_frames if self.total_frames is not None else self.rows * self.cols
        return GridSpec(self.rows, self.cols, total, self.direction)

    def synthesizer(self) -> ChromaKeySynthesizer:
        return ChromaKeySynthesizer(make_detector(self.background_detection, self.background_color))


def _parse_settings(raw: str) -> ExportSettings:
    try:
        payload = json.loads(raw) if raw else {}
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid settings JSON: {exc}") from exc
    try:
        return ExportSettings.model_validate(payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


async def _read_upload(request: Request, file: UploadFile) -> bytes:
    _enforce_size_limit(request)
    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Upload exceeds limit")
    return data


def _enforce_size_limit(request: Request) -> None:
    length = request.headers.get("content-length")
    if not length:
        return
    try:
        size = int(length)
    except ValueError:
        return
    if size > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Upload exceeds limit")


def create_app(history: Optional[ArtifactHistory] = None) -> FastAPI:
    app = FastAPI(title="Sprite Sheet to GIF", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.history = history if history is not None else ArtifactHistory(limit=HISTORY_LIMIT)
    export_lock = threading.Lock()

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/export")
    async def export_gif(
        request: Request,
        file: UploadFile = File(...),
        settings: str = Form("{}"),
    ) -> dict[str, Any]:
        export_settings = _parse_settings(settings)
        data = await _read_upload(request, file)
        try:
            source = image_tools.decode_image(data)
            export_request = ExportRequest(
                source=source,
                grid=export_settings.to_grid(),
                scale=export_settings.scale,
                fps=export_settings.fps,
                auto_transparent=export_settings.auto_transparent,
            )
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        if not export_lock.acquire(blocking=False):
            raise HTTPException(status_code=409, detail="An export is already running")
        try:
            exporter = AnimationExporter(synthesizer=export_settings.synthesizer(), history=app.state.history)
            artifact = await run_in_threadpool(exporter.export, export_request)
        except ExportError as exc:
            logger.exception("Export failed")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        finally:
            export_lock.release()
        return artifact.describe()

    @app.get("/api/artifacts")
    async def list_artifacts() -> dict[str, list[dict[str, Any]]]:
        return {"artifacts": [artifact.describe() for artifact in app.state.history]}

    @app.get("/api/artifacts/{artifact_id}")
    async def download_artifact(artifact_id: str) -> Response:
        artifact = app.state.history.get(artifact_id)
        if artifact is None:
            raise HTTPException(status_code=404, detail="Artifact not found")
        return Response(
            content=artifact.data,
            media_type="image/gif",
            headers={"Content-Disposition": f'attachment; filename="{artifact.name}"'},
        )

    @app.delete("/api/artifacts/{artifact_id}")
    async def delete_artifact(artifact_id: str) -> dict[str, str]:
        try:
            removed = app.state.history.remove(artifact_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="Artifact not found") from None
        return {"status": "deleted", "id": removed.id}

    @app.post("/api/grid-overlay")
    async def grid_overlay(
        request: Request,
        file: UploadFile = File(...),
        settings: str = Form("{}"),
    ) -> Response:
        overlay_settings = _parse_settings(settings)
        data = await _read_upload(request, file)
        try:
            source = image_tools.decode_image(data)
            overlay = await run_in_threadpool(render_overlay, source, overlay_settings.to_grid())
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return Response(content=image_tools.encode_png(overlay), media_type="image/png")

    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("spritesheet2gif.web.server:app", host="0.0.0.0", port=8000, reload=True)
