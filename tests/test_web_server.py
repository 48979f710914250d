import io
import json

from fastapi.testclient import TestClient
from PIL import Image
import pytest
from pydantic import ValidationError as PydanticValidationError

from spritesheet2gif.core import Direction
from spritesheet2gif.core.chroma_key import FixedColor
from spritesheet2gif.core.history import ArtifactHistory
from spritesheet2gif.web.server import ExportSettings, create_app


def _png_bytes(image):
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def client():
    return TestClient(create_app(history=ArtifactHistory()))


@pytest.fixture
def sheet_png(sheet_factory):
    return _png_bytes(sheet_factory(2, 2, cell=(12, 12)))


def _export(client, data, settings):
    return client.post(
        "/api/export",
        files={"file": ("sheet.png", data, "image/png")},
        data={"settings": json.dumps(settings)},
    )


def test_export_settings_parse_aliases_and_zero_total():
    settings = ExportSettings.model_validate(
        {"rows": 2, "cols": 3, "total_frames": 0, "scale": "2x", "direction": "vertical", "background_color": "#102030"}
    )
    assert settings.total_frames is None
    assert settings.scale == 2
    assert settings.direction is Direction.COLUMN_MAJOR
    assert settings.background_color == (16, 32, 48, 255)
    assert settings.to_grid().total_frames == 6
    assert isinstance(settings.synthesizer().detector, FixedColor)


@pytest.mark.parametrize(
    "payload",
    [{"rows": 0}, {"fps": 61}, {"scale": 3}, {"rows": 2, "cols": 2, "total_frames": 5}, {"background_detection": "flood"}],
)
def test_export_settings_reject_invalid_values(payload):
    with pytest.raises(PydanticValidationError):
        ExportSettings.model_validate(payload)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_export_then_download_and_delete(client, sheet_png):
    response = _export(client, sheet_png, {"rows": 2, "cols": 2, "fps": 10, "scale": 2})
    assert response.status_code == 200
    body = response.json()
    assert (body["width"], body["height"], body["frame_count"], body["frame_delay_ms"]) == (24, 24, 4, 100)
    assert "data" not in body

    listing = client.get("/api/artifacts").json()["artifacts"]
    assert [item["id"] for item in listing] == [body["id"]]

    download = client.get(f"/api/artifacts/{body['id']}")
    assert download.status_code == 200
    assert download.headers["content-type"] == "image/gif"
    assert body["name"] in download.headers["content-disposition"]
    with Image.open(io.BytesIO(download.content)) as gif:
        assert gif.n_frames == 4

    assert client.delete(f"/api/artifacts/{body['id']}").json()["status"] == "deleted"
    assert client.get(f"/api/artifacts/{body['id']}").status_code == 404
    assert client.delete(f"/api/artifacts/{body['id']}").status_code == 404


def test_export_rejects_bad_settings(client, sheet_png):
    assert _export(client, sheet_png, {"rows": 0}).status_code == 422
    bad_json = client.post(
        "/api/export",
        files={"file": ("sheet.png", sheet_png, "image/png")},
        data={"settings": "{not json"},
    )
    assert bad_json.status_code == 400


def test_export_rejects_undecodable_upload(client):
    response = _export(client, b"not an image", {})
    assert response.status_code == 400


def test_export_rejects_grid_finer_than_image(client):
    tiny = _png_bytes(Image.new("RGBA", (2, 2)))
    response = _export(client, tiny, {"rows": 4, "cols": 4})
    assert response.status_code == 400


def test_grid_overlay_returns_png(client, sheet_png):
    response = client.post(
        "/api/grid-overlay",
        files={"file": ("sheet.png", sheet_png, "image/png")},
        data={"settings": json.dumps({"rows": 2, "cols": 2, "total_frames": 3})},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    with Image.open(io.BytesIO(response.content)) as overlay:
        assert overlay.size == (24, 24)
