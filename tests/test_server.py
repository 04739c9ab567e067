"""Tests for the HTTP API."""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from inkpact.config import DashboardConfig
from inkpact.server import create_app

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def client(data_dir: Path) -> TestClient:
    config = DashboardConfig.model_validate({"storage": {"data_dir": str(data_dir)}})
    return TestClient(create_app(config))


class TestStartup:
    def test_creates_directories(self, client, data_dir):
        for category in ("blogs", "books", "profiles"):
            assert (data_dir / "thumbnails" / category).is_dir()

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["success"] is True
        assert body["version"] == "1.0.0"


class TestCollectionEndpoints:
    def test_save_blogs(self, client, data_dir):
        doc = {"blogs": [{"id": 1, "blogName": "A", "unknown": [1, 2]}]}
        resp = client.post("/save-blogs", json=doc)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["blogsCount"] == 1
        assert json.loads((data_dir / "blogs.json").read_text()) == doc

    def test_save_books(self, client, data_dir):
        resp = client.post("/save-books", json={"books": [{"title": "T"}, {"title": "U"}]})
        assert resp.json()["booksCount"] == 2

    def test_save_profiles_strips_extra_fields(self, client, data_dir):
        doc = {"profiles": [{"id": 1, "name": "N", "role": "Admin", "debug": True}]}
        resp = client.post("/save-profiles", json=doc)
        assert resp.status_code == 200
        assert resp.json()["profilesCount"] == 1
        assert json.loads((data_dir / "profiles.json").read_text()) == {
            "profiles": [{"id": 1, "name": "N", "role": "Admin"}]
        }

    def test_save_profiles_rejects_wrong_shape(self, client, data_dir):
        resp = client.post("/save-profiles", json={"people": []})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert not (data_dir / "profiles.json").exists()

    def test_save_empty_collection(self, client, data_dir):
        resp = client.post("/save-blogs", json={"blogs": []})
        assert resp.status_code == 200
        assert resp.json()["blogsCount"] == 0

    def test_static_fetch_with_cache_buster(self, client):
        client.post("/save-books", json={"books": [{"title": "T"}]})
        resp = client.get("/data/books.json?t=1700000000000")
        assert resp.status_code == 200
        assert resp.json() == {"books": [{"title": "T"}]}

    def test_debug_endpoint(self, client):
        client.post("/save-blogs", json=[{"id": 1}, {"id": 2}])
        body = client.get("/debug/blogs").json()
        assert body["blogsCount"] == 2
        assert body["data"] == [{"id": 1}, {"id": 2}]

    def test_debug_missing(self, client):
        assert client.get("/debug/books").status_code == 404
        assert client.get("/debug/movies").status_code == 404


class TestMarkdownEndpoints:
    def test_save_and_get(self, client, data_dir):
        resp = client.post("/save-markdown", json={"filename": "../data/blogs/post-1.md", "content": "# Post"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["filename"] == "post-1.md"
        assert body["filePath"] == str(data_dir / "blogs" / "post-1.md")

        body = client.get("/get-markdown/post-1.md").json()
        assert body["success"] is True
        assert body["content"] == "# Post"

    def test_invalid_filename(self, client):
        resp = client.post("/save-markdown", json={"filename": "script.js", "content": "x"})
        assert resp.status_code == 400

    def test_missing_fields(self, client):
        resp = client.post("/save-markdown", json={"filename": "a.md"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Filename and content are required"

    def test_get_missing(self, client):
        resp = client.get("/get-markdown/nothing.md")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Markdown file not found"}

    def test_get_invalid(self, client):
        assert client.get("/get-markdown/notes.txt").status_code == 400


class TestImageEndpoints:
    def test_upload_list_delete(self, client, data_dir):
        resp = client.post("/upload-image/books", files={"image": ("cover.png", PNG, "image/png")})
        assert resp.status_code == 200
        body = resp.json()
        assert body["section"] == "books"
        assert body["size"] == len(PNG)
        assert body["path"] == f"data/thumbnails/books/{body['filename']}"
        assert (data_dir / "thumbnails" / "books" / body["filename"]).exists()

        listing = client.get("/images/books").json()
        assert listing == {"success": True, "images": [body["filename"]], "count": 1}

        resp = client.delete(f"/delete-image/books/{body['filename']}")
        assert resp.json()["success"] is True
        assert client.get("/images/books").json()["count"] == 0

    def test_upload_bmp_rejected(self, client):
        resp = client.post("/upload-image/blogs", files={"image": ("a.bmp", b"BM" + b"\x00" * 10, "image/bmp")})
        assert resp.status_code == 415
        assert resp.json()["success"] is False

    def test_upload_too_large(self, client, data_dir):
        big = b"\x00" * (11 * 1024 * 1024)
        resp = client.post("/upload-image/blogs", files={"image": ("big.png", big, "image/png")})
        assert resp.status_code == 413
        assert client.get("/images/blogs").json()["count"] == 0

    def test_upload_without_file(self, client):
        resp = client.post("/upload-image/blogs")
        assert resp.status_code == 400
        assert resp.json()["message"] == "No image uploaded"

    def test_list_missing_category_is_empty(self, client):
        assert client.get("/images/general").json() == {"success": True, "images": [], "count": 0}

    def test_delete_invalid_name(self, client):
        resp = client.delete("/delete-image/blogs/evil.sh")
        assert resp.status_code == 400

    def test_delete_missing(self, client):
        assert client.delete("/delete-image/blogs/nope.png").status_code == 404
