"""Smoke tests for the CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from inkpact.cli import app


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner(env={"NO_COLOR": "1", "FORCE_COLOR": None, "INKPACT_DATA_DIR": None})


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


def _invoke(runner: CliRunner, data_dir: Path, *args: str, **kwargs):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args], **kwargs)


class TestCLI:
    """Tests for the CLI entry point."""

    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "serve" in result.output

    def test_main_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "inkpact" in result.output

    def test_init_creates_layout(self, runner: CliRunner, data_dir: Path) -> None:
        result = _invoke(runner, data_dir, "init")
        assert result.exit_code == 0
        for category in ("blogs", "books", "profiles"):
            assert (data_dir / "thumbnails" / category).is_dir()
        assert (data_dir / "blogs").is_dir()

    def test_unknown_collection(self, runner: CliRunner, data_dir: Path) -> None:
        result = _invoke(runner, data_dir, "list", "movies")
        assert result.exit_code != 0


class TestCollectionCommands:
    def test_add_blog(self, runner: CliRunner, data_dir: Path) -> None:
        result = _invoke(runner, data_dir, "add", "blogs", "-f", "blogName=Hello", "-f", "writers=Ada, Grace")
        assert result.exit_code == 0, result.output

        blogs = json.loads((data_dir / "blogs.json").read_text())["blogs"]
        assert blogs[0]["id"] == 1
        assert blogs[0]["writers"] == ["Ada", "Grace"]
        md_name = blogs[0]["mdPath"].rsplit("/", 1)[-1]
        assert (data_dir / "blogs" / md_name).exists()

    def test_add_blog_with_submitted_id(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "blogs.json").write_text(json.dumps({"blogs": [{"id": 4}]}))
        assert _invoke(runner, data_dir, "add", "blogs", "-f", "blogName=B", "-f", "id=5").exit_code == 0
        assert _invoke(runner, data_dir, "add", "blogs", "-f", "blogName=C").exit_code == 0

        ids = [b["id"] for b in json.loads((data_dir / "blogs.json").read_text())["blogs"]]
        assert ids == [4, 5, 6]

    def test_list_json(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "blogs.json").write_text(json.dumps([{"id": 1, "title": "A", "writer": "X"}]))
        result = _invoke(runner, data_dir, "list", "blogs", "--json")
        assert result.exit_code == 0
        records = json.loads(result.stdout)
        assert records[0]["blogName"] == "A"
        assert records[0]["writers"] == ["X"]

    def test_list_table(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "profiles.json").write_text(json.dumps({"profiles": [{"name": "Ada", "role": "Editor"}]}))
        result = _invoke(runner, data_dir, "list", "profiles")
        assert result.exit_code == 0
        assert "Ada" in result.output
        assert "Editor" in result.output

    def test_list_empty(self, runner: CliRunner, data_dir: Path) -> None:
        result = _invoke(runner, data_dir, "list", "books")
        assert result.exit_code == 0
        assert "No books found" in result.output

    def test_list_malformed_warns(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "books.json").write_text('{"books": 3}')
        result = _invoke(runner, data_dir, "list", "books")
        assert result.exit_code == 0
        assert "Warning" in result.output

    def test_edit(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "books.json").write_text(json.dumps({"books": [{"title": "T", "pages": 10}]}))
        result = _invoke(runner, data_dir, "edit", "books", "0", "-f", "pages=320")
        assert result.exit_code == 0, result.output
        assert json.loads((data_dir / "books.json").read_text()) == {"books": [{"title": "T", "pages": 320}]}

    def test_edit_out_of_range(self, runner: CliRunner, data_dir: Path) -> None:
        result = _invoke(runner, data_dir, "edit", "books", "4", "-f", "title=x")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_edit_bad_field_syntax(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "books.json").write_text(json.dumps({"books": [{"title": "T"}]}))
        result = _invoke(runner, data_dir, "edit", "books", "0", "-f", "title")
        assert result.exit_code != 0

    def test_delete_with_confirmation(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "blogs.json").write_text(json.dumps({"blogs": [{"id": 1}, {"id": 2}]}))
        result = _invoke(runner, data_dir, "delete", "blogs", "0", input="y\n")
        assert result.exit_code == 0, result.output
        assert json.loads((data_dir / "blogs.json").read_text()) == {"blogs": [{"id": 2}]}

    def test_delete_aborted(self, runner: CliRunner, data_dir: Path) -> None:
        data_dir.mkdir()
        (data_dir / "blogs.json").write_text(json.dumps({"blogs": [{"id": 1}]}))
        result = _invoke(runner, data_dir, "delete", "blogs", "0", input="n\n")
        assert result.exit_code != 0
        assert json.loads((data_dir / "blogs.json").read_text()) == {"blogs": [{"id": 1}]}


class TestAssetCommands:
    def test_markdown_save_and_show(self, runner: CliRunner, data_dir: Path, tmp_path: Path) -> None:
        source = tmp_path / "draft.md"
        source.write_text("# Draft\n")
        result = _invoke(runner, data_dir, "markdown", "save", "blogs/draft.md", "--from", str(source))
        assert result.exit_code == 0, result.output
        assert (data_dir / "blogs" / "draft.md").read_text() == "# Draft\n"

        result = _invoke(runner, data_dir, "markdown", "show", "draft.md")
        assert result.exit_code == 0
        assert "# Draft" in result.stdout

    def test_markdown_invalid_name(self, runner: CliRunner, data_dir: Path) -> None:
        result = _invoke(runner, data_dir, "markdown", "show", "a b.md")
        assert result.exit_code == 1
        assert "Invalid filename" in result.output

    def test_images_list_and_delete(self, runner: CliRunner, data_dir: Path) -> None:
        directory = data_dir / "thumbnails" / "books"
        directory.mkdir(parents=True)
        (directory / "cover.png").write_bytes(b"x")

        result = _invoke(runner, data_dir, "images", "list", "books")
        assert "cover.png" in result.output

        result = _invoke(runner, data_dir, "images", "delete", "books", "cover.png")
        assert result.exit_code == 0
        assert not (directory / "cover.png").exists()

        result = _invoke(runner, data_dir, "images", "list", "books")
        assert "No images found" in result.output
