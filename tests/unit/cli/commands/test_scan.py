"""Tests for scan command."""

from typer.testing import CliRunner

from picmark.cli.main import app
from picmark.config.settings import get_settings

runner = CliRunner()


class TestScanCommand:
    def test_lists_references(self, tmp_path, monkeypatch, make_image):
        monkeypatch.chdir(tmp_path)
        get_settings.cache_clear()
        make_image("a.png")
        doc = tmp_path / "note.md"
        doc.write_text(
            '![a](a.png)\n<img src="a.png">\n![r](https://example.com/r.png)\n', encoding="utf-8"
        )

        result = runner.invoke(app, ["scan", str(doc)])

        assert result.exit_code == 0
        assert "3 reference(s), 1 distinct local image(s) to upload." in result.output

    def test_inline_option(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        get_settings.cache_clear()
        doc = tmp_path / "note.md"
        doc.write_text("See ![a](a.png)\n", encoding="utf-8")

        default = runner.invoke(app, ["scan", str(doc)])
        inline = runner.invoke(app, ["scan", str(doc), "--inline"])

        assert "No image references found" in default.output
        assert "1 reference(s), 1 distinct local image(s)" in inline.output

    def test_directory_rejected(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path)])
        assert result.exit_code != 0
