"""Tests for the command-line entry point."""

from __future__ import annotations

import base64
import sys
from unittest.mock import MagicMock, patch

import pytest

from pdfbatch import app
from pdfbatch.delivery.document import Document

from conftest import FakeSurface, RecordingFactory


@pytest.fixture
def html_files(tmp_path):
    first = tmp_path / "first.html"
    second = tmp_path / "second.html"
    first.write_text("<p>one</p>")
    second.write_text("<p>two</p>")
    return [first, second]


def _fake_create_pdf(factory):
    """create_pdf replacement that swaps in scripted engines."""
    def create(definitions, host, *, fonts=None, vfs=None, settings=None, **kwargs):
        scripted = [{"chunks": [d["content"].encode()], "pages": [d["title"]]}
                    for d in definitions]
        return Document(scripted, fonts, vfs, engine_factory=factory,
                        host=host, settings=settings)
    return create


class TestParser:
    def test_sinks_are_exclusive(self):
        with pytest.raises(SystemExit):
            app.build_parser().parse_args(["a.html", "--open", "--print"])

    def test_inputs_required(self):
        with pytest.raises(SystemExit):
            app.build_parser().parse_args([])


class TestLoadVfs:
    def test_reads_font_files_only(self, tmp_path):
        (tmp_path / "Roboto-Regular.ttf").write_bytes(b"ttf")
        (tmp_path / "notes.txt").write_text("skip")
        assert app.load_vfs(tmp_path) == {"Roboto-Regular.ttf": b"ttf"}


class TestMain:
    def test_download_to_output(self, html_files, tmp_path, monkeypatch):
        monkeypatch.delenv("PDFBATCH_CHUNK_SIZE", raising=False)
        factory = RecordingFactory()
        output = tmp_path / "out" / "combined.pdf"
        with patch("pdfbatch.app.create_pdf", _fake_create_pdf(factory)):
            code = app.main([str(p) for p in html_files] + ["-o", str(output),
                            "--env-file", str(tmp_path / "none.env")])

        assert code == 0
        assert output.read_bytes() == b"<p>one</p><p>two</p>"

    def test_base64_printed(self, html_files, tmp_path, capsys):
        factory = RecordingFactory()
        with patch("pdfbatch.app.create_pdf", _fake_create_pdf(factory)):
            code = app.main([str(html_files[0]), "--base64",
                             "--env-file", str(tmp_path / "none.env")])

        assert code == 0
        out = capsys.readouterr().out.strip()
        assert base64.b64decode(out) == b"<p>one</p>"

    def test_data_url_printed(self, html_files, tmp_path, capsys):
        factory = RecordingFactory()
        with patch("pdfbatch.app.create_pdf", _fake_create_pdf(factory)):
            app.main([str(html_files[0]), "--data-url",
                      "--env-file", str(tmp_path / "none.env")])
        assert capsys.readouterr().out.startswith("data:application/pdf;base64,")

    def test_unsupported_environment(self, html_files, tmp_path):
        with patch("pdfbatch.app.create_pdf", return_value=None):
            code = app.main([str(html_files[0]), "--env-file", str(tmp_path / "none.env")])
        assert code == 1

    def test_render_failure_exit_code(self, html_files, tmp_path):
        def create(definitions, host, **kwargs):
            return Document([{"chunks": [], "fail": OSError("crash")}],
                            engine_factory=RecordingFactory(), host=host,
                            settings=kwargs["settings"])

        with patch("pdfbatch.app.create_pdf", create):
            code = app.main([str(html_files[0]), "--base64",
                             "--env-file", str(tmp_path / "none.env")])
        assert code == 1

    def test_open_runs_in_webview(self, html_files, tmp_path):
        with patch("pdfbatch.app.create_pdf", return_value=MagicMock()), \
                patch("pdfbatch.app._run_preview") as mock_preview:
            code = app.main([str(html_files[0]), "--open",
                             "--env-file", str(tmp_path / "none.env")])

        assert code == 0
        surface = mock_preview.call_args.args[3]
        assert surface.__class__.__name__ == "WebviewSurface"

    def test_preview_render_failure_exit_code(self, html_files, tmp_path):
        def create(definitions, host, **kwargs):
            return Document([{"chunks": [], "fail": OSError("crash")}],
                            engine_factory=RecordingFactory(), host=host,
                            settings=kwargs["settings"])

        webview = MagicMock()
        webview.start.side_effect = lambda worker, **kwargs: worker()
        with patch("pdfbatch.app.create_pdf", create), \
                patch("pdfbatch.app.WebviewSurface", FakeSurface), \
                patch.dict(sys.modules, {"webview": webview}):
            code = app.main([str(html_files[0]), "--open",
                             "--env-file", str(tmp_path / "none.env")])

        assert code == 1
        webview.start.assert_called_once()
