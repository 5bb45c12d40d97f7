"""Tests for the save-to-disk collaborator, host capabilities and webview surface."""

from __future__ import annotations

import gc
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pdfbatch.delivery.surface import FileSaver, HostCapabilities, WebviewSurface
from pdfbatch.models import Blob


class TestFileSaver:
    def test_writes_file(self, tmp_path):
        saver = FileSaver(tmp_path / "out")
        path = saver.save(Blob(b"%PDF-data"), "report.pdf")

        assert path == tmp_path / "out" / "report.pdf"
        assert path.read_bytes() == b"%PDF-data"

    def test_strips_directories_from_filename(self, tmp_path):
        path = FileSaver(tmp_path).save(Blob(b"x"), "../../etc/evil.pdf")
        assert path == tmp_path / "evil.pdf"

    def test_overwrites_existing(self, tmp_path):
        (tmp_path / "a.pdf").write_bytes(b"old")
        FileSaver(tmp_path).save(Blob(b"new"), "a.pdf")
        assert (tmp_path / "a.pdf").read_bytes() == b"new"

    def test_no_temp_files_left(self, tmp_path):
        FileSaver(tmp_path).save(Blob(b"x"), "a.pdf")
        assert [p.name for p in tmp_path.iterdir()] == ["a.pdf"]


class TestHostCapabilities:
    def test_defaults_supported(self):
        host = HostCapabilities()
        assert host.can_create_pdf is True
        assert host.surface is None
        assert host.create_blob([b"a", b"b"], "application/pdf") == Blob(b"ab")

    def test_reflection_gate(self):
        assert HostCapabilities(object_reflection=False).can_create_pdf is False


@pytest.fixture
def mock_webview():
    module = MagicMock()
    with patch.dict(sys.modules, {"webview": module}):
        yield module


class TestWebviewSurface:
    def test_open_blank_window(self, mock_webview):
        surface = WebviewSurface(title="Preview", width=800, height=600)
        window = surface.open_blank_window()

        assert window is mock_webview.create_window.return_value
        mock_webview.create_window.assert_called_once_with(
            title="Preview", html="", width=800, height=600,
        )

    def test_navigate_and_close(self):
        window = MagicMock()
        surface = WebviewSurface()
        surface.navigate(window, "file:///tmp/x.pdf")
        surface.close_window(window)
        window.load_url.assert_called_once_with("file:///tmp/x.pdf")
        window.destroy.assert_called_once_with()

    def test_object_url_points_at_pdf(self):
        surface = WebviewSurface()
        try:
            url = surface.create_object_url(Blob(b"%PDF-preview"))
            assert url.startswith("file://")
            path = Path(url[len("file://"):])
            assert path.suffix == ".pdf"
            assert path.read_bytes() == b"%PDF-preview"
        finally:
            surface.cleanup()
        assert not path.exists()

    def test_temp_files_removed_when_surface_collected(self):
        surface = WebviewSurface()
        url = surface.create_object_url(Blob(b"%PDF-leak"))
        path = Path(url[len("file://"):])
        assert path.exists()

        del surface
        gc.collect()
        assert not path.exists()

    def test_cleanup_is_idempotent(self):
        surface = WebviewSurface()
        surface.create_object_url(Blob(b"%PDF-x"))
        surface.cleanup()
        surface.cleanup()
