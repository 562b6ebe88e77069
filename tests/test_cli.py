"""Tests for the scribe command line."""

import io
import sys

import pytest

from scribe import cli
from scribe.config import settings


@pytest.fixture
def notes(tmp_path, monkeypatch):
    """A JSON file to write, with storage kept under tmp_path."""
    monkeypatch.setattr(settings, "storage_path", tmp_path / "storage.json")
    path = tmp_path / "notes.json"
    path.write_text('{"keep": true}', encoding="utf-8")
    return path


def _run(monkeypatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["scribe", *argv])
    with pytest.raises(SystemExit) as exc_info:
        cli.main()
    return exc_info.value.code


class TestWriteCommand:
    """Tests for `scribe write`."""

    def test_empty_piped_stdin_keeps_content(self, notes, monkeypatch):
        """Without --stdin, piped input is not read and the file is rewritten as is."""
        monkeypatch.setattr(sys, "stdin", io.StringIO(""))

        assert _run(monkeypatch, "write", str(notes)) == 0
        assert notes.read_text(encoding="utf-8") == '{"keep": true}'

    def test_stdin_flag_writes_stdin(self, notes, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO('{"new": 1}'))

        assert _run(monkeypatch, "write", str(notes), "--stdin") == 0
        assert notes.read_text(encoding="utf-8") == '{"new": 1}'

    def test_text_option(self, notes, monkeypatch):
        assert _run(monkeypatch, "write", str(notes), "--text", "[]") == 0
        assert notes.read_text(encoding="utf-8") == "[]"

    @pytest.mark.parametrize("option", ["--max-wait-ms", "--poll-interval-ms"])
    def test_zero_timing_option_is_rejected(self, notes, monkeypatch, option):
        """An explicit 0 is an error, not a request for the default."""
        assert _run(monkeypatch, "write", str(notes), option, "0", "--text", "x") == 1
        assert notes.read_text(encoding="utf-8") == '{"keep": true}'
