"""
Tests for the LspSession.
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from lsp_bridge.adapters.lsp.lsp_session import LspSession, language_id_for
from lsp_bridge.entities.TextEdit import Position
from lsp_bridge.exceptions import BackendRequestError, SymbolNotFoundError
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.ports.lsp.lsp_client_port import LSPClientPort


class TestLanguageIds:
    """Test cases for language_id_for."""

    def test_known_and_unknown_extensions(self):
        assert language_id_for("/ws/a.go") == "go"
        assert language_id_for("/ws/A.PY") == "python"
        assert language_id_for("/ws/notes.txt") == "plaintext"


class TestSynchronize:
    """Test cases for document version tracking."""

    def test_open_then_change(self, session, fake_server, a_go):
        session.synchronize(a_go)
        session.synchronize(a_go, "package b\n")

        assert fake_server.calls == ["did_open", "did_change"]
        assert fake_server.documents[a_go] == (2, "package b\n")
        assert session.is_open(a_go)
        assert session.version_of(a_go) == 2

    def test_reads_disk_when_no_text_given(self, session, fake_server, a_go):
        session.synchronize(a_go)
        assert fake_server.documents[a_go] == (1, "package a\nfunc F() {}\n")

    def test_unknown_document(self, session):
        assert not session.is_open("/ws/none.go")
        assert session.version_of("/ws/none.go") is None


class TestBackendCalls:
    """Test cases for delegation and error wrapping."""

    def test_unexpected_error_wrapped(self, mock_logger):
        backend = MagicMock(spec=LSPClientPort)
        backend.definition.side_effect = ConnectionResetError("pipe closed")
        session = LspSession(backend, MagicMock(spec=TextFilePort), mock_logger)

        with pytest.raises(BackendRequestError) as exc_info:
            session.definition("/ws/a.go", Position(0, 0))

        assert exc_info.value.method == "definition"
        mock_logger.error.assert_called_once()

    def test_application_error_passes_through(self, mock_logger):
        backend = MagicMock(spec=LSPClientPort)
        backend.workspace_symbols.side_effect = SymbolNotFoundError("x")
        session = LspSession(backend, MagicMock(spec=TextFilePort), mock_logger)

        with pytest.raises(SymbolNotFoundError):
            session.workspace_symbols("x")

    def test_delegates(self, session, fake_server):
        assert session.workspace_symbols("F") == []
        assert session.code_lenses("/ws/a.go") == []
        assert fake_server.calls == ["workspace_symbols", "code_lenses"]


class TestFileLock:
    """Test cases for per-file locks."""

    def test_same_file_serializes(self, session):
        """Test that a second holder waits until the first releases the lock."""
        events = []
        entered = threading.Event()

        def first():
            with session.file_lock("/ws/a.go"):
                entered.set()
                time.sleep(0.05)
                events.append("first done")

        def second():
            entered.wait()
            with session.file_lock("/ws/a.go"):
                events.append("second in")

        threads = [threading.Thread(target=first), threading.Thread(target=second)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert events == ["first done", "second in"]

    def test_other_files_independent(self, session):
        with session.file_lock("/ws/a.go"):
            acquired = threading.Event()

            def other():
                with session.file_lock("/ws/b.go"):
                    acquired.set()

            t = threading.Thread(target=other)
            t.start()
            assert acquired.wait(1)
            t.join()

    def test_released_locks_are_dropped(self, session):
        with session.file_lock("/ws/a.go"):
            assert "/ws/a.go" in session._file_locks
        assert "/ws/a.go" not in session._file_locks
