"""
Tests for the ReadDefinitionUseCase.
"""

from unittest.mock import MagicMock

import pytest

from lsp_bridge.exceptions import BackendRequestError, SymbolNotFoundError
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.use_cases.symbols.read_definition import ReadDefinitionUseCase
from lsp_bridge.use_cases.symbols.resolve_symbol import ResolveSymbolUseCase


class TestReadDefinitionUseCase:
    """Test cases for ReadDefinitionUseCase."""

    @pytest.fixture
    def use_case(self, session, text_files, mock_logger):
        resolver = ResolveSymbolUseCase(session, mock_logger)
        return ReadDefinitionUseCase(resolver, text_files, mock_logger)

    def test_read_with_line_numbers(self, use_case, fake_server_with_f, a_go):
        """Test that F is returned with its one-based line number."""
        result = use_case.execute("F")

        assert "Symbol: a.F" in result
        assert "Kind: function" in result
        assert "Container: a" in result
        assert f"File: {a_go}" in result
        assert "Range: L2:C1-L2:C12" in result
        assert result.endswith("\n\n2|func F() {}")

    def test_read_without_line_numbers(self, use_case, fake_server_with_f):
        result = use_case.execute("F", show_line_numbers=False)
        assert result.endswith("\n\nfunc F() {}")

    def test_unknown_symbol(self, use_case, fake_server_with_f):
        with pytest.raises(SymbolNotFoundError):
            use_case.execute("G")

    def test_unexpected_error_is_wrapped(self, mock_logger):
        """Test that non-application errors become BackendRequestError and are logged."""
        resolver = MagicMock(spec=ResolveSymbolUseCase)
        resolver.execute.side_effect = RuntimeError("boom")

        use_case = ReadDefinitionUseCase(resolver, MagicMock(spec=TextFilePort), mock_logger)
        with pytest.raises(BackendRequestError) as exc_info:
            use_case.execute("F")

        assert "boom" in str(exc_info.value)
        mock_logger.error.assert_called_once()

    def test_without_document_symbols(self, use_case, fake_server_with_f):
        """Test that a server lacking document symbols still yields the declaration."""
        fake_server_with_f.document_symbols = MagicMock(
            side_effect=RuntimeError("Unhandled method textDocument/documentSymbol")
        )

        result = use_case.execute("F")

        assert "Range: L2:C6-L2:C7" in result
        assert result.endswith("\n\n2|func F() {}")
