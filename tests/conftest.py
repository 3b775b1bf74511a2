"""
Pytest configuration and shared fixtures.
"""

import os
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
from typing_extensions import override

from lsp_bridge.adapters.files.local_text_file_adapter import LocalTextFileAdapter
from lsp_bridge.adapters.lsp.lsp_session import LspSession
from lsp_bridge.config.settings import Settings
from lsp_bridge.container import DependencyContainer
from lsp_bridge.entities.CodeLens import CodeLens
from lsp_bridge.entities.Diagnostic import Diagnostic
from lsp_bridge.entities.Symbol import (
    DocumentSymbol,
    Location,
    SymbolInfo,
    split_qualified_name,
)
from lsp_bridge.entities.TextEdit import Position, Range
from lsp_bridge.ports.lsp.lsp_client_port import LSPClientPort

A_GO = "package a\nfunc F() {}\n"


def make_range(start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
    return Range(Position(start_line, start_char), Position(end_line, end_char))


class FakeLanguageServer(LSPClientPort):
    """In-memory language server whose answers are set by each test."""

    def __init__(self):
        self.symbols: list[SymbolInfo] = []
        self.definitions: dict[tuple[str, int, int], list[Location]] = {}
        self.references_by_position: dict[tuple[str, int, int], list[Location]] = {}
        self.document_symbols_by_path: dict[str, list[DocumentSymbol]] = {}
        self.published: dict[str, list[Diagnostic]] = {}
        self.lenses: dict[str, list[CodeLens]] = {}
        self.resolutions: dict[Any, CodeLens] = {}
        self.command_results: dict[str, Any] = {}
        self.executed: list[tuple[str, list[Any]]] = []
        self.calls: list[str] = []
        self.documents: dict[str, tuple[int, str]] = {}

    @override
    def workspace_symbols(self, query: str) -> list[SymbolInfo]:
        self.calls.append("workspace_symbols")
        segments = split_qualified_name(query)
        if not segments:
            return []
        return [s for s in self.symbols if segments[-1] in s.name]

    @override
    def definition(self, path: str, position: Position) -> list[Location]:
        self.calls.append("definition")
        return self.definitions.get((path, position.line, position.character), [])

    @override
    def references(
        self, path: str, position: Position, include_declaration: bool = False
    ) -> list[Location]:
        self.calls.append("references")
        return self.references_by_position.get((path, position.line, position.character), [])

    @override
    def document_symbols(self, path: str) -> list[DocumentSymbol]:
        self.calls.append("document_symbols")
        return self.document_symbols_by_path.get(path, [])

    @override
    def diagnostics(self, path: str) -> Optional[list[Diagnostic]]:
        self.calls.append("diagnostics")
        return self.published.get(path)

    @override
    def did_open(self, path: str, language_id: str, version: int, text: str) -> None:
        self.calls.append("did_open")
        self.documents[path] = (version, text)

    @override
    def did_change(self, path: str, version: int, text: str) -> None:
        self.calls.append("did_change")
        self.documents[path] = (version, text)

    @override
    def code_lenses(self, path: str) -> list[CodeLens]:
        self.calls.append("code_lenses")
        return list(self.lenses.get(path, []))

    @override
    def resolve_code_lens(self, lens: CodeLens) -> CodeLens:
        self.calls.append("resolve_code_lens")
        return self.resolutions.get(lens.data, lens)

    @override
    def execute_command(self, command: str, arguments: list[Any]) -> Any:
        self.calls.append("execute_command")
        self.executed.append((command, list(arguments)))
        return self.command_results.get(command)


@pytest.fixture
def mock_logger():
    """
    Create a mock logger for testing.

    Returns:
        Mock logger instance
    """
    return MagicMock()


@pytest.fixture
def workspace(tmp_path):
    """
    Create a workspace holding ``a.go``.

    Returns:
        Absolute path of the workspace root
    """
    root = str(tmp_path)
    with open(os.path.join(root, "a.go"), "w", encoding="utf-8", newline="") as f:
        f.write(A_GO)
    return root


@pytest.fixture
def a_go(workspace):
    """Absolute path of ``a.go`` inside the workspace."""
    return os.path.join(workspace, "a.go")


@pytest.fixture
def fake_server():
    """Empty in-memory language server."""
    return FakeLanguageServer()


@pytest.fixture
def fake_server_with_f(fake_server, a_go):
    """Language server knowing one function ``F`` declared on line 2 of ``a.go``."""
    decl = make_range(1, 5, 1, 6)
    fake_server.symbols = [SymbolInfo("F", "function", Location(a_go, decl), "a")]
    fake_server.definitions[(a_go, 1, 5)] = [Location(a_go, decl)]
    fake_server.document_symbols_by_path[a_go] = [
        DocumentSymbol("F", "function", make_range(1, 0, 1, 11), decl)
    ]
    return fake_server


@pytest.fixture
def text_files(mock_logger):
    """Local text file adapter."""
    return LocalTextFileAdapter(mock_logger)


@pytest.fixture
def session(fake_server, text_files, mock_logger):
    """LSP session over the fake language server."""
    return LspSession(fake_server, text_files, mock_logger)


@pytest.fixture
def dependency_container(workspace, fake_server, mock_logger):
    """
    Create a dependency container wired to the fake language server.

    Returns:
        DependencyContainer instance rooted at the test workspace
    """
    settings = Settings()
    settings.workspace_root = workspace
    settings.workspace_enforce = True
    settings.context_lines = 1
    container = DependencyContainer(settings)
    # Replace the logger with our mock
    container._logger = mock_logger
    container.set_lsp_backend(fake_server)
    return container


@pytest.fixture
def dispatcher(dependency_container):
    """Tool dispatcher wired to the fake language server."""
    return dependency_container.get_dispatcher()
