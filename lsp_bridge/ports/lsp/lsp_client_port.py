"""
LSP client port interface defining the contract for language server backends.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from lsp_bridge.entities.CodeLens import CodeLens
from lsp_bridge.entities.Diagnostic import Diagnostic
from lsp_bridge.entities.Symbol import DocumentSymbol, Location, SymbolInfo
from lsp_bridge.entities.TextEdit import Position


class LSPClientPort(ABC):
    """
    Port interface for a language server connection.

    Every method is a blocking request/response (or a fire-and-forget
    notification) keyed by an absolute file path and zero-based positions.
    Implementations raise BackendRequestError when the server fails.
    """

    @abstractmethod
    def workspace_symbols(self, query: str) -> list[SymbolInfo]:
        """
        Search symbols across the workspace.

        Args:
            query: Symbol name or fragment to search for

        Returns:
            List of candidate symbols, in server order
        """
        pass

    @abstractmethod
    def definition(self, path: str, position: Position) -> list[Location]:
        """
        Go to the definition of the symbol at a position.

        Args:
            path: Absolute path of the document
            position: Zero-based position inside the document

        Returns:
            Definition locations (possibly empty)
        """
        pass

    @abstractmethod
    def references(
        self, path: str, position: Position, include_declaration: bool = False
    ) -> list[Location]:
        """
        Find every reference to the symbol at a position.

        Args:
            path: Absolute path of the document
            position: Zero-based position inside the document
            include_declaration: Whether the declaration itself is listed

        Returns:
            Reference locations (possibly empty)
        """
        pass

    @abstractmethod
    def document_symbols(self, path: str) -> list[DocumentSymbol]:
        """
        List the symbol tree of a document.

        Args:
            path: Absolute path of the document

        Returns:
            Top-level document symbols with their children
        """
        pass

    @abstractmethod
    def diagnostics(self, path: str) -> Optional[list[Diagnostic]]:
        """
        Get the current diagnostics of a document.

        Args:
            path: Absolute path of the document

        Returns:
            The diagnostics, an empty list when the document is clean, or None
            when the server holds no diagnostics state for the document
        """
        pass

    @abstractmethod
    def did_open(self, path: str, language_id: str, version: int, text: str) -> None:
        """Notify the server that a document was opened."""
        pass

    @abstractmethod
    def did_change(self, path: str, version: int, text: str) -> None:
        """Notify the server of the full new content of an open document."""
        pass

    @abstractmethod
    def code_lenses(self, path: str) -> list[CodeLens]:
        """
        List the code lenses of a document, in server order.

        Args:
            path: Absolute path of the document

        Returns:
            Code lenses (possibly unresolved)
        """
        pass

    @abstractmethod
    def resolve_code_lens(self, lens: CodeLens) -> CodeLens:
        """Resolve the command of a lens returned without one."""
        pass

    @abstractmethod
    def execute_command(self, command: str, arguments: list[Any]) -> Any:
        """
        Execute a server command.

        Args:
            command: Command identifier
            arguments: Command arguments, passed through unchanged

        Returns:
            The raw command result
        """
        pass
