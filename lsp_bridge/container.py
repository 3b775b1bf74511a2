"""
Dependency injection container for managing application dependencies.
"""

import logging
from typing import Optional

from lsp_bridge.adapters.files.local_text_file_adapter import LocalTextFileAdapter
from lsp_bridge.adapters.lsp.lsp_session import LspSession
from lsp_bridge.adapters.lsp.stdio_lsp_adapter import StdioLanguageServerAdapter
from lsp_bridge.config.settings import Settings, settings as default_settings
from lsp_bridge.ports.files.text_file_port import TextFilePort
from lsp_bridge.ports.lsp.lsp_client_port import LSPClientPort
from lsp_bridge.ports.tools.tools_port import PromptsHandlerPort, ToolsHandlerPort
from lsp_bridge.use_cases.codelens.code_lens import (
    ExecuteCodeLensUseCase,
    GetCodeLensUseCase,
)
from lsp_bridge.use_cases.diagnostics.get_diagnostics import GetDiagnosticsUseCase
from lsp_bridge.use_cases.edits.apply_text_edit import ApplyTextEditUseCase
from lsp_bridge.use_cases.symbols.find_references import FindReferencesUseCase
from lsp_bridge.use_cases.symbols.read_definition import ReadDefinitionUseCase
from lsp_bridge.use_cases.symbols.resolve_symbol import ResolveSymbolUseCase
from lsp_bridge.use_cases.tools.dispatcher import ToolDispatcher
from lsp_bridge.use_cases.tools.lsp_prompts import LspPromptsHandler
from lsp_bridge.use_cases.tools.lsp_tools import LspToolsHandler


class DependencyContainer:
    """
    Container for managing application dependencies using dependency injection.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or default_settings
        self._instances = {}
        self._logger = logging.getLogger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_text_file_adapter(self) -> TextFilePort:
        if "text_file_adapter" not in self._instances:
            self._instances["text_file_adapter"] = LocalTextFileAdapter(self._logger)
        return self._instances["text_file_adapter"]

    def get_lsp_backend(self) -> LSPClientPort:
        """
        Get the language server adapter. The process starts on first use.

        Returns:
            LSPClientPort implementation
        """
        if "lsp_backend" not in self._instances:
            self._instances["lsp_backend"] = StdioLanguageServerAdapter(
                self._settings.server_command(),
                self._settings.workspace_root,
                request_timeout=self._settings.request_timeout,
                diagnostics_timeout=self._settings.diagnostics_timeout,
                logger=self._logger,
            )
        return self._instances["lsp_backend"]

    def set_lsp_backend(self, backend: LSPClientPort) -> None:
        """Use an already-built backend instead of spawning a server."""
        self._instances["lsp_backend"] = backend

    def get_lsp_session(self) -> LspSession:
        if "lsp_session" not in self._instances:
            self._instances["lsp_session"] = LspSession(
                self.get_lsp_backend(), self.get_text_file_adapter(), self._logger
            )
        return self._instances["lsp_session"]

    def get_resolve_symbol_use_case(self) -> ResolveSymbolUseCase:
        if "resolve_symbol_use_case" not in self._instances:
            self._instances["resolve_symbol_use_case"] = ResolveSymbolUseCase(
                self.get_lsp_session(), self._logger
            )
        return self._instances["resolve_symbol_use_case"]

    def get_apply_text_edit_use_case(self) -> ApplyTextEditUseCase:
        if "apply_text_edit_use_case" not in self._instances:
            self._instances["apply_text_edit_use_case"] = ApplyTextEditUseCase(
                self.get_lsp_session(), self.get_text_file_adapter(), self._logger
            )
        return self._instances["apply_text_edit_use_case"]

    def get_read_definition_use_case(self) -> ReadDefinitionUseCase:
        if "read_definition_use_case" not in self._instances:
            self._instances["read_definition_use_case"] = ReadDefinitionUseCase(
                self.get_resolve_symbol_use_case(), self.get_text_file_adapter(), self._logger
            )
        return self._instances["read_definition_use_case"]

    def get_find_references_use_case(self) -> FindReferencesUseCase:
        if "find_references_use_case" not in self._instances:
            self._instances["find_references_use_case"] = FindReferencesUseCase(
                self.get_lsp_session(),
                self.get_resolve_symbol_use_case(),
                self.get_text_file_adapter(),
                context_lines=min(self._settings.context_lines, 1),
                logger=self._logger,
            )
        return self._instances["find_references_use_case"]

    def get_diagnostics_use_case(self) -> GetDiagnosticsUseCase:
        if "diagnostics_use_case" not in self._instances:
            self._instances["diagnostics_use_case"] = GetDiagnosticsUseCase(
                self.get_lsp_session(),
                self.get_text_file_adapter(),
                context_lines=self._settings.context_lines,
                logger=self._logger,
            )
        return self._instances["diagnostics_use_case"]

    def get_codelens_use_case(self) -> GetCodeLensUseCase:
        if "codelens_use_case" not in self._instances:
            self._instances["codelens_use_case"] = GetCodeLensUseCase(
                self.get_lsp_session(), self._logger
            )
        return self._instances["codelens_use_case"]

    def get_execute_codelens_use_case(self) -> ExecuteCodeLensUseCase:
        if "execute_codelens_use_case" not in self._instances:
            self._instances["execute_codelens_use_case"] = ExecuteCodeLensUseCase(
                self.get_lsp_session(), self.get_codelens_use_case(), self._logger
            )
        return self._instances["execute_codelens_use_case"]

    def get_tools_handler(self) -> ToolsHandlerPort:
        """
        Registry of the code-intelligence tools backed by the LSP use cases.
        """
        if "tools_handler" not in self._instances:
            self._instances["tools_handler"] = LspToolsHandler(
                self.get_apply_text_edit_use_case(),
                self.get_read_definition_use_case(),
                self.get_find_references_use_case(),
                self.get_diagnostics_use_case(),
                self.get_codelens_use_case(),
                self.get_execute_codelens_use_case(),
                workspace_root=self._settings.workspace_root,
                workspace_enforce=self._settings.workspace_enforce,
                logger=self._logger,
            )
        return self._instances["tools_handler"]

    def get_prompts_handler(self) -> PromptsHandlerPort:
        if "prompts_handler" not in self._instances:
            self._instances["prompts_handler"] = LspPromptsHandler(
                self.get_tools_handler(), self._logger
            )
        return self._instances["prompts_handler"]

    def get_dispatcher(self) -> ToolDispatcher:
        """
        Get the dispatcher used by every transport.

        Returns:
            Configured ToolDispatcher
        """
        if "dispatcher" not in self._instances:
            self._instances["dispatcher"] = ToolDispatcher(
                self.get_tools_handler(), self.get_prompts_handler(), self._logger
            )
        return self._instances["dispatcher"]

    def shutdown(self) -> None:
        """Stop the language server if one was started."""
        backend = self._instances.get("lsp_backend")
        if isinstance(backend, StdioLanguageServerAdapter):
            backend.stop()

    def reset(self):
        """Reset all instances (useful for testing)."""
        self.shutdown()
        self._instances.clear()


# Global container instance
container = DependencyContainer()
