"""
Code-intelligence tools mapped to the LSP use cases.

Each tool has one declared schema; arguments are validated against it before
the bound use case runs. The registry is built once and is read-only.
"""

import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, NamedTuple, Optional

from typing_extensions import override

from lsp_bridge.entities.TextEdit import TextEdit
from lsp_bridge.exceptions import SchemaValidationError, UnknownOperationError
from lsp_bridge.ports.tools.tools_port import ToolsHandlerPort, ToolSpec
from lsp_bridge.use_cases.codelens.code_lens import (
    ExecuteCodeLensUseCase,
    GetCodeLensUseCase,
)
from lsp_bridge.use_cases.diagnostics.get_diagnostics import GetDiagnosticsUseCase
from lsp_bridge.use_cases.edits.apply_text_edit import ApplyTextEditUseCase
from lsp_bridge.use_cases.symbols.find_references import FindReferencesUseCase
from lsp_bridge.use_cases.symbols.read_definition import ReadDefinitionUseCase
from lsp_bridge.use_cases.tools.schema import (
    ArgumentField,
    OperationSchema,
    validate_arguments,
)
from lsp_bridge.utils.workspace import resolve_file_path

_POSITION_SCHEMA = {
    "type": "object",
    "properties": {
        "line": {"type": "integer", "minimum": 0, "description": "Zero-based line"},
        "character": {"type": "integer", "minimum": 0, "description": "Zero-based column"},
    },
    "required": ["line", "character"],
}

TEXT_EDIT_SCHEMA = {
    "type": "object",
    "properties": {
        "range": {
            "type": "object",
            "properties": {"start": _POSITION_SCHEMA, "end": _POSITION_SCHEMA},
            "required": ["start", "end"],
        },
        "newText": {"type": "string", "description": "Replacement text"},
    },
    "required": ["range", "newText"],
}

FILE_PATH = ArgumentField(
    "filePath", "string", "Path of the file, absolute or relative to the workspace root", required=True
)
SYMBOL_NAME = ArgumentField(
    "symbolName",
    "string",
    "Name of the symbol, optionally qualified (e.g. 'MyType.Method', 'pkg.Func')",
    required=True,
)
SHOW_LINE_NUMBERS = ArgumentField(
    "showLineNumbers", "boolean", "Prefix source lines with their line number", default=True
)

TOOL_SCHEMAS: tuple[OperationSchema, ...] = (
    OperationSchema(
        "apply_text_edit",
        "Apply multiple text edits to a file. Ranges refer to the current content "
        "and must not overlap; either every edit is applied or none.",
        (
            FILE_PATH,
            ArgumentField(
                "edits",
                "array",
                "Edits with zero-based ranges and their replacement text",
                required=True,
                items=TEXT_EDIT_SCHEMA,
            ),
        ),
    ),
    OperationSchema(
        "read_definition",
        "Read the source code definition of a symbol (function, type, constant, etc.) "
        "from the workspace.",
        (SYMBOL_NAME, SHOW_LINE_NUMBERS),
    ),
    OperationSchema(
        "find_references",
        "Find all references to a symbol in the workspace, grouped by file.",
        (SYMBOL_NAME, SHOW_LINE_NUMBERS),
    ),
    OperationSchema(
        "get_diagnostics",
        "Get diagnostic information (errors, warnings) for a file.",
        (
            FILE_PATH,
            ArgumentField(
                "includeContext", "boolean", "Include the surrounding source lines", default=False
            ),
            SHOW_LINE_NUMBERS,
        ),
    ),
    OperationSchema(
        "get_codelens",
        "Get the code lens hints of a file, numbered for execute_codelens.",
        (FILE_PATH,),
    ),
    OperationSchema(
        "execute_codelens",
        "Execute a code lens command by its index from the latest get_codelens output.",
        (
            FILE_PATH,
            ArgumentField(
                "index", "integer", "1-based index of the code lens", required=True, minimum=1
            ),
        ),
    ),
)


class _Binding(NamedTuple):
    schema: OperationSchema
    run: Callable[[dict[str, Any], Optional[threading.Event]], str]


class LspToolsHandler(ToolsHandlerPort):
    """Handler for the code-intelligence tools."""

    def __init__(
        self,
        apply_text_edit_uc: ApplyTextEditUseCase,
        read_definition_uc: ReadDefinitionUseCase,
        find_references_uc: FindReferencesUseCase,
        get_diagnostics_uc: GetDiagnosticsUseCase,
        get_codelens_uc: GetCodeLensUseCase,
        execute_codelens_uc: ExecuteCodeLensUseCase,
        workspace_root: str,
        workspace_enforce: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the tools handler.

        Args:
            apply_text_edit_uc: Use case for applying edits
            read_definition_uc: Use case for reading definitions
            find_references_uc: Use case for finding references
            get_diagnostics_uc: Use case for getting diagnostics
            get_codelens_uc: Use case for listing code lenses
            execute_codelens_uc: Use case for executing a code lens
            workspace_root: Root that relative paths resolve against
            workspace_enforce: Reject paths outside the workspace root
            logger: Logger instance to use for logging
        """
        self._apply_text_edit_uc = apply_text_edit_uc
        self._read_definition_uc = read_definition_uc
        self._find_references_uc = find_references_uc
        self._get_diagnostics_uc = get_diagnostics_uc
        self._get_codelens_uc = get_codelens_uc
        self._execute_codelens_uc = execute_codelens_uc
        self._workspace_root = workspace_root
        self._workspace_enforce = workspace_enforce
        self._logger = logger or logging.getLogger(__name__)

        runners = {
            "apply_text_edit": self._handle_apply_text_edit,
            "read_definition": self._handle_read_definition,
            "find_references": self._handle_find_references,
            "get_diagnostics": self._handle_get_diagnostics,
            "get_codelens": self._handle_get_codelens,
            "execute_codelens": self._handle_execute_codelens,
        }
        self._registry = MappingProxyType(
            {s.name: _Binding(s, runners[s.name]) for s in TOOL_SCHEMAS}
        )

    @override
    def available_tools(self) -> list[ToolSpec]:
        return [
            {
                "name": b.schema.name,
                "description": b.schema.description,
                "parameters": b.schema.to_json_schema(),
            }
            for b in self._registry.values()
        ]

    @override
    def dispatch(
        self,
        name: str,
        arguments: dict[str, Any],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        binding = self._registry.get(name)
        if binding is None:
            raise UnknownOperationError(f"Unknown tool: {name}")
        args = validate_arguments(binding.schema, arguments)
        self._logger.info(f"Dispatching tool {name}")
        return binding.run(args, cancel_event)

    # ------------------------- internal helpers -------------------------
    def _path(self, arguments: dict[str, Any]) -> str:
        return resolve_file_path(
            arguments["filePath"], self._workspace_root, self._workspace_enforce
        )

    def _handle_apply_text_edit(
        self, arguments: dict[str, Any], cancel_event: Optional[threading.Event]
    ) -> str:
        path = self._path(arguments)
        raw_edits = arguments["edits"]
        if not raw_edits:
            raise SchemaValidationError("'edits' must be a non-empty array", field="edits")
        edits = [TextEdit.from_dict(e, f"edits[{i}]") for i, e in enumerate(raw_edits)]
        return self._apply_text_edit_uc.execute(path, edits, cancel_event)

    def _handle_read_definition(
        self, arguments: dict[str, Any], cancel_event: Optional[threading.Event]
    ) -> str:
        return self._read_definition_uc.execute(
            arguments["symbolName"], arguments["showLineNumbers"], cancel_event
        )

    def _handle_find_references(
        self, arguments: dict[str, Any], cancel_event: Optional[threading.Event]
    ) -> str:
        return self._find_references_uc.execute(
            arguments["symbolName"], arguments["showLineNumbers"], cancel_event
        )

    def _handle_get_diagnostics(
        self, arguments: dict[str, Any], cancel_event: Optional[threading.Event]
    ) -> str:
        return self._get_diagnostics_uc.execute(
            self._path(arguments),
            arguments["includeContext"],
            arguments["showLineNumbers"],
            cancel_event,
        )

    def _handle_get_codelens(
        self, arguments: dict[str, Any], cancel_event: Optional[threading.Event]
    ) -> str:
        return self._get_codelens_uc.execute(self._path(arguments), cancel_event)

    def _handle_execute_codelens(
        self, arguments: dict[str, Any], cancel_event: Optional[threading.Event]
    ) -> str:
        return self._execute_codelens_uc.execute(
            self._path(arguments), arguments["index"], cancel_event
        )
