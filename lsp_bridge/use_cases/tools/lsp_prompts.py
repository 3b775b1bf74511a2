"""
Prompts wrapping the code-intelligence tools.

A prompt runs one tool and returns its text as a user message. Failures never
escape: they become a message explaining what went wrong.
"""

import logging
from types import MappingProxyType
from typing import Any, NamedTuple, Optional

from typing_extensions import override

from lsp_bridge.entities.ToolResult import PromptResponse
from lsp_bridge.exceptions import BaseAppError, UnknownOperationError
from lsp_bridge.ports.tools.tools_port import (
    PromptsHandlerPort,
    PromptSpec,
    ToolsHandlerPort,
)
from lsp_bridge.use_cases.tools.schema import (
    ArgumentField,
    OperationSchema,
    validate_arguments,
)


class _PromptBinding(NamedTuple):
    schema: OperationSchema
    tool: str
    subject: str
    fixed_arguments: dict[str, Any]
    error_text: str


def _bindings() -> tuple[_PromptBinding, ...]:
    symbol = ArgumentField("symbolName", "string", "Name of the symbol", required=True)
    file_path = ArgumentField("filePath", "string", "Path of the file", required=True)
    return (
        _PromptBinding(
            OperationSchema(
                "read-definition", "Read the source code definition of a symbol", (symbol,)
            ),
            "read_definition",
            "symbolName",
            {"showLineNumbers": True},
            "There is an error reading the definition for {}",
        ),
        _PromptBinding(
            OperationSchema("find-references", "Find every reference to a symbol", (symbol,)),
            "find_references",
            "symbolName",
            {"showLineNumbers": True},
            "There is an error finding references for {}",
        ),
        _PromptBinding(
            OperationSchema("get-codelens", "List the code lenses of a file", (file_path,)),
            "get_codelens",
            "filePath",
            {},
            "There is an error getting codelens for file {}",
        ),
        _PromptBinding(
            OperationSchema(
                "get-diagnostics",
                "Show the diagnostics of a file with their source context",
                (file_path,),
            ),
            "get_diagnostics",
            "filePath",
            {"includeContext": True, "showLineNumbers": True},
            "There is an error getting diagnostics for file {}",
        ),
    )


class LspPromptsHandler(PromptsHandlerPort):
    """Handler rendering prompts through the tools handler."""

    def __init__(self, tools: ToolsHandlerPort, logger: Optional[logging.Logger] = None):
        self._tools = tools
        self._logger = logger or logging.getLogger(__name__)
        self._registry = MappingProxyType({b.schema.name: b for b in _bindings()})

    @override
    def available_prompts(self) -> list[PromptSpec]:
        return [
            {
                "name": b.schema.name,
                "description": b.schema.description,
                "arguments": [
                    {"name": f.name, "description": f.description, "required": f.required}
                    for f in b.schema.fields
                ],
            }
            for b in self._registry.values()
        ]

    @override
    def render(self, name: str, arguments: dict[str, Any]) -> PromptResponse:
        binding = self._registry.get(name)
        if binding is None:
            error = UnknownOperationError(f"Unknown prompt: {name}")
            return PromptResponse.user_text(f"Unknown prompt {name}", str(error))

        subject = (arguments or {}).get(binding.subject) if isinstance(arguments, dict) else None
        description = f"{binding.schema.description}: {subject or '(missing)'}"
        try:
            args = validate_arguments(binding.schema, arguments)
            text = self._tools.dispatch(binding.tool, {**args, **binding.fixed_arguments})
            return PromptResponse.user_text(description, text)
        except BaseAppError as e:
            self._logger.info(f"Prompt {name} failed: {e}")
            message = binding.error_text.format(subject or "(missing)")
            return PromptResponse.user_text(description, f"{message}: {e}")
        except Exception as e:
            self._logger.exception(f"Unexpected error rendering prompt {name}")
            message = binding.error_text.format(subject or "(missing)")
            return PromptResponse.user_text(description, f"{message}: {e}")
