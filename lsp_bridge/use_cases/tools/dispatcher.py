"""
Single entry point for tool and prompt calls from any transport.
"""

import logging
import threading
from typing import Any, Optional

from lsp_bridge.entities.ToolResult import PromptResponse, ToolResult
from lsp_bridge.exceptions import BaseAppError
from lsp_bridge.ports.tools.tools_port import (
    PromptsHandlerPort,
    PromptSpec,
    ToolsHandlerPort,
    ToolSpec,
)


class ToolDispatcher:
    """Routes calls to the tools and prompts handlers and never lets errors escape."""

    def __init__(
        self,
        tools: ToolsHandlerPort,
        prompts: PromptsHandlerPort,
        logger: Optional[logging.Logger] = None,
    ):
        self._tools = tools
        self._prompts = prompts
        self._logger = logger or logging.getLogger(__name__)

    def list_tools(self) -> list[ToolSpec]:
        return self._tools.available_tools()

    def list_prompts(self) -> list[PromptSpec]:
        return self._prompts.available_prompts()

    def call_tool(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ToolResult:
        """
        Invoke a tool.

        Args:
            name: Name of the tool
            arguments: Raw arguments, validated by the tools handler
            cancel_event: Set by the caller to abandon the call

        Returns:
            The text of the tool, or a structured error
        """
        try:
            text = self._tools.dispatch(name, arguments or {}, cancel_event)
            return ToolResult.success(name, text)
        except BaseAppError as e:
            self._logger.info(f"Tool {name} failed ({e.kind}): {e}")
            return ToolResult.failure(name, e)
        except Exception as e:
            self._logger.exception(f"Unexpected error in tool {name}")
            return ToolResult.failure(name, e)

    def get_prompt(self, name: str, arguments: Optional[dict[str, Any]] = None) -> PromptResponse:
        return self._prompts.render(name, arguments or {})
