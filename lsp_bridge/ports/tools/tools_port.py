"""
Port and types for tools and prompts exposed to an agent, independent of the transport.
"""

import threading
from abc import ABC, abstractmethod
from typing import Optional, TypedDict

from lsp_bridge.entities.ToolResult import PromptResponse


class ToolSpec(TypedDict):
    """Specification for a tool that can be called by an agent."""

    name: str
    description: str
    parameters: dict[str, object]  # JSON Schema


class PromptArgumentSpec(TypedDict):
    """One argument of a prompt."""

    name: str
    description: str
    required: bool


class PromptSpec(TypedDict):
    """Specification for a prompt that can be requested by an agent."""

    name: str
    description: str
    arguments: list[PromptArgumentSpec]


class ToolsHandlerPort(ABC):
    """
    Port interface for handling tools.

    This port exposes available tools and dispatches tool invocations to appropriate use cases.
    """

    @abstractmethod
    def available_tools(self) -> list[ToolSpec]:
        """
        Get a list of available tools.

        Returns:
            List of tool specifications
        """
        pass

    @abstractmethod
    def dispatch(
        self,
        name: str,
        arguments: dict[str, object],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Dispatch a tool invocation to the appropriate use case.

        Args:
            name: Name of the tool to invoke
            arguments: Raw arguments to validate and pass to the tool
            cancel_event: Set by the caller to abandon the call

        Returns:
            Text result of the tool invocation

        Raises:
            UnknownOperationError: If the tool name is unknown
            BaseAppError: If validation or the operation fails
        """
        pass


class PromptsHandlerPort(ABC):
    """Port interface for rendering prompts. Rendering never raises."""

    @abstractmethod
    def available_prompts(self) -> list[PromptSpec]:
        """
        Get a list of available prompts.

        Returns:
            List of prompt specifications
        """
        pass

    @abstractmethod
    def render(self, name: str, arguments: dict[str, object]) -> PromptResponse:
        """
        Render a prompt, turning any failure into an explanatory message.

        Args:
            name: Name of the prompt
            arguments: Raw prompt arguments

        Returns:
            A well-formed prompt response
        """
        pass
