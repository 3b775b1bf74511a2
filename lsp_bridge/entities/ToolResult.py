"""
Result entities returned by tool and prompt calls.

Tools succeed with text or fail with a structured error. Prompts always carry
text, failures included.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from lsp_bridge.exceptions import BaseAppError


@dataclass(frozen=True)
class ToolError:
    """Structured failure of a tool call."""

    operation: str
    kind: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, operation: str, error: Exception) -> "ToolError":
        if isinstance(error, BaseAppError):
            return cls(
                operation=operation,
                kind=error.kind,
                message=str(error),
                details=error.details(),
            )
        return cls(operation=operation, kind="internal_error", message=str(error))

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "kind": self.kind,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class ToolResult:
    """Either the text payload of a tool call or its error."""

    operation: str
    text: Optional[str] = None
    error: Optional[ToolError] = None

    @classmethod
    def success(cls, operation: str, text: str) -> "ToolResult":
        return cls(operation=operation, text=text)

    @classmethod
    def failure(cls, operation: str, error: Exception) -> "ToolResult":
        return cls(operation=operation, error=ToolError.from_exception(operation, error))

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class PromptMessage:
    """One conversational message of a prompt response."""

    role: str
    text: str


@dataclass(frozen=True)
class PromptResponse:
    """Rendered prompt: a description and its conversational messages."""

    description: str
    messages: tuple[PromptMessage, ...]

    @classmethod
    def user_text(cls, description: str, text: str) -> "PromptResponse":
        return cls(description=description, messages=(PromptMessage("user", text),))

    @property
    def text(self) -> str:
        return "\n\n".join(m.text for m in self.messages)
