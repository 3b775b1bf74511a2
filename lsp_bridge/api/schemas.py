"""
Pydantic models for API requests and responses.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from lsp_bridge.entities.ToolResult import PromptResponse, ToolError


class ToolInfo(BaseModel):
    """Schema for a tool description."""

    name: str = Field(..., description="Tool name")
    description: str = Field(..., description="What the tool does")
    parameters: dict[str, Any] = Field(..., description="JSON Schema of the arguments")


class ToolListResponse(BaseModel):
    """Schema for the list of tools."""

    tools: List[ToolInfo] = Field(..., description="Available tools")


class PromptArgumentInfo(BaseModel):
    """Schema for one prompt argument."""

    name: str = Field(..., description="Argument name")
    description: str = Field(..., description="Argument description")
    required: bool = Field(False, description="Whether the argument is required")


class PromptInfo(BaseModel):
    """Schema for a prompt description."""

    name: str = Field(..., description="Prompt name")
    description: str = Field(..., description="What the prompt does")
    arguments: List[PromptArgumentInfo] = Field(default_factory=list)


class PromptListResponse(BaseModel):
    """Schema for the list of prompts."""

    prompts: List[PromptInfo] = Field(..., description="Available prompts")


class CallRequest(BaseModel):
    """Schema for a tool or prompt invocation."""

    arguments: Optional[dict[str, Any]] = Field(
        default_factory=dict, description="Arguments of the call"
    )


class ToolCallResponse(BaseModel):
    """Schema for a successful tool call."""

    tool: str = Field(..., description="Tool name")
    text: str = Field(..., description="Text result of the tool")


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    operation: str = Field(..., description="Name of the failed tool")
    kind: str = Field(..., description="Stable error kind")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] = Field(default_factory=dict, description="Structured error fields")

    @classmethod
    def from_entity(cls, error: ToolError):
        """Create an ErrorResponse schema from a ToolError entity."""
        return cls(**error.to_dict())


class PromptMessageInfo(BaseModel):
    """Schema for one prompt message."""

    role: str = Field(..., description="Message role")
    text: str = Field(..., description="Message text")


class PromptCallResponse(BaseModel):
    """Schema for a rendered prompt."""

    description: str = Field(..., description="Prompt description")
    messages: List[PromptMessageInfo] = Field(..., description="Conversation messages")

    @classmethod
    def from_entity(cls, response: PromptResponse):
        """Create a PromptCallResponse schema from a PromptResponse entity."""
        return cls(
            description=response.description,
            messages=[PromptMessageInfo(role=m.role, text=m.text) for m in response.messages],
        )
