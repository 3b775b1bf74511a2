"""
FastAPI router definitions for the API endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from lsp_bridge.api.dependencies import get_dispatcher
from lsp_bridge.api.schemas import (
    CallRequest,
    ErrorResponse,
    PromptCallResponse,
    PromptInfo,
    PromptListResponse,
    ToolCallResponse,
    ToolInfo,
    ToolListResponse,
)

router = APIRouter()

# HTTP status per error kind; anything else is a 400
ERROR_STATUS = {
    "unknown_operation": 404,
    "schema_validation": 422,
    "backend_request": 502,
}


@router.get("/tools", response_model=ToolListResponse)
def list_tools():
    """
    List the available tools with their argument schemas.

    Returns:
        ToolListResponse: Every registered tool
    """
    tools = get_dispatcher().list_tools()
    return ToolListResponse(tools=[ToolInfo(**t) for t in tools])


@router.post(
    "/tools/{name}",
    response_model=ToolCallResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
def call_tool(name: str, body: CallRequest):
    """
    Invoke a tool.

    Args:
        name: Tool name
        body: Request body holding the tool arguments

    Returns:
        ToolCallResponse, or an ErrorResponse with a status derived from the error kind
    """
    result = get_dispatcher().call_tool(name, body.arguments or {})
    if result.error is not None:
        status = ERROR_STATUS.get(result.error.kind, 400)
        return JSONResponse(
            status_code=status, content=ErrorResponse.from_entity(result.error).model_dump()
        )
    return ToolCallResponse(tool=name, text=result.text or "")


@router.get("/prompts", response_model=PromptListResponse)
def list_prompts():
    """
    List the available prompts with their arguments.

    Returns:
        PromptListResponse: Every registered prompt
    """
    prompts = get_dispatcher().list_prompts()
    return PromptListResponse(prompts=[PromptInfo(**p) for p in prompts])


@router.post("/prompts/{name}", response_model=PromptCallResponse)
def get_prompt(name: str, body: CallRequest):
    """
    Render a prompt. Failures are explained in the message text, never as HTTP errors.
    """
    response = get_dispatcher().get_prompt(name, body.arguments or {})
    return PromptCallResponse.from_entity(response)
