"""
FastAPI dependency functions for retrieving components from the container.
"""

from lsp_bridge.container import container
from lsp_bridge.use_cases.tools.dispatcher import ToolDispatcher


def get_dispatcher() -> ToolDispatcher:
    """
    Get the tool dispatcher from the container.

    Returns:
        ToolDispatcher: The dispatcher instance
    """
    return container.get_dispatcher()
