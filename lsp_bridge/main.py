"""
HTTP application exposing the code-intelligence tools and prompts.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lsp_bridge.api.routers import router as api_router
from lsp_bridge.config.settings import settings
from lsp_bridge.container import container

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Get logger for this module
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(f"Workspace root: {settings.workspace_root}")
    yield
    logger.info("Shutting down language server")
    container.shutdown()


# Create FastAPI app
app = FastAPI(title="LSP Bridge API", lifespan=lifespan)
app.include_router(api_router)
