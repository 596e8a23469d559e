from contextlib import asynccontextmanager
from typing import Optional
import logging

import httpx
import uvicorn
from fastapi import FastAPI

from src.config import Settings, get_settings
from src.errors import register_all_errors
from src.logging_config import setup_logging
from src.middleware import register_middleware
from src.relay.routes import relay_router
from src.relay.service import DocumentRelay

logger = logging.getLogger("docrelay.main")

version = "v1"

description = """
A relay between a legacy document-export service and SharePoint.

`POST /api/upload` takes an object id and a list of file descriptors, pulls each
file out of the export service and re-uploads it to the configured SharePoint
drive through a chunked Microsoft Graph upload session. Every file is reported
individually as succeeded or failed.

`POST /api/check-request` logs whatever it receives and acknowledges it.
"""


def create_app(settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http_client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
        app.state.relay = DocumentRelay(settings, client)
        logger.info(f"Server is running on port {settings.PORT}")
        yield
        if http_client is None:
            await client.aclose()
        logger.info("Application shutting down...")

    app = FastAPI(
        lifespan=lifespan,
        title="Document Relay",
        description=description,
        version=version,
    )
    app.state.settings = settings

    @app.get("/")
    async def root():
        return {"message": "Welcome to the Document Relay API"}

    register_all_errors(app)
    register_middleware(app, settings)

    app.include_router(relay_router, prefix="/api", tags=["Relay"])

    return app


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        app="main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.ENV == "development",
        proxy_headers=True,
    )
