from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from gdrive_mcp.api.auth import APIKeyMiddleware
from gdrive_mcp.api.index import router as status_router
from gdrive_mcp.core.config import APP_NAME, APP_VERSION, MCP_DRIVE_HOST, MCP_DRIVE_PORT, setup_logging
from gdrive_mcp.core.drives_config import DrivesConfigLoader
from gdrive_mcp.mcp_servers.gdrive.server.drive_mcp_server import create_mcp_server

logger = setup_logging()


def create_app(registry: Optional[DrivesConfigLoader] = None) -> FastAPI:
    registry = registry or DrivesConfigLoader()
    mcp = create_mcp_server(registry=registry)
    # Builds the session manager used by the lifespan below
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Loading drives config from {registry.config_path}")
        drives_config = registry.load()
        logger.info(f"{len(drives_config.drives)} drive(s) configured")

        async with mcp.session_manager.run():
            logger.info(f"{APP_NAME} v{APP_VERSION} ready; MCP endpoint at /mcp")
            yield
        logger.info("MCP session manager stopped.")

    app = FastAPI(title="Google Drive MCP Server", version=APP_VERSION, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Key", "Mcp-Session-Id", "Mcp-Protocol-Version"],
        expose_headers=["Mcp-Session-Id"],
    )

    app.include_router(status_router)

    @app.get("/")
    def root():
        return RedirectResponse(url="/docs")

    # Mounted last so /health and /mcp/info are matched first
    app.mount("/", APIKeyMiddleware(mcp_app))

    app.state.registry = registry
    app.state.mcp = mcp
    return app


app = create_app()


def run():
    logger.info(f"Starting {APP_NAME} on {MCP_DRIVE_HOST}:{MCP_DRIVE_PORT}")
    uvicorn.run(app, host=MCP_DRIVE_HOST, port=MCP_DRIVE_PORT)


if __name__ == "__main__":
    run()
