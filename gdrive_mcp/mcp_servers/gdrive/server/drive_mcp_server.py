import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from gdrive_mcp.core.config import APP_NAME, MCP_DRIVE_HOST, MCP_DRIVE_PORT, setup_logging
from gdrive_mcp.core.drives_config import DrivesConfigLoader
from gdrive_mcp.mcp_servers.gdrive.tools.drive_management_tools import register_drive_management_tools
from gdrive_mcp.mcp_servers.gdrive.tools.file_browsing_tools import register_file_browsing_tools
from gdrive_mcp.mcp_servers.gdrive.tools.file_content_tools import register_file_content_tools
from gdrive_mcp.service.drive_service import GoogleDriveService
from gdrive_mcp.service.file_content import FileContentReader
from gdrive_mcp.service.traversal import TraversalEngine


logger = logging.getLogger(__name__)


def create_mcp_server(
    registry: Optional[DrivesConfigLoader] = None,
    drive_service: Optional[GoogleDriveService] = None,
) -> FastMCP:
    """
    Create the Google Drive MCP server with every tool registered.

    Args:
        registry: Drive accounts registry (defaults to the one at DRIVES_CONFIG_PATH)
        drive_service: Drive listing client (defaults to one built on registry)

    Returns:
        FastMCP: The configured server, ready for stdio or streamable HTTP
    """
    registry = registry or DrivesConfigLoader()
    drive_service = drive_service or GoogleDriveService(registry)
    engine = TraversalEngine(registry, drive_service)

    mcp = FastMCP(
        APP_NAME,
        instructions="Read-only access to one or more Google Drive accounts through service accounts.",
        host=MCP_DRIVE_HOST,
        port=MCP_DRIVE_PORT,
    )

    register_drive_management_tools(mcp, registry, drive_service)
    register_file_browsing_tools(mcp, drive_service, engine)
    register_file_content_tools(mcp, FileContentReader(drive_service))

    return mcp


def main():
    setup_logging()
    registry = DrivesConfigLoader()
    registry.load()
    mcp = create_mcp_server(registry=registry)
    logger.info("gdrive mcp running on stdio...")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
