"""
Google Drive MCP tools: account management.
List, add and remove the Google Drive accounts the server can read from.
"""

import asyncio
import logging
from typing import Annotated, Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, ConfigDict, Field

from gdrive_mcp.core.drives_config import DrivesConfigLoader
from gdrive_mcp.service.drive_service import GoogleDriveService


logger = logging.getLogger(__name__)


# Define schemas for each tool
class AddDriveInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    drive_id: str = Field(..., alias="driveId", min_length=1, description="Unique ID for this drive (e.g., 'personal', 'work')")
    name: str = Field(..., min_length=1, description="Display name for the drive")
    description: Optional[str] = Field(None, description="Optional description")
    service_account_path: str = Field(..., alias="serviceAccountPath", min_length=1, description="Path to Service Account JSON file (e.g., './credentials/personal-sa.json')")


class RemoveDriveInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    drive_id: str = Field(..., alias="driveId", min_length=1, description="ID of the drive to remove")


def list_drives(registry: DrivesConfigLoader) -> Dict[str, Any]:
    drives = registry.list_drives()
    output: Dict[str, Any] = {"drives": drives}
    if not drives:
        output["message"] = "No drives configured yet. Use add_drive to add a Google Drive account."
    return output


def add_drive(registry: DrivesConfigLoader, params: AddDriveInput) -> Dict[str, Any]:
    try:
        added = registry.add_drive(
            params.drive_id,
            name=params.name,
            service_account_path=params.service_account_path,
            description=params.description,
        )
    except Exception as e:
        logger.error(f"Error executing tool: add_drive: {e}")
        raise

    return {
        "success": True,
        "drive": {"id": params.drive_id, "name": added.name, "description": added.description},
    }


def remove_drive(
    registry: DrivesConfigLoader, drive_service: GoogleDriveService, params: RemoveDriveInput
) -> Dict[str, Any]:
    try:
        registry.remove_drive(params.drive_id)
    except Exception as e:
        logger.error(f"Error executing tool: remove_drive: {e}")
        raise

    drive_service.evict(params.drive_id)
    return {"success": True, "message": f'Drive "{params.drive_id}" removed successfully'}


def register_drive_management_tools(
    mcp: FastMCP, registry: DrivesConfigLoader, drive_service: GoogleDriveService
) -> None:
    """Register the account management tools on the MCP server."""

    @mcp.tool(name="list_drives", description="List all configured Google Drive accounts")
    async def list_drives_tool() -> Dict[str, Any]:
        return await asyncio.to_thread(list_drives, registry)

    @mcp.tool(name="add_drive", description="Add a new Google Drive account to the configuration")
    async def add_drive_tool(
        driveId: Annotated[str, Field(description="Unique ID for this drive (e.g., 'personal', 'work')")],
        name: Annotated[str, Field(description="Display name for the drive")],
        serviceAccountPath: Annotated[str, Field(description="Path to Service Account JSON file")],
        description: Annotated[Optional[str], Field(description="Optional description")] = None,
    ) -> Dict[str, Any]:
        params = AddDriveInput(
            driveId=driveId, name=name, serviceAccountPath=serviceAccountPath, description=description
        )
        return await asyncio.to_thread(add_drive, registry, params)

    @mcp.tool(name="remove_drive", description="Remove a Google Drive account from the configuration")
    async def remove_drive_tool(
        driveId: Annotated[str, Field(description="ID of the drive to remove")],
    ) -> Dict[str, Any]:
        params = RemoveDriveInput(driveId=driveId)
        return await asyncio.to_thread(remove_drive, registry, drive_service, params)
