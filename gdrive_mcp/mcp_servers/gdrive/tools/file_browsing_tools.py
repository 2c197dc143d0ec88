"""
Google Drive MCP tools: file browsing.
Flat listing, name search and recursive listing of Google Drive folders.
"""

import asyncio
import logging
import threading
from typing import Annotated, Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, ConfigDict, Field

from gdrive_mcp.service.drive_service import GoogleDriveService
from gdrive_mcp.service.models import ListFilesParams, TraversalRequest
from gdrive_mcp.service.traversal import TraversalEngine


logger = logging.getLogger(__name__)


class SearchFilesInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    drive_id: str = Field(..., alias="driveId", min_length=1, description="Drive ID to search in")
    query: str = Field(..., min_length=1, description="Search query (file name)")


def list_files(drive_service: GoogleDriveService, params: ListFilesParams) -> Dict[str, Any]:
    try:
        files = drive_service.list_files(params)
    except Exception as e:
        logger.error(f"Error executing tool: list_files: {e}")
        raise

    return {"totalFiles": len(files), "files": [f.to_output() for f in files]}


def search_files(drive_service: GoogleDriveService, params: SearchFilesInput) -> Dict[str, Any]:
    try:
        files = drive_service.search_files(params.query, drive_id=params.drive_id)
    except Exception as e:
        logger.error(f"Error executing tool: search_files: {e}")
        raise

    return {"query": params.query, "totalFiles": len(files), "files": [f.to_output() for f in files]}


def list_files_recursive(
    engine: TraversalEngine,
    request: TraversalRequest,
    cancel_event: Optional[threading.Event] = None,
) -> Dict[str, Any]:
    try:
        items = engine.traverse(request, cancel_event=cancel_event)
    except Exception as e:
        logger.error(f"Error executing tool: list_files_recursive: {e}")
        raise

    return {
        "totalItems": len(items),
        "filters": request.filters(),
        "items": [item.to_output() for item in items],
    }


def register_file_browsing_tools(
    mcp: FastMCP, drive_service: GoogleDriveService, engine: TraversalEngine
) -> None:
    """Register the listing and search tools on the MCP server."""

    @mcp.tool(
        name="list_files",
        description="List files from Google Drive with optional filters (driveId, folderId, modifiedAfter/Before, mimeType)",
    )
    async def list_files_tool(
        driveId: Annotated[Optional[str], Field(description="Drive ID to list files from")] = None,
        folderId: Annotated[Optional[str], Field(description="Folder ID to list files from")] = None,
        modifiedAfter: Annotated[Optional[str], Field(description="Filter files modified after this date (ISO 8601)")] = None,
        modifiedBefore: Annotated[Optional[str], Field(description="Filter files modified before this date (ISO 8601)")] = None,
        mimeType: Annotated[Optional[str], Field(description="Filter by MIME type")] = None,
        pageSize: Annotated[int, Field(ge=1, le=1000, description="Number of files to return (max 1000)")] = 100,
    ) -> Dict[str, Any]:
        params = ListFilesParams(
            driveId=driveId,
            folderId=folderId,
            modifiedAfter=modifiedAfter,
            modifiedBefore=modifiedBefore,
            mimeType=mimeType,
            pageSize=pageSize,
        )
        return await asyncio.to_thread(list_files, drive_service, params)

    @mcp.tool(name="search_files", description="Search files by name in a Google Drive")
    async def search_files_tool(
        driveId: Annotated[str, Field(description="Drive ID to search in")],
        query: Annotated[str, Field(description="Search query (file name)")],
    ) -> Dict[str, Any]:
        params = SearchFilesInput(driveId=driveId, query=query)
        return await asyncio.to_thread(search_files, drive_service, params)

    @mcp.tool(
        name="list_files_recursive",
        description=(
            "List all files and subfolders recursively from a Google Drive folder with optional "
            "filters (date modified, MIME type). Folders are always listed; filters apply to files only."
        ),
    )
    async def list_files_recursive_tool(
        folderId: Annotated[str, Field(description="Folder ID to start recursive listing from")],
        driveId: Annotated[Optional[str], Field(description="Drive ID (uses first drive if not specified)")] = None,
        maxDepth: Annotated[int, Field(ge=0, description="Maximum recursion depth (default: 10)")] = 10,
        modifiedAfter: Annotated[
            Optional[str],
            Field(description="Filter files modified after this date (RFC 3339, e.g. '2024-10-17T08:00:00Z')"),
        ] = None,
        mimeType: Annotated[
            Optional[str],
            Field(description="Filter by MIME type (e.g., 'application/pdf')"),
        ] = None,
    ) -> Dict[str, Any]:
        request = TraversalRequest(
            folderId=folderId,
            driveId=driveId,
            maxDepth=maxDepth,
            modifiedAfter=modifiedAfter,
            mimeType=mimeType,
        )
        cancel_event = threading.Event()
        try:
            return await asyncio.to_thread(list_files_recursive, engine, request, cancel_event)
        except asyncio.CancelledError:
            # The worker thread stops at its next listing call
            cancel_event.set()
            raise
