"""
Google Drive MCP tools: reading files.
"""

import asyncio
import logging
from typing import Annotated, Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, ConfigDict, Field

from gdrive_mcp.service.file_content import FileContentReader


logger = logging.getLogger(__name__)


class GetFileContentInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(..., alias="fileId", min_length=1, description="ID of the file to read")
    drive_id: Optional[str] = Field(None, alias="driveId", description="Drive ID (if specified)")


def get_file_content(reader: FileContentReader, params: GetFileContentInput) -> Dict[str, Any]:
    try:
        file_content = reader.get_file_content(params.file_id, drive_id=params.drive_id)
    except Exception as e:
        logger.error(f"Error executing tool: get_file_content: {e}")
        raise

    return {
        "fileId": file_content.file_id,
        "name": file_content.file_name,
        "mimeType": file_content.mime_type,
        "content": file_content.content,
        "extractedAt": file_content.extracted_at,
    }


def register_file_content_tools(mcp: FastMCP, reader: FileContentReader) -> None:
    @mcp.tool(
        name="get_file_content",
        description="Get content from a Google Drive file (Docs, Sheets, Slides, TXT, MD, CSV, JSON, PDF, DOCX)",
    )
    async def get_file_content_tool(
        fileId: Annotated[str, Field(description="ID of the file to read")],
        driveId: Annotated[Optional[str], Field(description="Drive ID (uses first drive if not specified)")] = None,
    ) -> Dict[str, Any]:
        params = GetFileContentInput(fileId=fileId, driveId=driveId)
        return await asyncio.to_thread(get_file_content, reader, params)
