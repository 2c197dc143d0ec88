"""Data models shared by the Drive listing client, the traversal engine and the MCP tools."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Sentinel MIME type Drive uses for folders
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class EntryKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


class DriveFile(BaseModel):
    """A file or folder as returned by the Drive API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    mime_type: str = Field(..., alias="mimeType")
    modified_time: Optional[str] = Field(None, alias="modifiedTime")
    size: Optional[str] = None
    web_view_link: Optional[str] = Field(None, alias="webViewLink")
    parents: Optional[List[str]] = None

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    @property
    def kind(self) -> EntryKind:
        return EntryKind.FOLDER if self.is_folder else EntryKind.FILE

    def to_output(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TraversalItem(DriveFile):
    """A DriveFile found by a recursive listing, with its nesting level and root-relative path."""

    depth: int = Field(..., ge=0, description="Nesting level (0 = direct child of the root)")
    path: str = Field(..., description="Full path from the root folder")

    @classmethod
    def from_entry(cls, entry: DriveFile, depth: int, parent_path: str) -> "TraversalItem":
        return cls(**entry.model_dump(), depth=depth, path=f"{parent_path}/{entry.name}")


class TraversalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    folder_id: str = Field(..., alias="folderId", min_length=1)
    drive_id: Optional[str] = Field(None, alias="driveId")
    max_depth: int = Field(10, alias="maxDepth", ge=0)
    modified_after: Optional[str] = Field(None, alias="modifiedAfter")
    mime_type: Optional[str] = Field(None, alias="mimeType")

    def filters(self) -> Dict[str, str]:
        applied = {}
        if self.modified_after:
            applied["modifiedAfter"] = self.modified_after
        if self.mime_type:
            applied["mimeType"] = self.mime_type
        return applied


class ListFilesParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    drive_id: Optional[str] = Field(None, alias="driveId")
    folder_id: Optional[str] = Field(None, alias="folderId")
    modified_after: Optional[str] = Field(None, alias="modifiedAfter")
    modified_before: Optional[str] = Field(None, alias="modifiedBefore")
    mime_type: Optional[str] = Field(None, alias="mimeType")
    page_size: int = Field(100, alias="pageSize", ge=1, le=1000)


class FileContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(..., alias="fileId")
    file_name: str = Field(..., alias="fileName")
    mime_type: str = Field(..., alias="mimeType")
    content: str
    extracted_at: str = Field(..., alias="extractedAt")
