"""
Google Drive listing client.
Read-only queries against the Drive v3 API, one lazily built client per configured drive.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from googleapiclient.errors import HttpError

from gdrive_mcp.core.auth import get_drive_service
from gdrive_mcp.core.drives_config import DriveConfig, DrivesConfigLoader
from gdrive_mcp.service.models import FOLDER_MIME_TYPE, DriveFile, EntryKind, ListFilesParams


logger = logging.getLogger(__name__)

FILE_FIELDS = "id, name, mimeType, modifiedTime, size, webViewLink, parents"
LIST_FIELDS = f"nextPageToken, files({FILE_FIELDS})"

CHILDREN_PAGE_SIZE = 1000
SEARCH_PAGE_SIZE = 50

# Explicit sort orders, per entry kind
FOLDER_ORDER = "name"
FILE_ORDER = "modifiedTime desc"


class DriveListingError(Exception):
    """Raised when a Drive API call fails (permission, quota, network)."""

    def __init__(self, drive_id: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"Drive API error on drive '{drive_id}': {message}")
        self.drive_id = drive_id
        self.message = message
        self.status_code = status_code


def _escape_query_term(value: str) -> str:
    """Escape special characters in Drive query terms."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_children_query(
    folder_id: str,
    kind: EntryKind,
    modified_after: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> str:
    """Build the Drive query selecting the non-trashed children of a folder.

    Filters only apply to file queries; a folder query is never narrowed by them.
    """
    parts = [f"'{_escape_query_term(folder_id)}' in parents", "trashed = false"]

    if kind is EntryKind.FOLDER:
        parts.append(f"mimeType = '{FOLDER_MIME_TYPE}'")
    else:
        parts.append(f"mimeType != '{FOLDER_MIME_TYPE}'")
        if modified_after:
            parts.append(f"modifiedTime > '{_escape_query_term(modified_after)}'")
        if mime_type:
            parts.append(f"mimeType = '{_escape_query_term(mime_type)}'")

    return " and ".join(parts)


def call_drive(drive_id: str, action: str, fn: Callable[[], Any]) -> Any:
    """Run one Drive API call, turning any backend failure into DriveListingError."""
    try:
        return fn()
    except HttpError as e:
        status = getattr(e.resp, "status", None)
        logger.error(f"Error {action} on drive {drive_id} (status {status}): {e}")
        raise DriveListingError(drive_id, str(e), status_code=status) from e
    except OSError as e:
        logger.error(f"Network error {action} on drive {drive_id}: {e}")
        raise DriveListingError(drive_id, str(e)) from e


class GoogleDriveService:
    """Read operations on the configured Google Drive accounts."""

    def __init__(
        self,
        registry: DrivesConfigLoader,
        service_factory: Callable[[DriveConfig], Any] = get_drive_service,
    ):
        self.registry = registry
        self._service_factory = service_factory
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_client(self, drive_id: str):
        """Return the cached Drive client for drive_id, building it on first use."""
        with self._lock:
            client = self._clients.get(drive_id)
            if client is None:
                drive_config = self.registry.get_drive_config(drive_id)
                client = self._service_factory(drive_config)
                self._clients[drive_id] = client
                logger.info(f"Initialized Google Drive client for: {drive_id}")
            return client

    def evict(self, drive_id: str) -> None:
        """Drop the cached client for drive_id; the next call rebuilds it from the registry."""
        with self._lock:
            if self._clients.pop(drive_id, None) is not None:
                logger.info(f"Dropped cached Google Drive client for: {drive_id}")

    def list_children(
        self,
        drive_id: str,
        folder_id: str,
        kind: EntryKind,
        modified_after: Optional[str] = None,
        mime_type: Optional[str] = None,
        page_size: int = CHILDREN_PAGE_SIZE,
    ) -> List[DriveFile]:
        """List every child of folder_id of the given kind, following all result pages."""
        drive_config = self.registry.get_drive_config(drive_id)
        client = self.get_client(drive_id)
        query = build_children_query(folder_id, kind, modified_after, mime_type)
        order_by = FOLDER_ORDER if kind is EntryKind.FOLDER else FILE_ORDER

        entries: List[DriveFile] = []
        page_token = None
        while True:
            params = {
                "q": query,
                "pageSize": page_size,
                "fields": LIST_FIELDS,
                "orderBy": order_by,
                **self._corpora(drive_config),
            }
            if page_token:
                params["pageToken"] = page_token

            response = call_drive(drive_id, "listing children", client.files().list(**params).execute)
            entries.extend(DriveFile.model_validate(item) for item in response.get("files", []))

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.debug(f"Listed {len(entries)} {kind.value} entries under {folder_id} on drive: {drive_id}")
        return entries

    def list_files(self, params: ListFilesParams) -> List[DriveFile]:
        """Flat listing of files with optional folder, date and MIME filters, newest first."""
        drive_id, drive_config = self.registry.resolve_account(params.drive_id)
        client = self.get_client(drive_id)

        query_parts = ["trashed = false"]
        if params.folder_id:
            query_parts.append(f"'{_escape_query_term(params.folder_id)}' in parents")
        if params.modified_after:
            query_parts.append(f"modifiedTime >= '{_escape_query_term(params.modified_after)}'")
        if params.modified_before:
            query_parts.append(f"modifiedTime <= '{_escape_query_term(params.modified_before)}'")
        if params.mime_type:
            query_parts.append(f"mimeType = '{_escape_query_term(params.mime_type)}'")

        request = client.files().list(
            q=" and ".join(query_parts),
            pageSize=params.page_size,
            fields=LIST_FIELDS,
            orderBy=FILE_ORDER,
            **self._corpora(drive_config),
        )
        response = call_drive(drive_id, "listing files", request.execute)
        files = [DriveFile.model_validate(item) for item in response.get("files", [])]

        logger.info(f"Listed {len(files)} files from drive: {drive_id}")
        return files

    def search_files(self, query: str, drive_id: Optional[str] = None) -> List[DriveFile]:
        """Search files whose name contains query."""
        drive_id, drive_config = self.registry.resolve_account(drive_id)
        client = self.get_client(drive_id)

        request = client.files().list(
            q=f"name contains '{_escape_query_term(query)}' and trashed = false",
            pageSize=SEARCH_PAGE_SIZE,
            fields=LIST_FIELDS,
            orderBy=FILE_ORDER,
            **self._corpora(drive_config),
        )
        response = call_drive(drive_id, "searching files", request.execute)
        files = [DriveFile.model_validate(item) for item in response.get("files", [])]

        logger.info(f'Search found {len(files)} files for query: "{query}"')
        return files

    @staticmethod
    def _corpora(drive_config: DriveConfig) -> Dict[str, Any]:
        params: Dict[str, Any] = {"supportsAllDrives": True, "includeItemsFromAllDrives": True}
        if drive_config.drive_id:
            params["driveId"] = drive_config.drive_id
            params["corpora"] = "drive"
        return params

