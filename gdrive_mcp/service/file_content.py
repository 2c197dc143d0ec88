"""
Google Drive file reading.
Exports Google Workspace documents and downloads text, PDF and Word files as plain text.
"""

import io
import logging
from datetime import datetime, timezone
from typing import Optional

from docx import Document
from googleapiclient.http import MediaIoBaseDownload
from pypdf import PdfReader

from gdrive_mcp.service.drive_service import GoogleDriveService, call_drive
from gdrive_mcp.service.models import FileContent


logger = logging.getLogger(__name__)

GOOGLE_DOC = "application/vnd.google-apps.document"
GOOGLE_SHEET = "application/vnd.google-apps.spreadsheet"
GOOGLE_SLIDES = "application/vnd.google-apps.presentation"
PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Google Workspace type -> export format
EXPORT_MAP = {
    GOOGLE_DOC: "text/plain",
    GOOGLE_SHEET: "text/csv",
    GOOGLE_SLIDES: "text/plain",
}

TEXT_MIME_TYPES = frozenset({"text/plain", "text/markdown", "text/csv", "application/json"})
TEXT_EXTENSIONS = (".txt", ".md")


class UnsupportedContentType(Exception):
    """Raised when a file's MIME type has no text extraction strategy."""

    def __init__(self, mime_type: str, file_name: Optional[str] = None):
        self.mime_type = mime_type
        self.file_name = file_name
        super().__init__(f"Unsupported file type: {mime_type}")


class FileContentReader:
    """Class to read file content from Google Drive as text."""

    def __init__(self, drive_service: GoogleDriveService):
        self.drive_service = drive_service

    def get_file_content(self, file_id: str, drive_id: Optional[str] = None) -> FileContent:
        """Read a file's content based on its type.

        Raises:
            UnsupportedContentType: The file is neither a Google Workspace document,
                a text file, a PDF nor a Word document.
        """
        drive_id, _ = self.drive_service.registry.resolve_account(drive_id)
        client = self.drive_service.get_client(drive_id)

        metadata = call_drive(
            drive_id,
            "reading file metadata",
            client.files().get(fileId=file_id, fields="id, name, mimeType", supportsAllDrives=True).execute,
        )
        file_name = metadata.get("name", "")
        mime_type = metadata.get("mimeType", "")

        if mime_type in EXPORT_MAP:
            request = client.files().export_media(fileId=file_id, mimeType=EXPORT_MAP[mime_type])
            content = self._decode(call_drive(drive_id, "exporting file", request.execute))
        elif mime_type in TEXT_MIME_TYPES or file_name.endswith(TEXT_EXTENSIONS):
            content = self._decode(self.download_file(drive_id, client, file_id))
        elif mime_type == PDF:
            content = self._pdf_to_text(self.download_file(drive_id, client, file_id))
        elif mime_type == DOCX:
            content = self._docx_to_text(self.download_file(drive_id, client, file_id))
        else:
            raise UnsupportedContentType(mime_type, file_name)

        logger.info(f"Retrieved content for file: {file_name} ({mime_type})")

        return FileContent(
            file_id=metadata.get("id", file_id),
            file_name=file_name,
            mime_type=mime_type,
            content=content,
            extracted_at=datetime.now(timezone.utc).isoformat(),
        )

    @staticmethod
    def download_file(drive_id: str, client, file_id: str) -> bytes:
        """Download a file's content."""
        request = client.files().get_media(fileId=file_id, supportsAllDrives=True)
        file_content = io.BytesIO()
        downloader = MediaIoBaseDownload(file_content, request)
        done = False
        while not done:
            _, done = call_drive(drive_id, "downloading file", downloader.next_chunk)
        return file_content.getvalue()

    @staticmethod
    def _decode(raw) -> str:
        if isinstance(raw, str):
            return raw
        return raw.decode("utf-8", errors="replace")

    @staticmethod
    def _pdf_to_text(raw: bytes) -> str:
        reader = PdfReader(io.BytesIO(raw))
        return "\n\n".join((page.extract_text() or "") for page in reader.pages).strip()

    @staticmethod
    def _docx_to_text(raw: bytes) -> str:
        doc = Document(io.BytesIO(raw))
        return "\n".join(para.text for para in doc.paragraphs)
