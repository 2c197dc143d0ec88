import io

import pytest
from unittest.mock import MagicMock, patch
from docx import Document

from gdrive_mcp.service.drive_service import DriveListingError, GoogleDriveService
from gdrive_mcp.service.file_content import (
    DOCX,
    GOOGLE_DOC,
    GOOGLE_SHEET,
    PDF,
    FileContentReader,
    UnsupportedContentType,
)

from tests.drive_fakes import http_error


class FakeDownloader:
    """Writes canned bytes to the target buffer in one chunk, like MediaIoBaseDownload."""

    payload = b""

    def __init__(self, fd, request):
        self.fd = fd

    def next_chunk(self):
        self.fd.write(self.payload)
        return None, True


@pytest.fixture
def mock_drive_client():
    return MagicMock()


@pytest.fixture
def reader(registry, mock_drive_client):
    return FileContentReader(GoogleDriveService(registry, service_factory=lambda cfg: mock_drive_client))


def set_metadata(client, name, mime_type, file_id="file123"):
    client.files.return_value.get.return_value.execute.return_value = {
        "id": file_id, "name": name, "mimeType": mime_type
    }


def download_returns(payload):
    downloader = type("Downloader", (FakeDownloader,), {"payload": payload})
    return patch("gdrive_mcp.service.file_content.MediaIoBaseDownload", downloader)


class TestExport:
    def test_google_doc_exported_as_text(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "Meeting notes", GOOGLE_DOC)
        mock_drive_client.files.return_value.export_media.return_value.execute.return_value = b"Agenda\nActions"

        result = reader.get_file_content("file123")

        assert result.content == "Agenda\nActions"
        assert result.file_name == "Meeting notes"
        assert result.mime_type == GOOGLE_DOC
        mock_drive_client.files.return_value.export_media.assert_called_once_with(
            fileId="file123", mimeType="text/plain"
        )

    def test_google_sheet_exported_as_csv(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "Budget", GOOGLE_SHEET)
        mock_drive_client.files.return_value.export_media.return_value.execute.return_value = b"a,b\n1,2"

        result = reader.get_file_content("file123", drive_id="work")

        assert result.content == "a,b\n1,2"
        mock_drive_client.files.return_value.export_media.assert_called_once_with(
            fileId="file123", mimeType="text/csv"
        )


class TestDownload:
    def test_plain_text(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "notes.txt", "text/plain")

        with download_returns("héllo".encode("utf-8")):
            result = reader.get_file_content("file123")

        assert result.content == "héllo"
        assert result.extracted_at.endswith("+00:00")

    def test_markdown_by_extension(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "README.md", "application/octet-stream")

        with download_returns(b"# Title"):
            result = reader.get_file_content("file123")

        assert result.content == "# Title"

    def test_docx(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "letter.docx", DOCX)
        doc = Document()
        doc.add_paragraph("Dear team,")
        doc.add_paragraph("See you Monday.")
        buffer = io.BytesIO()
        doc.save(buffer)

        with download_returns(buffer.getvalue()):
            result = reader.get_file_content("file123")

        assert result.content == "Dear team,\nSee you Monday."

    def test_pdf(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "report.pdf", PDF)
        page_one, page_two = MagicMock(), MagicMock()
        page_one.extract_text.return_value = "Page one"
        page_two.extract_text.return_value = None

        with download_returns(b"%PDF-1.4"), patch("gdrive_mcp.service.file_content.PdfReader") as mock_pdf:
            mock_pdf.return_value.pages = [page_one, page_two]
            result = reader.get_file_content("file123")

        assert result.content == "Page one"


class TestErrors:
    def test_unsupported_type(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "photo.png", "image/png")

        with pytest.raises(UnsupportedContentType, match="Unsupported file type: image/png"):
            reader.get_file_content("file123")

    def test_missing_file(self, reader, mock_drive_client):
        mock_drive_client.files.return_value.get.return_value.execute.side_effect = http_error(404, "Not Found")

        with pytest.raises(DriveListingError) as exc_info:
            reader.get_file_content("missing")

        assert exc_info.value.status_code == 404

    def test_download_failure(self, reader, mock_drive_client):
        set_metadata(mock_drive_client, "notes.txt", "text/plain")

        class FailingDownloader(FakeDownloader):
            def next_chunk(self):
                raise http_error(500, "Backend Error")

        with patch("gdrive_mcp.service.file_content.MediaIoBaseDownload", FailingDownloader):
            with pytest.raises(DriveListingError):
                reader.get_file_content("file123")
