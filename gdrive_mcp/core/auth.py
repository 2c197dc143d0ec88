import hmac
import logging
from typing import Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

from gdrive_mcp.core import config
from gdrive_mcp.core.drives_config import DriveConfig


logger = logging.getLogger(__name__)

# ---------- API key ----------

def validate_api_key(request_api_key: Optional[str]) -> bool:
    """Check the API key sent with an MCP request.

    With no MCP_API_KEY configured every request is accepted.
    """
    expected = config.MCP_API_KEY
    if not expected:
        logger.warning("MCP_API_KEY not configured - running without authentication")
        return True

    if not request_api_key or not hmac.compare_digest(request_api_key.encode(), expected.encode()):
        logger.warning("Invalid or missing API key")
        return False

    return True

# ---------- Drive credentials ----------

def load_credentials(drive_config: DriveConfig) -> service_account.Credentials:
    if drive_config.credentials is not None:
        info = drive_config.credentials.model_dump(exclude_none=True)
        return service_account.Credentials.from_service_account_info(info, scopes=config.DRIVE_SCOPES)

    return service_account.Credentials.from_service_account_file(
        drive_config.service_account_path, scopes=config.DRIVE_SCOPES
    )

def get_drive_service(drive_config: DriveConfig):
    creds = load_credentials(drive_config)
    return build('drive', 'v3', credentials=creds, cache_discovery=False)
