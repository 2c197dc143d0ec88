"""
Google Drive accounts registry.
Loads, validates and persists the drives configuration file that maps a drive id
to the service account used to reach it.
"""

import os
import json
import logging
import tempfile
import threading
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from gdrive_mcp.core.config import DRIVES_CONFIG_PATH


logger = logging.getLogger(__name__)


class AccountNotFound(Exception):
    """Raised when a drive id has no registered configuration."""

    def __init__(self, drive_id: Optional[str]):
        self.drive_id = drive_id
        if drive_id is None:
            message = "No drives configured yet. Use add_drive to add a Google Drive account."
        else:
            message = f"Drive not found: {drive_id}"
        super().__init__(message)


class DriveAlreadyExists(Exception):
    def __init__(self, drive_id: str):
        self.drive_id = drive_id
        super().__init__(f'Drive "{drive_id}" already exists')


class ConfigError(Exception):
    """Raised when the drives config file is malformed or references missing key files."""


# Define schemas for the config file
class ServiceAccountCredentials(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["service_account"]
    project_id: str
    private_key_id: str
    private_key: str
    client_email: str
    client_id: str
    auth_uri: str
    token_uri: str
    auth_provider_x509_cert_url: str
    client_x509_cert_url: str
    universe_domain: Optional[str] = None


class DriveConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Display name for the drive")
    description: Optional[str] = Field(None, description="Optional description")
    drive_id: Optional[str] = Field(None, alias="driveId", description="Shared drive ID, if any")
    root_folder_id: Optional[str] = Field(None, alias="rootFolderId")
    credentials: Optional[ServiceAccountCredentials] = Field(
        None, description="Inline service account key"
    )
    service_account_path: Optional[str] = Field(
        None, alias="serviceAccountPath", description="Path to a service account JSON key file"
    )

    @model_validator(mode="after")
    def check_credentials_source(self):
        if self.credentials is None and not self.service_account_path:
            raise ValueError("Either 'credentials' (inline) or 'serviceAccountPath' (file) is required")
        return self


class DrivesConfig(BaseModel):
    drives: Dict[str, DriveConfig] = Field(default_factory=dict)


class DrivesConfigLoader:
    """Registry of configured Google Drive accounts, backed by a JSON file.

    The whole file is rewritten on every change; readers never observe a
    partially written file.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = os.path.abspath(config_path or DRIVES_CONFIG_PATH)
        self._config: Optional[DrivesConfig] = None
        self._lock = threading.RLock()

    def load(self) -> DrivesConfig:
        """Read and validate the config file, creating an empty one if missing."""
        with self._lock:
            if not os.path.exists(self.config_path):
                empty_config = DrivesConfig()
                self._save_config(empty_config)
                logger.info(f"Created empty config file at {self.config_path}")
                return empty_config

            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    raw_config = json.load(f)
                parsed_config = DrivesConfig.model_validate(raw_config)
            except (json.JSONDecodeError, ValidationError) as e:
                logger.error(f"Failed to load drives config from {self.config_path}: {e}")
                raise ConfigError(f"Invalid drives config at {self.config_path}: {e}") from e

            for drive_id, drive_config in parsed_config.drives.items():
                # Inline credentials have no file to check
                if drive_config.service_account_path:
                    key_path = os.path.abspath(drive_config.service_account_path)
                    if not os.path.exists(key_path):
                        raise ConfigError(
                            f'Service account file not found for drive "{drive_id}": {key_path}'
                        )

            self._config = parsed_config
            logger.info(f"Loaded config for {len(parsed_config.drives)} drives")
            return parsed_config

    def get_config(self) -> DrivesConfig:
        with self._lock:
            if self._config is None:
                return self.load()
            return self._config

    def get_drive_config(self, drive_id: str) -> DriveConfig:
        drive_config = self.get_config().drives.get(drive_id)
        if drive_config is None:
            raise AccountNotFound(drive_id)
        return drive_config

    def resolve_account(self, drive_id: Optional[str] = None) -> Tuple[str, DriveConfig]:
        """Return (drive id, config) for drive_id, or for the first registered drive when omitted.

        Raises:
            AccountNotFound: drive_id is unknown, or no drive is registered at all.
        """
        drives = self.get_config().drives
        if drive_id is None:
            if not drives:
                raise AccountNotFound(None)
            drive_id = next(iter(drives))
        return drive_id, self.get_drive_config(drive_id)

    def list_drives(self) -> List[Dict[str, Optional[str]]]:
        return [
            {"id": drive_id, "name": cfg.name, "description": cfg.description}
            for drive_id, cfg in self.get_config().drives.items()
        ]

    def add_drive(
        self,
        drive_id: str,
        name: str,
        service_account_path: str,
        description: Optional[str] = None,
    ) -> DriveConfig:
        with self._lock:
            config = self.get_config()
            if drive_id in config.drives:
                raise DriveAlreadyExists(drive_id)

            key_path = os.path.abspath(service_account_path)
            if not os.path.exists(key_path):
                raise ConfigError(f'Service account file not found for drive "{drive_id}": {key_path}')

            drive_config = DriveConfig(
                name=name,
                description=description,
                service_account_path=service_account_path,
            )
            drives = dict(config.drives)
            drives[drive_id] = drive_config
            self._save_config(DrivesConfig(drives=drives))

            logger.info(f"Added drive: {drive_id}")
            return drive_config

    def remove_drive(self, drive_id: str) -> None:
        with self._lock:
            config = self.get_config()
            if drive_id not in config.drives:
                raise AccountNotFound(drive_id)

            drives = {k: v for k, v in config.drives.items() if k != drive_id}
            self._save_config(DrivesConfig(drives=drives))

            logger.info(f"Removed drive: {drive_id}")

    def _save_config(self, config: DrivesConfig) -> None:
        directory = os.path.dirname(self.config_path)
        os.makedirs(directory, exist_ok=True)
        payload = config.model_dump(by_alias=True, exclude_none=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".drives-config-", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.config_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        self._config = config
