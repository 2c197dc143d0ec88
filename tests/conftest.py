import json

import pytest
from unittest.mock import MagicMock

from gdrive_mcp.core.drives_config import DriveConfig, DrivesConfigLoader

from tests.drive_fakes import SERVICE_ACCOUNT_KEY


@pytest.fixture
def key_file(tmp_path):
    path = tmp_path / "credentials" / "work-sa.json"
    path.parent.mkdir()
    path.write_text(json.dumps(SERVICE_ACCOUNT_KEY))
    return path


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "drives-config.json"


@pytest.fixture
def registry(config_path, key_file):
    """Registry with two drives: 'work' (key file) and 'shared' (inline credentials, shared drive)."""
    config_path.write_text(json.dumps({
        "drives": {
            "work": {
                "name": "Work Drive",
                "description": "Company documents",
                "serviceAccountPath": str(key_file),
            },
            "shared": {
                "name": "Shared Drive",
                "driveId": "0AShared",
                "credentials": SERVICE_ACCOUNT_KEY,
            },
        }
    }))
    loader = DrivesConfigLoader(str(config_path))
    loader.load()
    return loader


@pytest.fixture
def mock_registry():
    mock = MagicMock(spec=DrivesConfigLoader)
    mock.resolve_account.side_effect = lambda drive_id=None: (
        drive_id or "work",
        DriveConfig(name="Work Drive", serviceAccountPath="/keys/work.json"),
    )
    return mock
