import os
import sys
import logging
from dotenv import load_dotenv


APP_NAME = "google-drive-mcp"
APP_VERSION = "1.0.0"


def bootstrap_config():
    load_dotenv(override=False)

bootstrap_config()

# Configure logging
def setup_logging():
    environment = os.environ.get('ENVIRONMENT', 'development').lower()

    if environment == 'production':
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    explicit_level = os.environ.get('LOG_LEVEL')
    if explicit_level:
        log_level = getattr(logging, explicit_level.upper(), log_level)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    logger.handlers = []

    if environment == 'production':
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(funcName)s:%(lineno)d - %(message)s"
        )

    # stdout carries the MCP stdio transport, so logs go to stderr
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    log_file = os.environ.get('MCP_LOG_FILE')
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info(
        f"Logging initialised in {environment} environment at {logging.getLevelName(log_level)} level"
    )

    return logger

# HTTP transport
MCP_DRIVE_HOST = os.getenv("MCP_DRIVE_HOST", "0.0.0.0")
MCP_DRIVE_PORT = int(os.getenv("MCP_DRIVE_PORT", "3000"))

# Optional API key for the MCP endpoint
MCP_API_KEY = os.getenv("MCP_API_KEY")

# Drives registry
DRIVES_CONFIG_PATH = os.getenv("DRIVES_CONFIG_PATH", "./drives-config.json")

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]
