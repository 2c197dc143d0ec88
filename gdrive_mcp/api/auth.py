# gdrive_mcp/api/auth.py
import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.requests import HTTPConnection

from gdrive_mcp.core.auth import validate_api_key

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY_PARAM = "apiKey"


def extract_api_key(conn: HTTPConnection):
    """API key from the X-API-Key header, falling back to the apiKey query parameter."""
    return conn.headers.get(API_KEY_HEADER) or conn.query_params.get(API_KEY_QUERY_PARAM)


class APIKeyMiddleware:
    """Rejects MCP requests that do not carry the configured API key."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        conn = HTTPConnection(scope)
        if not validate_api_key(extract_api_key(conn)):
            logger.warning(f"Rejected MCP request from {conn.client.host if conn.client else 'unknown'}")
            response = JSONResponse(
                {"error": "Unauthorized", "message": "Invalid or missing API key"},
                status_code=401,
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
