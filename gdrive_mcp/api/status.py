# gdrive_mcp/api/status.py
import datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from gdrive_mcp.core import config

router = APIRouter()

TRANSPORT = "streamable-http"


@router.get("/health")
async def health_check():
    return JSONResponse({
        "status": "healthy",
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat()
    })


@router.get("/mcp/info")
async def mcp_info():
    return JSONResponse({
        "name": config.APP_NAME,
        "version": config.APP_VERSION,
        "transport": TRANSPORT,
        "endpoints": {
            "mcp": "/mcp",
            "health": "/health",
            "info": "/mcp/info"
        },
        # X-API-Key header or apiKey query parameter
        "authenticated": bool(config.MCP_API_KEY)
    })
