from fastapi import APIRouter
from gdrive_mcp.api import status

router = APIRouter()

router.include_router(status.router)
