import pytest
from fastapi.testclient import TestClient
from gdrive_mcp.api.index import router
from fastapi import FastAPI

app = FastAPI()
app.include_router(router)
client = TestClient(app)

@pytest.fixture
def api_client():
    return client

# Status routes are served without the MCP app
def test_health_route_inclusion(api_client):
    response = api_client.get("/health")
    assert response.status_code == 200

def test_info_route_inclusion(api_client):
    response = api_client.get("/mcp/info")
    assert response.status_code == 200
    assert response.json()["transport"] == "streamable-http"

def test_mcp_endpoint_not_on_router(api_client):
    response = api_client.post("/mcp")
    assert response.status_code == 404
