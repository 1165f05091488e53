import os
import tempfile
from pathlib import Path

# Settings and the engine are created on import, the environment has to be ready first
_db_dir = Path(tempfile.mkdtemp(prefix="comment-tree-"))
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_db_dir / 'comments.db'}"
os.environ["DB_RECREATE"] = "true"
os.environ["API_BASE_URL"] = "http://testserver"

import httpx
import pytest
from fastapi.testclient import TestClient

from main import app
from services.CommentClient import CommentClient, get_comment_client


async def asgi_comment_client():
    """Pages talk to the API of the same app, without a network hop"""
    client = CommentClient(
        httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")
    )
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_comment_client] = asgi_comment_client
    # Entering the context runs the lifespan, which recreates the tables
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def create_comment(client):
    def _create(content: str, parent_id: str = None) -> dict:
        response = client.post("/api/comments/", json={"content": content, "parent_id": parent_id})
        assert response.status_code == 201, response.text
        return response.json()
    return _create
