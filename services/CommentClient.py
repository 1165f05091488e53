import logging
from typing import Any, Dict, List, Optional
import httpx

from config.appsettings import Settings
from utils.comments import build_comment_tree


logger = logging.getLogger(__name__)

COMMENTS_PATH = "/api/comments/"


class CommentClientError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class CommentClient:
    """
    Talks to the comments API over HTTP.

    Args:
        http: configured httpx.AsyncClient, base_url must point to the API
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @classmethod
    def from_settings(cls) -> "CommentClient":
        return cls(httpx.AsyncClient(base_url=Settings.API_BASE_URL, timeout=Settings.API_TIMEOUT))

    async def close(self):
        await self.http.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Comments API unreachable | {method} {url} | {e}")
            raise CommentClientError(503, f"Comments API unreachable: {e}")

        if response.is_error:
            detail = response.text
            try:
                body = response.json()
                if isinstance(body, dict):
                    detail = body.get("detail", detail)
            except ValueError:
                pass
            logger.warning(f"Comments API error | {method} {url} | {response.status_code} | {detail}")
            raise CommentClientError(response.status_code, str(detail))

        return response

    @staticmethod
    def _json(response: httpx.Response, empty: Any = None) -> Any:
        if not response.content:
            return empty
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Comments API sent unreadable JSON | {response.request.method} {response.request.url} | {e}")
            raise CommentClientError(502, f"Comments API sent unreadable JSON: {e}")

    async def get_comments(
        self,
        parent: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Fetches a flat page of comments and returns it as a forest"""
        params = {
            key: value
            for key, value in {"parent": parent, "search": search, "limit": limit, "offset": offset}.items()
            if value is not None
        }
        response = await self._request("GET", COMMENTS_PATH, params=params)
        return build_comment_tree(self._json(response, []) or [])

    async def get_comment(self, comment_id: str) -> Dict[str, Any]:
        response = await self._request("GET", f"{COMMENTS_PATH}{comment_id}")
        return self._json(response)

    async def create_comment(self, content: str, parent_id: Optional[str] = None) -> Dict[str, Any]:
        response = await self._request("POST", COMMENTS_PATH, json={"content": content, "parent_id": parent_id})
        return self._json(response)

    async def delete_comment(self, comment_id: str) -> None:
        await self._request("DELETE", f"{COMMENTS_PATH}{comment_id}")


async def get_comment_client():
    client = CommentClient.from_settings()
    try:
        yield client
    finally:
        await client.close()
