import time
import uuid
from typing import Callable
import logging
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


logger = logging.getLogger("http_middleware")

BODY_LOG_LIMIT = 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        exclude_paths: list[str] = None,
        log_request_body: bool = False
    ):
        """
        Args:
            app: ASGI application
            exclude_paths: path prefixes that are not logged (e.g. ['/api/docs'])
            log_request_body: log bodies of POST/DELETE requests, comment text included
        """
        super().__init__(app)
        self.exclude_paths = exclude_paths or []
        self.log_request_body = log_request_body

    def _is_excluded(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.exclude_paths)

    async def _log_body(self, request: Request, request_id: str):
        body = await request.body()
        body_str = body.decode('utf-8', errors='replace')[:BODY_LOG_LIMIT]
        if len(body) > BODY_LOG_LIMIT:
            body_str += "... [truncated]"
        logger.debug(f"Request body | {request_id} | {body_str}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self._is_excluded(request.url.path):
            return await call_next(request)

        # Reuse the caller's id so page -> API hops share one id
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        client_host = request.client.host if request.client else "unknown"
        logger.info(
            f"Request started | {request_id} | {request.method} {request.url.path} | Client: {client_host}"
        )

        if self.log_request_body and request.method in ("POST", "DELETE"):
            await self._log_body(request, request_id)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed | {request_id} | {request.method} {request.url.path} | "
                f"Error: {e} | Time: {time.time() - start_time:.4f}s",
                exc_info=True
            )
            raise

        logger.info(
            f"Request finished | {request_id} | {request.method} {request.url.path} | "
            f"Status: {response.status_code} | Time: {time.time() - start_time:.4f}s"
        )
        response.headers["X-Request-ID"] = request_id
        return response
