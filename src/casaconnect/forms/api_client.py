"""JSON client for the CasaConnect API with a uniform result envelope.

Every call returns an ApiResponse instead of raising, so page controllers
handle server errors and network failures the same way.
"""

from typing import Any

import httpx
import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class ApiResponse(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None
    status: int | None = None


class ApiClient:
    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None) -> None:
        # The session cookie lives in the client's cookie jar
        self._client = client or httpx.AsyncClient(base_url=base_url)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, body: dict[str, Any] | None = None) -> ApiResponse:
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            logger.warning("api_request_failed", method=method, path=path, error=str(e))
            return ApiResponse(success=False, error=str(e) or "Network error occurred")

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = {"success": False, "message": response.reason_phrase or "Request failed"}

        if not response.is_success:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("error")
            error = message or f"HTTP error! status: {response.status_code}"
            logger.warning("api_request_failed", method=method, path=path, status=response.status_code, error=error)
            return ApiResponse(success=False, error=error, status=response.status_code)

        return ApiResponse(success=True, data=data, status=response.status_code)

    async def get(self, path: str) -> ApiResponse:
        return await self.request("GET", path)

    async def post(self, path: str, body: dict[str, Any]) -> ApiResponse:
        return await self.request("POST", path, body)

    async def put(self, path: str, body: dict[str, Any]) -> ApiResponse:
        return await self.request("PUT", path, body)

    async def delete(self, path: str) -> ApiResponse:
        return await self.request("DELETE", path)
