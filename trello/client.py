"""Trello API client for HTTP operations."""

from typing import Optional, Any
import httpx
import structlog

from config import Settings, get_settings
from sync.errors import ConflictFault, NotFoundFault, TransportFault

logger = structlog.get_logger()


class TrelloClient:
    """Async client for the Trello REST API.

    Only the fetch/update/delete contract the synchronization contexts need
    is exposed. HTTP failures are translated into sync faults.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.trello_base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _auth_params(self) -> dict[str, str]:
        params = {}
        if self.settings.trello_api_key is not None:
            params["key"] = self.settings.trello_api_key.get_secret_value()
        if self.settings.trello_user_token is not None:
            params["token"] = self.settings.trello_user_token.get_secret_value()
        return params

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client with authentication."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                params=self._auth_params(),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json"
                },
                timeout=self.settings.request_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("trello_request_failed", method=method, path=path, status_code=status)
            message = f"{method} {path} returned {status}: {e.response.text}"
            if status == 404:
                raise NotFoundFault(message, status_code=status) from e
            if 400 <= status < 500:
                raise ConflictFault(message, status_code=status) from e
            raise TransportFault(message, status_code=status) from e
        except httpx.TransportError as e:
            logger.warning("trello_transport_error", method=method, path=path, error=str(e))
            raise TransportFault(f"{method} {path} failed: {e}") from e
        return response

    # ==================== Entity Operations ====================

    async def get_json(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        """Fetch an entity snapshot, or a list of them for a collection path."""
        response = await self._request("GET", path, params=params)
        return response.json()

    async def put_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a partial update; the server answers with the updated entity."""
        response = await self._request("PUT", path, json=payload)
        logger.info("trello_entity_updated", path=path, fields=sorted(payload))
        return response.json()

    async def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """Create a resource or add an item to a collection."""
        response = await self._request("POST", path, json=payload)
        logger.info("trello_entity_created", path=path, fields=sorted(payload))
        return response.json()

    async def delete(self, path: str) -> None:
        """Delete an entity."""
        await self._request("DELETE", path)
        logger.info("trello_entity_deleted", path=path)


# Dependency injection helper
async def get_trello_client() -> TrelloClient:
    """Yield a TrelloClient and close it afterwards."""
    client = TrelloClient()
    try:
        yield client
    finally:
        await client.close()
