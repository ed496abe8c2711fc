"""
GraphQL client for the Aragon Govern subgraph.

Resolves DAO registry entries by name so a guild can be bound to its DAO.
"""
from typing import Any, Dict, List, Optional

import httpx

from govrelay.config import common_settings as settings
from govrelay.data_models.schemas import RegistryEntry
from govrelay.exceptions import SubgraphError
from govrelay.utils.logger import logger

from .queries import QUERY_DAO, QUERY_DAOS


class SubgraphClient:
    """
    HTTP client for the Govern subgraph.

    Provides methods to:
    - Look up a single DAO by its registered name
    - List every registered DAO
    """

    def __init__(self, url: str = None, timeout: float = 30.0, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the subgraph client.

        Args:
            url: GraphQL endpoint (default from GOVERN_SUBGRAPH_URL env var)
            timeout: Request timeout in seconds (default 30.0)
            http_client: Pre-built async client (tests inject a mock transport)
        """
        self.url = url or settings.GOVERN_SUBGRAPH_URL
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        """
        Handle a GraphQL response and raise errors if needed.

        Raises:
            SubgraphError: On HTTP errors or GraphQL errors
        """
        try:
            data = response.json()
        except Exception:
            data = {"error": "Failed to parse response", "raw": response.text}

        if response.status_code >= 400:
            raise SubgraphError(str(data.get("error", "Unknown error")), response.status_code)

        if data.get("errors"):
            messages = "; ".join(str(e.get("message", e)) for e in data["errors"])
            raise SubgraphError(messages, response.status_code)

        return data.get("data") or {}

    async def _query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self.client.post(self.url, json={"query": query, "variables": variables or {}})
        except httpx.HTTPError as e:
            logger.error(f"[Subgraph] Request error: {e}")
            raise SubgraphError(str(e), 503)
        return self._handle_response(response)

    async def query_dao_by_name(self, name: str) -> Optional[RegistryEntry]:
        """
        Get the registry entry of a DAO by its exact name.

        Returns:
            RegistryEntry if the DAO exists, None otherwise

        Raises:
            SubgraphError: If the subgraph returns an error
        """
        logger.info(f"[Subgraph] Looking up DAO '{name}'")
        data = await self._query(QUERY_DAO, {"name": name})
        entries = data.get("registryEntries") or []
        if not entries:
            return None
        return RegistryEntry(**entries[0])

    async def query_daos(self) -> List[RegistryEntry]:
        """List every DAO in the registry."""
        data = await self._query(QUERY_DAOS)
        return [RegistryEntry(**entry) for entry in data.get("registryEntries") or []]

    async def aclose(self):
        """Close the HTTP client."""
        await self.client.aclose()
