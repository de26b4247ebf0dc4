"""
EnVector Client

Wraps EnVectorSDKAdapter for the read operations the engine needs:
listing company indexes and nearest-neighbour search by text.
"""

import json
import logging
from pathlib import Path
from typing import List, Dict, Any, Optional

logger = logging.getLogger("netquery.common.envector_client")


class EnVectorClient:
    """
    Client to enVector operations.

    The SDK adapter is created lazily on first use. Tests (and callers that
    manage their own connection) can pass a ready adapter instead.
    """

    def __init__(
        self,
        address: str = "localhost:50050",
        key_path: str = "~/.netquery/keys",
        key_id: str = "netquery_key",
        access_token: Optional[str] = None,
        auto_key_setup: bool = True,
        adapter=None,
    ):
        """
        Initialize EnVector client.

        Args:
            address: enVector server address (host:port or cloud URL)
            key_path: Path to store/load encryption keys
            key_id: Key identifier
            access_token: Cloud access token (for enVector Cloud)
            auto_key_setup: Auto-generate keys if not found
            adapter: Pre-built adapter exposing call_get_index_list/call_search
        """
        self._address = address
        self._key_path = Path(key_path).expanduser()
        self._key_id = key_id
        self._access_token = access_token
        self._auto_key_setup = auto_key_setup
        self._adapter = adapter
        self._initialized = adapter is not None

    def _ensure_initialized(self) -> None:
        """Lazily initialize the adapter"""
        if self._initialized:
            return

        from ..adapter.envector_sdk import EnVectorSDKAdapter

        # Ensure key directory exists
        self._key_path.mkdir(parents=True, exist_ok=True)

        self._adapter = EnVectorSDKAdapter(
            address=self._address,
            key_id=self._key_id,
            key_path=str(self._key_path),
            access_token=self._access_token,
            auto_key_setup=self._auto_key_setup,
        )
        self._initialized = True
        logger.info("Connected to enVector at %s", self._address)

    def get_index_list(self) -> Dict[str, Any]:
        """Get list of all indexes"""
        self._ensure_initialized()
        return self._adapter.call_get_index_list()

    def search(
        self,
        index_name: str,
        query_vector: List[float],
        topk: int = 10
    ) -> Dict[str, Any]:
        """
        Search for similar vectors.

        Args:
            index_name: Index to search
            query_vector: Query embedding vector
            topk: Number of results to return

        Returns:
            Result dict with results list
        """
        self._ensure_initialized()

        return self._adapter.call_search(
            index_name=index_name,
            query=query_vector,
            topk=topk
        )

    def search_with_text(
        self,
        index_name: str,
        query_text: str,
        embedding_service,
        topk: int = 10
    ) -> Dict[str, Any]:
        """
        Embed query text and search.

        Args:
            index_name: Index to search
            query_text: Query text to embed
            embedding_service: EmbeddingService instance
            topk: Number of results to return

        Returns:
            Result dict with results list
        """
        query_vector = embedding_service.embed_single(query_text)
        return self.search(index_name, query_vector, topk)

    def parse_search_results(self, result: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Parse search results into a flat list, preserving index order.

        Args:
            result: Raw result from search()

        Returns:
            List of parsed results with id, distance, metadata and text.
            Distance is left as returned (None when the hit carries none).

        Raises:
            ValueError: If the payload is not a list of hits
        """
        raw_results = result.get("results", [])

        # Single-query searches may come back wrapped in an outer list
        if (
            isinstance(raw_results, list)
            and len(raw_results) == 1
            and isinstance(raw_results[0], list)
        ):
            raw_results = raw_results[0]

        if not isinstance(raw_results, list):
            raise ValueError(f"Unexpected search payload: {type(raw_results).__name__}")

        parsed = []
        for item in raw_results:
            if not isinstance(item, dict):
                raise ValueError(f"Unexpected search hit: {type(item).__name__}")

            metadata = item.get("metadata", {})

            # Parse JSON metadata if string
            if isinstance(metadata, str):
                try:
                    metadata = json.loads(metadata)
                except json.JSONDecodeError:
                    metadata = {"raw": metadata}

            text = metadata.get("text", "") if isinstance(metadata, dict) else ""
            parsed.append({
                "id": item.get("id"),
                "distance": item.get("distance"),
                "metadata": metadata,
                "text": text,
            })

        return parsed
