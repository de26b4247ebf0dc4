"""
Searcher

Nearest-neighbour retrieval over one company's contact index.
Returns raw matches (document text, metadata, distance) in index order;
scoring and ordering are the ranker's job.
"""

import math
import asyncio
import logging
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from ..common.envector_client import EnVectorClient
from ..common.embedding_service import EmbeddingService
from ..common.errors import RetrievalUnavailableError, MalformedMatchError
from .scope import CompanyScope, ScopeResolver

logger = logging.getLogger("netquery.retriever.searcher")


@dataclass
class RawMatch:
    """A single hit from enVector"""
    document_text: str
    distance: float
    metadata: Dict[str, Any] = field(default_factory=dict)
    record_id: Optional[str] = None


class Searcher:
    """
    Searches a company's contacts using enVector.

    The SDK call blocks, so it runs on a worker thread with a timeout;
    concurrent queries on the event loop are never stalled by a slow search.
    There is no retry here: a failure is raised to the orchestrator.
    """

    def __init__(
        self,
        envector_client: EnVectorClient,
        embedding_service: EmbeddingService,
        resolver: Optional[ScopeResolver] = None,
        topk: int = 10,
        timeout_seconds: float = 30.0,
    ):
        """
        Initialize searcher.

        Args:
            envector_client: EnVector client for vector search
            embedding_service: For embedding queries
            resolver: Company name -> collection resolution
            topk: Default number of results
            timeout_seconds: Per-search timeout
        """
        self._client = envector_client
        self._embedding = embedding_service
        self._resolver = resolver or ScopeResolver(envector_client)
        self._topk = topk
        self._timeout = timeout_seconds

    async def resolve_scope(self, company_name: str) -> CompanyScope:
        """Resolve a company name to its collection (ScopeNotFoundError if none)"""
        try:
            return await asyncio.wait_for(
                self._resolver.resolve(company_name), timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            raise RetrievalUnavailableError(
                details=f"Index listing timed out after {self._timeout}s"
            ) from e

    async def retrieve(
        self,
        query_text: str,
        scope: CompanyScope,
        k: Optional[int] = None,
    ) -> List[RawMatch]:
        """
        Run one top-k search against the scope's collection.

        Args:
            query_text: Natural-language query
            scope: Resolved company scope
            k: Number of results (default from config)

        Returns:
            Raw matches in index order; empty when nothing matched

        Raises:
            RetrievalUnavailableError: Store unreachable, timed out or malformed payload
            MalformedMatchError: A hit without usable metadata or distance
        """
        k = self._topk if k is None else k

        try:
            raw_result = await asyncio.wait_for(
                asyncio.to_thread(self._search, scope.collection_name, query_text, k),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning("Search on %s timed out after %ss", scope.collection_name, self._timeout)
            raise RetrievalUnavailableError(
                details=f"Search timed out after {self._timeout}s"
            ) from e

        if not isinstance(raw_result, dict) or not raw_result.get("ok"):
            error = raw_result.get("error") if isinstance(raw_result, dict) else raw_result
            logger.warning("Search on %s failed: %s", scope.collection_name, error)
            raise RetrievalUnavailableError(details=f"Search failed: {error}")

        try:
            parsed = self._client.parse_search_results(raw_result)
        except ValueError as e:
            raise RetrievalUnavailableError(details=str(e)) from e

        matches = [self._to_raw_match(r) for r in parsed]
        logger.debug("Retrieved %d matches from %s", len(matches), scope.collection_name)
        return matches

    def _search(self, index_name: str, query_text: str, k: int) -> Dict[str, Any]:
        """Blocking search; runs on a worker thread."""
        try:
            return self._client.search_with_text(
                index_name=index_name,
                query_text=query_text,
                embedding_service=self._embedding,
                topk=k,
            )
        except Exception as e:
            logger.error("Search error on %s: %s", index_name, e)
            raise RetrievalUnavailableError(details=f"Search failed: {e}") from e

    def _to_raw_match(self, raw: Dict[str, Any]) -> RawMatch:
        """Convert a parsed hit to RawMatch"""
        metadata = raw.get("metadata")
        if not isinstance(metadata, dict):
            raise MalformedMatchError(details=f"Match {raw.get('id')} has no metadata mapping")

        distance = raw.get("distance")
        if isinstance(distance, bool) or not isinstance(distance, (int, float)):
            raise MalformedMatchError(details=f"Match {raw.get('id')} has no numeric distance")
        if not math.isfinite(distance):
            raise MalformedMatchError(details=f"Match {raw.get('id')} has non-finite distance {distance}")

        return RawMatch(
            document_text=raw.get("text") or "",
            distance=float(distance),
            metadata=metadata,
            record_id=raw.get("id"),
        )
