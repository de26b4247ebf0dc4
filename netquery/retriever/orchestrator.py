"""
Query Orchestrator

One request/response cycle:
1. Resolve the company to its collection
2. Retrieve nearest contacts
3. Rank them by relevance
4. Summarize and recommend
5. Hand the result to the audit sink (best effort, never awaited by the caller)

Any failure aborts the cycle; a partial result is never returned because
the recommendation rules assume a complete ranked set.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, TypeVar
from dataclasses import dataclass, field

from ..common.audit import AuditEvent, AuditSink
from ..common.config import NetQueryConfig
from ..common.errors import NetQueryError, InvalidInputError, RetrievalUnavailableError
from .scope import CompanyScope
from .searcher import Searcher
from .ranker import RankedConnection, rank
from .synthesizer import Synthesizer
from .recommender import Recommendation, Recommender

logger = logging.getLogger("netquery.retriever.orchestrator")

T = TypeVar("T")


@dataclass(frozen=True)
class Query:
    """A user question scoped to one company"""
    text: str
    company_name: str
    requester_id: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if not isinstance(self.text, str) or not self.text.strip():
            raise InvalidInputError(details="'query' must be a non-empty string")
        if not isinstance(self.company_name, str) or not self.company_name.strip():
            raise InvalidInputError(details="'companyName' must be a non-empty string")


@dataclass
class QueryResult:
    """Everything produced for one query"""
    query: Query
    scope: CompanyScope
    connections: List[RankedConnection]
    summary: str
    recommendations: List[Recommendation]

    @property
    def total_results(self) -> int:
        return len(self.connections)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "query": self.query.text,
            "companyId": self.scope.company_id,
            "response": self.summary,
            "connections": [c.to_dict() for c in self.connections],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "totalResults": self.total_results,
        }


class QueryOrchestrator:
    """
    Runs queries end to end and translates failures into tagged errors.

    Args:
        searcher: Retrieval client
        synthesizer: Summary generator
        recommender: Recommendation engine
        audit_sink: Destination for audit events (None disables auditing)
        retry_attempts: Extra attempts after a RetrievalUnavailableError
        retry_backoff_seconds: Base delay, doubled on each retry
    """

    def __init__(
        self,
        searcher: Searcher,
        synthesizer: Optional[Synthesizer] = None,
        recommender: Optional[Recommender] = None,
        audit_sink: Optional[AuditSink] = None,
        retry_attempts: int = 0,
        retry_backoff_seconds: float = 0.5,
    ):
        self._searcher = searcher
        self._synthesizer = synthesizer or Synthesizer()
        self._recommender = recommender or Recommender()
        self._audit_sink = audit_sink
        self._retry_attempts = max(0, retry_attempts)
        self._retry_backoff = retry_backoff_seconds
        self._pending_audits: Set[asyncio.Task] = set()

    @classmethod
    def from_config(
        cls,
        config: NetQueryConfig,
        searcher: Searcher,
        audit_sink: Optional[AuditSink] = None,
    ) -> "QueryOrchestrator":
        ranking = config.ranking
        return cls(
            searcher=searcher,
            synthesizer=Synthesizer(
                top_n=ranking.summary_top_n,
                company_limit=ranking.summary_company_limit,
                position_limit=ranking.summary_position_limit,
            ),
            recommender=Recommender(
                warm_intro_threshold=ranking.warm_intro_threshold,
                sample_size=ranking.recommendation_sample_size,
                decision_maker_keywords=ranking.decision_maker_keywords,
            ),
            audit_sink=audit_sink if config.audit.enabled else None,
            retry_attempts=config.retriever.retry_attempts,
            retry_backoff_seconds=config.retriever.retry_backoff_seconds,
        )

    @property
    def recommender(self) -> Recommender:
        return self._recommender

    async def handle(self, query: Query) -> QueryResult:
        """
        Answer a query.

        Raises:
            NetQueryError: Tagged failure (a subclass for known kinds)
        """
        try:
            result = await self._run(query)
        except NetQueryError as e:
            logger.warning("Query failed (%s): %s %s", e.kind, e.message, e.details or "")
            raise
        except Exception as e:
            logger.error("Query processing error: %s", e, exc_info=True)
            raise NetQueryError(details=str(e)) from e

        self.audit(AuditEvent(
            company_id=result.scope.company_id,
            query_text=query.text,
            response_text=result.summary,
            requester_id=query.requester_id,
        ))
        return result

    async def _run(self, query: Query) -> QueryResult:
        scope = await self._with_retry(lambda: self._searcher.resolve_scope(query.company_name))
        matches = await self._with_retry(lambda: self._searcher.retrieve(query.text, scope))

        connections = rank(matches)
        summary = self._synthesizer.summarize(query.text, connections)
        recommendations = self._recommender.recommend(connections)

        logger.info(
            "Answered query for %s: %d connections, %d recommendations",
            scope.company_id, len(connections), len(recommendations),
        )
        return QueryResult(
            query=query,
            scope=scope,
            connections=connections,
            summary=summary,
            recommendations=recommendations,
        )

    async def _with_retry(self, call: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await call()
            except RetrievalUnavailableError as e:
                if attempt >= self._retry_attempts:
                    raise
                delay = self._retry_backoff * (2 ** attempt)
                logger.info("Retrieval unavailable (%s); retrying in %.2fs", e.details, delay)
                await asyncio.sleep(delay)
                attempt += 1

    # =========================================================================
    # Audit (fire and forget)
    # =========================================================================

    def audit(self, event: AuditEvent) -> None:
        """Schedule an audit write without waiting for it"""
        if self._audit_sink is None:
            return

        task = asyncio.create_task(self._emit_audit(event))
        self._pending_audits.add(task)
        task.add_done_callback(self._pending_audits.discard)

    async def _emit_audit(self, event: AuditEvent) -> None:
        try:
            await asyncio.to_thread(self._audit_sink.record, event)
        except Exception as e:
            logger.error("Failed to log query for %s: %s", event.company_id, e, exc_info=True)

    async def drain(self) -> None:
        """Wait for pending audit writes"""
        if self._pending_audits:
            await asyncio.gather(*list(self._pending_audits))
