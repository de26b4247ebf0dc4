"""
CRM Integration

Downstream-consumer variant of the query endpoint. It calls the primary
/query endpoint over HTTP, then wraps the answer in the envelope CRM
plugins expect: per-connection intro potential, recommendations and the
caller's passthrough identifiers.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from ..common.config import RankingConfig
from ..common.errors import (
    DownstreamCallFailedError,
    InvalidInputError,
    ScopeNotFoundError,
)
from ..retriever.ranker import RankedConnection
from ..retriever.recommender import Recommender

logger = logging.getLogger("netquery.server.crm")


def potential_intro(score: float, high: float = 0.7, medium: float = 0.5) -> str:
    """Intro tier for a relevance score"""
    if score > high:
        return "High"
    if score > medium:
        return "Medium"
    return "Low"


class NetworkQueryClient:
    """
    Calls the primary /query endpoint.

    Args:
        base_url: Root URL of the NetQuery server
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests, in-process ASGI)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def query(
        self,
        query: str,
        company_name: str,
        requester_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run a query through /query and return its JSON body.

        Raises:
            InvalidInputError: Upstream rejected the input (400)
            ScopeNotFoundError: Upstream does not know the company (404)
            DownstreamCallFailedError: Transport error, bad body or upstream failure
        """
        body = {"query": query, "companyName": company_name, "requesterId": requester_id}

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post("/query", json=body)
        except httpx.HTTPError as e:
            logger.warning("Network query call failed: %s", e)
            raise DownstreamCallFailedError(details=f"Network query call failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise DownstreamCallFailedError(
                details=f"Network query returned non-JSON body (status {response.status_code})"
            ) from e

        upstream_error = (data.get("details") or data.get("error")) if isinstance(data, dict) else None
        if response.status_code == 400:
            raise InvalidInputError(details=upstream_error)
        if response.status_code == 404:
            raise ScopeNotFoundError(details=upstream_error)
        if not response.is_success or not isinstance(data, dict) or not data.get("success"):
            raise DownstreamCallFailedError(
                details=f"Network query failed (status {response.status_code}): {upstream_error}"
            )

        return data


def build_envelope(
    network_data: Dict[str, Any],
    recommender: Recommender,
    ranking: RankingConfig,
    external_user_id: Optional[str] = None,
    external_org_id: Optional[str] = None,
    external_record_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Wrap a /query response body for CRM consumers"""
    connections = [RankedConnection.from_dict(c) for c in network_data.get("connections", [])]

    top_connections: List[Dict[str, Any]] = [
        {
            "name": c.name,
            "company": c.company,
            "position": c.position,
            "email": c.email,
            "linkedinProfile": c.linkedin_url,
            "relevanceScore": c.relevance_score,
            "potentialIntro": potential_intro(
                c.relevance_score,
                high=ranking.warm_intro_threshold,
                medium=ranking.medium_intro_threshold,
            ),
        }
        for c in connections[:ranking.crm_top_connections]
    ]

    return {
        "query": network_data.get("query"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "externalUserId": external_user_id,
        "externalOrgId": external_org_id,
        "externalRecordId": external_record_id,
        "networkInsights": {
            "totalConnectionsFound": network_data.get("totalResults", len(connections)),
            "topConnections": top_connections,
            "summary": network_data.get("response", ""),
            "recommendations": [r.to_dict() for r in recommender.recommend(connections)],
        },
    }
