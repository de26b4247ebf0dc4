"""
Ranker

Turns raw matches into connection records ordered by relevance.

Relevance is 1 - distance. The index is expected to use a distance in
[0, 1] (cosine); anything outside that range is logged and clipped, since
the recommendation thresholds assume scores in [0, 1].
"""

import logging
from typing import List, Dict, Any, Iterable
from dataclasses import dataclass

from ..common.errors import MalformedMatchError
from .searcher import RawMatch

logger = logging.getLogger("netquery.retriever.ranker")

REQUIRED_METADATA_KEYS = ("company", "position")


def normalize(distance: float) -> float:
    """Relevance for a distance. Not bounds-checked."""
    return 1 - distance


def clip_score(score: float) -> float:
    return max(0.0, min(1.0, score))


@dataclass
class RankedConnection:
    """A contact with its relevance to the query"""
    name: str
    company: str
    position: str
    email: str
    linkedin_url: str
    relevance_score: float
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Wire form used by the HTTP API"""
        return {
            "name": self.name,
            "company": self.company,
            "position": self.position,
            "email": self.email,
            "linkedinUrl": self.linkedin_url,
            "relevanceScore": self.relevance_score,
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankedConnection":
        """Rebuild from the wire form"""
        return cls(
            name=data.get("name") or "",
            company=data.get("company") or "",
            position=data.get("position") or "",
            email=data.get("email") or "",
            linkedin_url=data.get("linkedinUrl") or "",
            relevance_score=clip_score(float(data.get("relevanceScore") or 0.0)),
            summary=data.get("summary") or "",
        )


def _field(metadata: Dict[str, Any], key: str) -> str:
    value = metadata.get(key)
    return "" if value is None else str(value)


def to_connection(match: RawMatch) -> RankedConnection:
    """
    Build a RankedConnection from one match.

    Raises:
        MalformedMatchError: company or position key is absent
    """
    metadata = match.metadata
    missing = [k for k in REQUIRED_METADATA_KEYS if k not in metadata]
    if missing:
        raise MalformedMatchError(
            details=f"Match {match.record_id} is missing metadata: {', '.join(missing)}"
        )

    if not 0.0 <= match.distance <= 1.0:
        logger.warning(
            "Distance %.4f for match %s is outside [0, 1]; relevance clipped. "
            "Check the index distance metric.",
            match.distance, match.record_id,
        )

    name = f"{_field(metadata, 'first_name')} {_field(metadata, 'last_name')}".strip()

    return RankedConnection(
        name=name,
        company=_field(metadata, "company"),
        position=_field(metadata, "position"),
        email=_field(metadata, "email"),
        linkedin_url=_field(metadata, "linkedin_url"),
        relevance_score=clip_score(normalize(match.distance)),
        summary=match.document_text,
    )


def rank(matches: Iterable[RawMatch]) -> List[RankedConnection]:
    """
    Convert matches and sort them by relevance, highest first.

    The sort is stable, so equal scores keep retrieval order.
    """
    connections = [to_connection(m) for m in matches]
    connections.sort(key=lambda c: c.relevance_score, reverse=True)
    return connections
