"""
Recommender

Rule-based sales recommendations over a ranked result set.

Rules run in a fixed order and every applicable one is emitted:
1. no_connections  (low)    - empty result, emitted alone
2. warm_introduction (high) - connections above the warm-intro threshold
3. company_cluster (medium) - several connections at the same company
4. decision_makers (high)   - senior titles by keyword
"""

from collections import defaultdict
from enum import Enum
from typing import List, Dict, Any, Optional, Sequence
from dataclasses import dataclass, field

from ..common.config import DEFAULT_DECISION_MAKER_KEYWORDS
from .ranker import RankedConnection


class RecommendationType(str, Enum):
    WARM_INTRODUCTION = "warm_introduction"
    COMPANY_CLUSTER = "company_cluster"
    DECISION_MAKERS = "decision_makers"
    NO_CONNECTIONS = "no_connections"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class Recommendation:
    """A suggested next action"""
    type: RecommendationType
    message: str
    priority: Priority
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type.value,
            "message": self.message,
            "priority": self.priority.value,
        }
        data.update(self.payload)
        return data


class Recommender:
    """
    Derives recommendations from ranked connections.

    Args:
        warm_intro_threshold: Score a connection must exceed for a warm intro
        sample_size: Names listed per recommendation
        decision_maker_keywords: Lowercase title substrings marking seniority
    """

    def __init__(
        self,
        warm_intro_threshold: float = 0.7,
        sample_size: int = 3,
        decision_maker_keywords: Optional[Sequence[str]] = None,
    ):
        self.warm_intro_threshold = warm_intro_threshold
        self.sample_size = sample_size
        self.decision_maker_keywords = tuple(
            k.lower() for k in (decision_maker_keywords or DEFAULT_DECISION_MAKER_KEYWORDS)
        )

    def recommend(self, connections: Sequence[RankedConnection]) -> List[Recommendation]:
        if not connections:
            return [Recommendation(
                type=RecommendationType.NO_CONNECTIONS,
                message=(
                    "No relevant connections found. Consider expanding search terms "
                    "or uploading more LinkedIn connections."
                ),
                priority=Priority.LOW,
            )]

        recommendations = []
        for rule in (self._warm_introduction, self._company_cluster, self._decision_makers):
            rec = rule(connections)
            if rec is not None:
                recommendations.append(rec)
        return recommendations

    def is_decision_maker(self, connection: RankedConnection) -> bool:
        position = connection.position.lower()
        return any(keyword in position for keyword in self.decision_maker_keywords)

    def _warm_introduction(self, connections: Sequence[RankedConnection]) -> Optional[Recommendation]:
        high = [c for c in connections if c.relevance_score > self.warm_intro_threshold]
        if not high:
            return None

        return Recommendation(
            type=RecommendationType.WARM_INTRODUCTION,
            message=(
                f"{len(high)} high-relevance connections found. "
                "Consider requesting warm introductions."
            ),
            priority=Priority.HIGH,
            payload={
                "connections": [c.name for c in high[:self.sample_size]],
                "connection_count": len(high),
            },
        )

    def _company_cluster(self, connections: Sequence[RankedConnection]) -> Optional[Recommendation]:
        # dict keeps first-encountered order; sorted() is stable on equal sizes
        groups: Dict[str, List[RankedConnection]] = defaultdict(list)
        for conn in connections:
            groups[conn.company].append(conn)

        clusters = sorted(
            ((company, members) for company, members in groups.items() if len(members) > 1),
            key=lambda item: len(item[1]),
            reverse=True,
        )
        if not clusters:
            return None

        company, members = clusters[0]
        return Recommendation(
            type=RecommendationType.COMPANY_CLUSTER,
            message=(
                f"Multiple connections found at {company} ({len(members)} connections). "
                "Strong potential for account penetration."
            ),
            priority=Priority.MEDIUM,
            payload={
                "company": company,
                "connection_count": len(members),
            },
        )

    def _decision_makers(self, connections: Sequence[RankedConnection]) -> Optional[Recommendation]:
        makers = [c for c in connections if self.is_decision_maker(c)]
        if not makers:
            return None

        return Recommendation(
            type=RecommendationType.DECISION_MAKERS,
            message=f"{len(makers)} potential decision makers identified in your network.",
            priority=Priority.HIGH,
            payload={
                "decision_makers": [
                    {"name": c.name, "position": c.position, "company": c.company}
                    for c in makers[:self.sample_size]
                ],
                "decision_maker_count": len(makers),
            },
        )
