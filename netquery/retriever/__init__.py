"""
Retriever - Network Query Engine

Finds the contacts in a company's network most relevant to a question and
turns them into a summary and sales recommendations.

Key Components:
- ScopeResolver: Maps a company name to its enVector collection
- Searcher: Top-k nearest-neighbour retrieval
- rank: Distance -> relevance, ordered connections
- Synthesizer: Text summary of the ranked connections
- Recommender: Rule-based recommendations
- QueryOrchestrator: Runs the pipeline and audits the result

Pipeline:
1. Resolve company scope
2. Search enVector for nearest contacts
3. Rank by relevance (1 - distance, clipped to [0, 1])
4. Summarize and recommend
"""

from .scope import CompanyScope, ScopeResolver, collection_name_for
from .searcher import Searcher, RawMatch
from .ranker import RankedConnection, normalize, rank
from .synthesizer import Synthesizer
from .recommender import Recommender, Recommendation, RecommendationType, Priority
from .orchestrator import QueryOrchestrator, Query, QueryResult

__all__ = [
    "CompanyScope",
    "ScopeResolver",
    "collection_name_for",
    "Searcher",
    "RawMatch",
    "RankedConnection",
    "normalize",
    "rank",
    "Synthesizer",
    "Recommender",
    "Recommendation",
    "RecommendationType",
    "Priority",
    "QueryOrchestrator",
    "Query",
    "QueryResult",
]
