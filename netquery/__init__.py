"""
NetQuery

Natural-language search over a company's uploaded professional network.

Philosophy:
- Contacts are embedded once at upload time; queries only read the index
- Relevance is derived from vector distance, never from a learned model
- Recommendations are deterministic rules over the ranked result set
- Audit is best effort and never blocks a query

Usage:
    from netquery.common import load_config, EnVectorClient, EmbeddingService
    from netquery.retriever import QueryOrchestrator, Query
    from netquery.server.app import app
"""

__version__ = "0.1.0"
