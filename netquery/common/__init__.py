"""
NetQuery Common Module

Shared infrastructure for the retriever and the HTTP server.
"""

from .config import NetQueryConfig, load_config
from .embedding_service import EmbeddingService
from .envector_client import EnVectorClient
from .audit import AuditEvent, AuditSink, JsonlAuditSink
from .errors import (
    NetQueryError,
    InvalidInputError,
    ScopeNotFoundError,
    RetrievalUnavailableError,
    MalformedMatchError,
    DownstreamCallFailedError,
)

__all__ = [
    "NetQueryConfig",
    "load_config",
    "EmbeddingService",
    "EnVectorClient",
    "AuditEvent",
    "AuditSink",
    "JsonlAuditSink",
    "NetQueryError",
    "InvalidInputError",
    "ScopeNotFoundError",
    "RetrievalUnavailableError",
    "MalformedMatchError",
    "DownstreamCallFailedError",
]
