"""
Configuration Management for NetQuery

Loads configuration from ~/.netquery/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger("netquery.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".netquery"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOGS_DIR = CONFIG_DIR / "logs"
KEYS_DIR = CONFIG_DIR / "keys"
AUDIT_LOG_PATH = LOGS_DIR / "audit.jsonl"

DEFAULT_DECISION_MAKER_KEYWORDS = ["ceo", "cto", "vp", "director", "head of"]


@dataclass
class EnVectorConfig:
    """enVector connection configuration"""
    endpoint: str = "localhost:50050"
    api_key: str = ""
    key_path: str = str(KEYS_DIR)
    key_id: str = "netquery_key"


@dataclass
class EmbeddingConfig:
    """Embedding model configuration (must match the model used at upload)"""
    model: str = "sentence-transformers/all-MiniLM-L6-v2"


@dataclass
class RetrieverConfig:
    """Retrieval client configuration"""
    topk: int = 10
    timeout_seconds: float = 30.0
    retry_attempts: int = 0  # extra attempts on RetrievalUnavailableError
    retry_backoff_seconds: float = 0.5


@dataclass
class RankingConfig:
    """Business policy for summaries and recommendations"""
    warm_intro_threshold: float = 0.7
    medium_intro_threshold: float = 0.5
    summary_top_n: int = 5
    summary_company_limit: int = 5
    summary_position_limit: int = 3
    recommendation_sample_size: int = 3
    crm_top_connections: int = 5
    decision_maker_keywords: List[str] = field(
        default_factory=lambda: list(DEFAULT_DECISION_MAKER_KEYWORDS)
    )


@dataclass
class AuditConfig:
    """Audit sink configuration"""
    enabled: bool = True
    path: str = str(AUDIT_LOG_PATH)


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 8080
    public_url: str = "http://localhost:8080"  # base URL the CRM variant calls back into
    log_level: str = "INFO"


@dataclass
class NetQueryConfig:
    """Main NetQuery configuration"""
    envector: EnVectorConfig = field(default_factory=EnVectorConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    retriever: RetrieverConfig = field(default_factory=RetrieverConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _parse_envector_config(data: dict) -> EnVectorConfig:
    """Parse envector section from config dict"""
    envector_data = data.get("envector", {})
    return EnVectorConfig(
        endpoint=envector_data.get("endpoint", "localhost:50050"),
        api_key=envector_data.get("api_key", ""),
        key_path=envector_data.get("key_path", str(KEYS_DIR)),
        key_id=envector_data.get("key_id", "netquery_key"),
    )


def _parse_embedding_config(data: dict) -> EmbeddingConfig:
    """Parse embedding section from config dict"""
    embedding_data = data.get("embedding", {})
    return EmbeddingConfig(
        model=embedding_data.get("model", "sentence-transformers/all-MiniLM-L6-v2"),
    )


def _parse_retriever_config(data: dict) -> RetrieverConfig:
    """Parse retriever section from config dict"""
    retriever_data = data.get("retriever", {})
    return RetrieverConfig(
        topk=retriever_data.get("topk", 10),
        timeout_seconds=retriever_data.get("timeout_seconds", 30.0),
        retry_attempts=retriever_data.get("retry_attempts", 0),
        retry_backoff_seconds=retriever_data.get("retry_backoff_seconds", 0.5),
    )


def _parse_ranking_config(data: dict) -> RankingConfig:
    """Parse ranking section from config dict"""
    ranking_data = data.get("ranking", {})
    return RankingConfig(
        warm_intro_threshold=ranking_data.get("warm_intro_threshold", 0.7),
        medium_intro_threshold=ranking_data.get("medium_intro_threshold", 0.5),
        summary_top_n=ranking_data.get("summary_top_n", 5),
        summary_company_limit=ranking_data.get("summary_company_limit", 5),
        summary_position_limit=ranking_data.get("summary_position_limit", 3),
        recommendation_sample_size=ranking_data.get("recommendation_sample_size", 3),
        crm_top_connections=ranking_data.get("crm_top_connections", 5),
        decision_maker_keywords=[
            k.lower() for k in ranking_data.get(
                "decision_maker_keywords", DEFAULT_DECISION_MAKER_KEYWORDS
            )
        ],
    )


def _parse_audit_config(data: dict) -> AuditConfig:
    """Parse audit section from config dict"""
    audit_data = data.get("audit", {})
    return AuditConfig(
        enabled=audit_data.get("enabled", True),
        path=audit_data.get("path", str(AUDIT_LOG_PATH)),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=server_data.get("port", 8080),
        public_url=server_data.get("public_url", "http://localhost:8080"),
        log_level=server_data.get("log_level", "INFO"),
    )


def load_config() -> NetQueryConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.netquery/config.json)
    3. Default values
    """
    config = NetQueryConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.envector = _parse_envector_config(data)
            config.embedding = _parse_embedding_config(data)
            config.retriever = _parse_retriever_config(data)
            config.ranking = _parse_ranking_config(data)
            config.audit = _parse_audit_config(data)
            config.server = _parse_server_config(data)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Environment variable overrides
    if os.getenv("ENVECTOR_ENDPOINT"):
        config.envector.endpoint = os.getenv("ENVECTOR_ENDPOINT")
    if os.getenv("ENVECTOR_API_KEY"):
        config.envector.api_key = os.getenv("ENVECTOR_API_KEY")
    if os.getenv("EMBEDDING_MODEL"):
        config.embedding.model = os.getenv("EMBEDDING_MODEL")

    if os.getenv("NETQUERY_TOPK"):
        config.retriever.topk = int(os.getenv("NETQUERY_TOPK"))
    if os.getenv("NETQUERY_TIMEOUT"):
        config.retriever.timeout_seconds = float(os.getenv("NETQUERY_TIMEOUT"))

    if os.getenv("NETQUERY_AUDIT_PATH"):
        config.audit.path = os.getenv("NETQUERY_AUDIT_PATH")

    if os.getenv("NETQUERY_PORT"):
        config.server.port = int(os.getenv("NETQUERY_PORT"))
    if os.getenv("NETQUERY_PUBLIC_URL"):
        config.server.public_url = os.getenv("NETQUERY_PUBLIC_URL")
    if os.getenv("NETQUERY_LOG_LEVEL"):
        config.server.log_level = os.getenv("NETQUERY_LOG_LEVEL")

    return config


def ensure_directories() -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    KEYS_DIR.mkdir(parents=True, exist_ok=True)
