"""
NetQuery Server

FastAPI server answering natural-language questions about a company's
professional network.

Endpoints:
- POST /query: Ranked connections, summary and recommendations
- POST /crm/query: Same query wrapped for CRM consumers
- GET /health: Health check

Every tagged NetQueryError is turned into a JSON error response by one
exception handler; status codes come from the error kind.
"""

import json
import logging
from typing import Any, Dict, Optional
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .. import __version__
from ..common.audit import AuditEvent, JsonlAuditSink
from ..common.config import load_config, NetQueryConfig, ensure_directories
from ..common.embedding_service import get_embedding_service
from ..common.envector_client import EnVectorClient
from ..common.errors import NetQueryError, InvalidInputError
from ..retriever.orchestrator import QueryOrchestrator, Query
from ..retriever.scope import company_slug
from ..retriever.searcher import Searcher
from .crm import NetworkQueryClient, build_envelope

logger = logging.getLogger("netquery.server")


# Global state
config: Optional[NetQueryConfig] = None
orchestrator: Optional[QueryOrchestrator] = None
network_client: Optional[NetworkQueryClient] = None


def build_orchestrator(cfg: NetQueryConfig) -> QueryOrchestrator:
    """Wire the retrieval pipeline from configuration"""
    envector_client = EnVectorClient(
        address=cfg.envector.endpoint,
        key_path=cfg.envector.key_path,
        key_id=cfg.envector.key_id,
        access_token=cfg.envector.api_key or None,
    )
    searcher = Searcher(
        envector_client=envector_client,
        embedding_service=get_embedding_service(model=cfg.embedding.model),
        topk=cfg.retriever.topk,
        timeout_seconds=cfg.retriever.timeout_seconds,
    )
    audit_sink = JsonlAuditSink(cfg.audit.path) if cfg.audit.enabled else None
    return QueryOrchestrator.from_config(cfg, searcher, audit_sink=audit_sink)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    global config, orchestrator, network_client

    load_dotenv()
    ensure_directories()

    config = load_config()
    orchestrator = build_orchestrator(config)
    network_client = NetworkQueryClient(
        base_url=config.server.public_url,
        timeout=config.retriever.timeout_seconds,
    )
    logger.info(
        "NetQuery ready (enVector: %s, audit: %s)",
        config.envector.endpoint,
        config.audit.path if config.audit.enabled else "disabled",
    )

    yield

    logger.info("Shutting down, flushing audit events")
    await orchestrator.drain()


app = FastAPI(
    title="NetQuery",
    description="Natural-language search over a company's professional network",
    version=__version__,
    lifespan=lifespan,
)


# =============================================================================
# Request Models
# =============================================================================

class QueryRequest(BaseModel):
    """Network query request"""
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = None
    company_name: Optional[str] = Field(None, alias="companyName")
    requester_id: Optional[str] = Field(None, alias="requesterId")


class CrmQueryRequest(BaseModel):
    """CRM query request; external ids are passed through untouched"""
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = None
    company_name: Optional[str] = Field(None, alias="companyName")
    external_user_id: Optional[str] = Field(None, alias="externalUserId")
    external_org_id: Optional[str] = Field(None, alias="externalOrgId")
    external_record_id: Optional[str] = Field(None, alias="externalRecordId")


async def _parse_body(request: Request, model: type) -> Any:
    """Parse a JSON body; malformed bodies count as missing fields"""
    body = await request.body()
    try:
        data = json.loads(body) if body else {}
        return model.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise InvalidInputError(details=f"Invalid request body: {e}") from e


def _require(value: Optional[str]) -> str:
    if not value or not value.strip():
        raise InvalidInputError()
    return value


def _components() -> QueryOrchestrator:
    if orchestrator is None:
        raise NetQueryError("Service not initialized")
    return orchestrator


# =============================================================================
# Error Handling
# =============================================================================

@app.exception_handler(NetQueryError)
async def netquery_error_handler(request: Request, exc: NetQueryError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "netquery",
        "initialized": orchestrator is not None,
        "version": __version__,
    }


@app.post("/query")
async def query_network(request: Request) -> Dict[str, Any]:
    """Answer a question about a company's network"""
    body = await _parse_body(request, QueryRequest)
    query = Query(
        text=_require(body.query),
        company_name=_require(body.company_name),
        requester_id=body.requester_id,
    )

    result = await _components().handle(query)
    return result.to_dict()


@app.post("/crm/query")
async def crm_query(request: Request) -> Dict[str, Any]:
    """Answer a question for a CRM plugin"""
    body = await _parse_body(request, CrmQueryRequest)
    text = _require(body.query)
    company_name = _require(body.company_name)

    pipeline = _components()
    if network_client is None or config is None:
        raise NetQueryError("Service not initialized")

    network_data = await network_client.query(
        text, company_name, requester_id=body.external_user_id
    )
    envelope = build_envelope(
        network_data,
        recommender=pipeline.recommender,
        ranking=config.ranking,
        external_user_id=body.external_user_id,
        external_org_id=body.external_org_id,
        external_record_id=body.external_record_id,
    )

    pipeline.audit(AuditEvent(
        company_id=network_data.get("companyId") or company_slug(company_name),
        query_text=text,
        response_text=json.dumps(envelope),
        requester_id=body.external_user_id,
    ))

    return {"success": True, "data": envelope}


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: Optional[str] = None,
):
    """Run the NetQuery server"""
    import uvicorn

    load_dotenv()
    cfg = load_config()
    logging.basicConfig(
        level=(log_level or cfg.server.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    host = host or cfg.server.host
    port = port or cfg.server.port
    logger.info("Starting server on %s:%d", host, port)
    uvicorn.run(
        "netquery.server.app:app",
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
