"""
NetQuery HTTP Server

FastAPI application exposing the query engine:
- POST /query: network query
- POST /crm/query: CRM-facing envelope over /query
- GET /health

Run with `netquery serve` or `python -m netquery.server.app`.
"""
