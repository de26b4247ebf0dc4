"""
Errors

Tagged error kinds raised by the engine. Each kind knows the HTTP status it
maps to, so the server translates them without inspecting messages.
"""

from typing import Any, Dict, Optional


class NetQueryError(Exception):
    """Base error. Also used for unexpected failures wrapped by the orchestrator."""

    kind = "internal"
    status_code = 500
    default_message = "Failed to process query"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "kind": self.kind,
            "details": self.details,
        }


class InvalidInputError(NetQueryError):
    """Missing or empty required field (caller can fix)."""

    kind = "invalid_input"
    status_code = 400
    default_message = "Query and company name are required"


class ScopeNotFoundError(NetQueryError):
    """Company has no retrieval collection."""

    kind = "scope_not_found"
    status_code = 404
    default_message = "Company not found"


class RetrievalUnavailableError(NetQueryError):
    """Vector store unreachable, timed out, or returned a malformed payload."""

    kind = "retrieval_unavailable"
    status_code = 500
    default_message = "Failed to process query"


class MalformedMatchError(NetQueryError):
    """A retrieved record is missing required metadata."""

    kind = "malformed_match"
    status_code = 500
    default_message = "Failed to process query"


class DownstreamCallFailedError(NetQueryError):
    """The CRM variant's call to the primary query endpoint failed."""

    kind = "downstream_call_failed"
    status_code = 502
    default_message = "Failed to process CRM query"
