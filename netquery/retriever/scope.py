"""
Company Scope

Maps a human-entered company name to the enVector index holding that
company's contacts. The naming policy lives in one pure function so the
upload pipeline and the query path agree on it.
"""

import re
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List

from ..common.envector_client import EnVectorClient
from ..common.errors import ScopeNotFoundError, RetrievalUnavailableError

logger = logging.getLogger("netquery.retriever.scope")

COLLECTION_SUFFIX = "_linkedin_connections"

_WHITESPACE = re.compile(r"\s+")


def company_slug(company_name: str) -> str:
    """Lowercase the name and collapse whitespace runs into underscores."""
    return _WHITESPACE.sub("_", company_name.strip().lower())


def collection_name_for(company_name: str) -> str:
    """
    Collection (index) name for a company.

    >>> collection_name_for("Acme  Corp")
    'acme_corp_linkedin_connections'
    """
    return company_slug(company_name) + COLLECTION_SUFFIX


@dataclass(frozen=True)
class CompanyScope:
    """A resolved company: its id and the collection that holds its contacts"""
    company_name: str
    company_id: str
    collection_name: str


class ScopeResolver:
    """
    Resolves company names against the indexes that exist in enVector.

    The company id is always company_slug(name), whatever the naming policy;
    it keys audit records, while the naming policy only selects the collection.

    Args:
        client: EnVector client used to list indexes
        naming: Company name -> collection name policy
    """

    def __init__(
        self,
        client: EnVectorClient,
        naming: Callable[[str], str] = collection_name_for,
    ):
        self._client = client
        self._naming = naming

    def scope_for(self, company_name: str) -> CompanyScope:
        """Build the scope for a name without checking that it exists"""
        return CompanyScope(
            company_name=company_name,
            company_id=company_slug(company_name),
            collection_name=self._naming(company_name),
        )

    async def resolve(self, company_name: str) -> CompanyScope:
        """
        Resolve a company name to an existing collection.

        Raises:
            ScopeNotFoundError: No collection exists for the company
            RetrievalUnavailableError: The index list could not be read
        """
        scope = self.scope_for(company_name)
        indexes = await asyncio.to_thread(self._list_indexes)

        if scope.collection_name not in indexes:
            raise ScopeNotFoundError(
                details=f"No collection '{scope.collection_name}' for company '{company_name}'"
            )

        return scope

    def _list_indexes(self) -> List[str]:
        try:
            result = self._client.get_index_list()
        except Exception as e:
            raise RetrievalUnavailableError(details=f"Index listing failed: {e}") from e

        if not result.get("ok"):
            logger.warning("Index listing failed: %s", result.get("error"))
            raise RetrievalUnavailableError(details=f"Index listing failed: {result.get('error')}")

        indexes = result.get("results", [])
        if not isinstance(indexes, list):
            raise RetrievalUnavailableError(
                details=f"Unexpected index list payload: {type(indexes).__name__}"
            )

        return [str(name) for name in indexes]
