"""
Synthesizer

Plain-text digest of ranked connections: a header, the top entries with
contact lines and relevance, and a short insights block.

Output depends only on its inputs, so identical queries against an
unchanged index produce identical summaries.
"""

from typing import List, Sequence

from .ranker import RankedConnection

NO_RESULTS_TEMPLATE = (
    'I couldn\'t find any relevant connections for "{query}". '
    "Please try a different search term or check if the LinkedIn "
    "connections have been properly uploaded."
)

HEADER_TEMPLATE = 'Based on your LinkedIn network, I found {count} relevant connections for "{query}":\n\n'

ENTRY_TEMPLATE = "{index}. **{name}** - {position} at {company}\n"

MISSING_EMAIL = "N/A"


def _distinct(values: Sequence[str]) -> List[str]:
    """Unique values in first-seen order (exact string equality)."""
    return list(dict.fromkeys(values))


class Synthesizer:
    """
    Builds the text summary for a query result.

    Args:
        top_n: Connections listed inline
        company_limit: Companies named in the insights block
        position_limit: Positions named in the insights block
    """

    def __init__(self, top_n: int = 5, company_limit: int = 5, position_limit: int = 3):
        self.top_n = top_n
        self.company_limit = company_limit
        self.position_limit = position_limit

    def summarize(self, query: str, connections: Sequence[RankedConnection]) -> str:
        if not connections:
            return NO_RESULTS_TEMPLATE.format(query=query)

        response = HEADER_TEMPLATE.format(count=len(connections), query=query)

        for i, conn in enumerate(connections[:self.top_n], 1):
            response += self._format_entry(i, conn)

        if len(connections) > self.top_n:
            response += f"... and {len(connections) - self.top_n} more connections.\n\n"

        response += self._format_insights(connections)
        return response

    def _format_entry(self, index: int, conn: RankedConnection) -> str:
        entry = ENTRY_TEMPLATE.format(
            index=index, name=conn.name, position=conn.position, company=conn.company
        )
        if conn.email and conn.email != MISSING_EMAIL:
            entry += f"   Email: {conn.email}\n"
        if conn.linkedin_url:
            entry += f"   LinkedIn: {conn.linkedin_url}\n"
        entry += f"   Relevance: {conn.relevance_score * 100:.1f}%\n\n"
        return entry

    def _format_insights(self, connections: Sequence[RankedConnection]) -> str:
        companies = _distinct([c.company for c in connections])
        positions = _distinct([c.position for c in connections])

        company_line = ", ".join(companies[:self.company_limit])
        if len(companies) > self.company_limit:
            company_line += f" and {len(companies) - self.company_limit} more"

        position_line = ", ".join(positions[:self.position_limit])
        if len(positions) > self.position_limit:
            position_line += " and others"

        return (
            "**Key Insights:**\n"
            f"- Companies represented: {company_line}\n"
            f"- Common positions: {position_line}\n"
        )
