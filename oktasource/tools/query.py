"""
Query-string construction for Okta list endpoints.

Okta list endpoints accept a small set of name/value clauses (``q``,
``filter``, ``search``, ``limit``, ``sortOrder``...). ``QueryParams`` renders
them in a canonical form so the same clauses always produce the same string,
which is also what synthetic data source ids are computed from.
"""

import zlib
from dataclasses import dataclass
from typing import Dict
from urllib.parse import urlencode


@dataclass(frozen=True)
class QueryParams:
    """Query clauses for an Okta list request."""

    q: str = ""
    after: str = ""
    limit: int = 0
    filter: str = ""
    expand: str = ""
    search: str = ""
    sort_by: str = ""
    sort_order: str = ""

    def as_dict(self) -> Dict[str, str]:
        """Non-empty clauses keyed by their wire names."""
        values = {
            "q": self.q,
            "after": self.after,
            "limit": str(self.limit) if self.limit > 0 else "",
            "filter": self.filter,
            "expand": self.expand,
            "search": self.search,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
        }
        return {k: v for k, v in values.items() if v}

    def to_query_string(self) -> str:
        """
        Render as ``?k=v&...`` with keys sorted, or ``""`` when empty.

        Values are form-encoded, so spaces become ``+`` and quotes ``%22``.
        """
        values = self.as_dict()
        if not values:
            return ""
        return "?" + urlencode(sorted(values.items()))

    def __str__(self) -> str:
        return self.to_query_string()


def checksum_id(query: QueryParams) -> str:
    """Stable synthetic id for a query: CRC-32 of its query string."""
    return str(zlib.crc32(query.to_query_string().encode("utf-8")))
