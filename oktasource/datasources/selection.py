"""
Disambiguation rules for reads that can match more than one record.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from oktasource.datasources.errors import DataSourceNotFoundError
from oktasource.datasources.filters import AppFilters
from oktasource.utils.logging import get_logger

logger = get_logger(__name__)

ACTIVE = "ACTIVE"


@dataclass(frozen=True)
class ClientSecret:
    """An OAuth client secret record as returned by ``/credentials/secrets``."""

    id: str = ""
    status: str = ""
    client_secret: str = ""
    last_updated: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ClientSecret":
        return cls(
            id=data.get("id") or "",
            status=data.get("status") or "",
            client_secret=data.get("client_secret") or "",
            last_updated=data.get("lastUpdated") or "",
        )

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE


def select_client_secret(secrets: Sequence[ClientSecret]) -> str:
    """
    Pick the current client secret.

    An app holds at most two secrets. The current one is the most recently
    updated ``ACTIVE`` secret; on equal timestamps the earlier entry wins.
    Returns ``""`` when no secret is active.
    """
    current: Optional[ClientSecret] = None
    for secret in secrets:
        if not secret.is_active:
            continue
        # ISO-8601 timestamps order correctly as strings
        if current is None or secret.last_updated > current.last_updated:
            current = secret
    return current.client_secret if current else ""


def select_app(apps: Sequence[Dict[str, Any]], filters: AppFilters) -> Dict[str, Any]:
    """
    Pick the application a label or prefix lookup refers to.

    The server-side ``q`` match is a prefix match, so an exact label request
    is re-checked against the first result.

    Raises:
        DataSourceNotFoundError: if nothing matched, or the first result's
            label differs from the exact label requested
    """
    if not apps:
        raise DataSourceNotFoundError(f"no OAuth application found with provided filter: {filters}")
    first = apps[0]
    if filters.label and first.get("label") != filters.label:
        raise DataSourceNotFoundError(f"no OAuth application found with the provided label: {filters.label}")
    if len(apps) > 1:
        logger.info(
            "found multiple OAuth applications with the criteria supplied, using the first one",
            app_id=first.get("id"),
            matches=len(apps),
        )
    return first
