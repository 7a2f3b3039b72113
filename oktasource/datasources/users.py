"""
Users data source.

Lists users by group membership or by a compound search, following every
page, and optionally enriches each user with group ids and admin roles.
"""

import re
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from oktasource.datasources.filters import SearchClause, resolve_user_filters
from oktasource.datasources.flatten import flatten_user
from oktasource.tools.okta_api_client import OktaAPIClient
from oktasource.tools.query import checksum_id
from oktasource.utils.logging import LogTimer, get_logger

logger = get_logger(__name__)


def parse_delay(value: Union[str, int, None]) -> Optional[int]:
    """
    Parse ``delay_read_seconds``.

    Accepts an int or a string of digits. Returns None, after logging a
    warning, for anything else (floats included) and for negative values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str) and re.fullmatch(r"[+-]?\d+", value.strip()):
        delay = int(value)
    elif isinstance(value, int) and not isinstance(value, bool):
        delay = value
    else:
        logger.warning("users read delay value is not an integer", delay_read_seconds=value)
        return None
    if delay < 0:
        logger.warning("users read delay value is negative", delay_read_seconds=value)
        return None
    return delay


def read_users(
    client: OktaAPIClient,
    *,
    group_id: Optional[str] = None,
    search: Optional[Sequence[SearchClause]] = None,
    compound_search_operator: str = "and",
    active_only: bool = True,
    include_groups: bool = False,
    include_roles: bool = False,
    delay_read_seconds: Union[str, int, None] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """
    Read a list of users.

    Args:
        client: Open Okta API client
        group_id: List the members of this group
        search: Search clauses, joined with ``compound_search_operator``
        compound_search_operator: ``and`` or ``or``
        active_only: Restrict a search to ACTIVE users
        include_groups: Add ``group_memberships`` (group ids) to each user
        include_roles: Add ``admin_roles`` (role types) to each user
        delay_read_seconds: Block this many seconds before reading
        sleep: Blocking sleep, replaceable in tests

    Returns:
        ``{"id": ..., "users": [...]}`` where id is the group id, or a CRC-32
        of the search query for searches

    Raises:
        DataSourceConfigError: if the selectors are missing or conflict
        OktaAPIError: on transport or decoding failures
    """
    filters = resolve_user_filters(
        group_id=group_id,
        search=search,
        compound_search_operator=compound_search_operator,
        active_only=active_only,
        page_limit=client.page_limit,
    )

    delay = parse_delay(delay_read_seconds)
    if delay:
        logger.info("delaying users read", seconds=delay)
        sleep(delay)

    with LogTimer(logger, "read_users", group_id=filters.group_id, search=filters.search):
        if filters.by_group:
            result_id = filters.group_id
            users = client.list_group_users(filters.group_id)
        else:
            query = filters.to_query()
            result_id = checksum_id(query)
            users = client.list_users(query)

        flattened: List[Dict[str, Any]] = []
        for user in users:
            state = flatten_user(user)
            if include_groups:
                state["group_memberships"] = frozenset(g["id"] for g in client.list_user_groups(user["id"]))
            if include_roles:
                state["admin_roles"] = frozenset(r["type"] for r in client.list_user_roles(user["id"]))
            flattened.append(state)

    return {"id": result_id, "users": flattened}
