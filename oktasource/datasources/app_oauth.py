"""
OAuth application data source.

Looks up one OpenID Connect application by id, exact label or label prefix
and returns its flattened state, including the current client secret.
"""

from typing import Any, Dict, Optional

from oktasource.datasources.errors import DataSourceNotFoundError
from oktasource.datasources.filters import resolve_app_filters
from oktasource.datasources.flatten import flatten_oauth_app
from oktasource.datasources.selection import ClientSecret, select_app, select_client_secret
from oktasource.tools.okta_api_client import OktaAPIClient, OktaResourceNotFoundError
from oktasource.utils.logging import LogTimer, get_logger

logger = get_logger(__name__)


def read_app_oauth(
    client: OktaAPIClient,
    *,
    id: Optional[str] = None,
    label: Optional[str] = None,
    label_prefix: Optional[str] = None,
    active_only: bool = True,
    skip_users: bool = False,
    skip_groups: bool = False,
) -> Dict[str, Any]:
    """
    Read an OAuth application.

    Args:
        client: Open Okta API client
        id: Exact application id
        label: Exact application label
        label_prefix: Label prefix; the first match in server order is used
        active_only: Only consider ACTIVE applications for label lookups
        skip_users: Do not list the ids of users assigned to the app
        skip_groups: Do not list the ids of groups assigned to the app

    Returns:
        Flattened application state

    Raises:
        DataSourceConfigError: if the selectors are missing or conflict
        DataSourceNotFoundError: if no application matches
        OktaAPIError: on transport or decoding failures
    """
    filters = resolve_app_filters(id=id, label=label, label_prefix=label_prefix, active_only=active_only)

    with LogTimer(logger, "read_app_oauth", filters=str(filters)):
        if filters.id:
            try:
                app = client.get_app(filters.id)
            except OktaResourceNotFoundError as e:
                raise DataSourceNotFoundError(f"no OAuth application found with id: {filters.id}") from e
        else:
            app = select_app(client.list_apps(filters.to_query()), filters)

        app_id = app["id"]
        state = flatten_oauth_app(app, _current_client_secret(client, app_id))

        if not skip_users:
            state["users"] = frozenset(u["id"] for u in client.list_app_users(app_id))
        if not skip_groups:
            state["groups"] = frozenset(g["id"] for g in client.list_app_groups(app_id))

    return state


def _current_client_secret(client: OktaAPIClient, app_id: str) -> str:
    secrets = [ClientSecret.from_api(s) for s in client.list_app_client_secrets(app_id)]
    return select_client_secret(secrets)
