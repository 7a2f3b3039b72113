"""
Flattening of Okta API objects into data source state.

Repeated values become frozensets, nested JSON that is kept whole becomes
canonical JSON text, and absent nested structures leave their keys out.
"""

import json
from typing import Any, Dict, FrozenSet, Iterable, Optional

# Okta profile attribute -> state key
USER_PROFILE_FIELDS = {
    "city": "city",
    "costCenter": "cost_center",
    "countryCode": "country_code",
    "department": "department",
    "displayName": "display_name",
    "division": "division",
    "email": "email",
    "employeeNumber": "employee_number",
    "firstName": "first_name",
    "honorificPrefix": "honorific_prefix",
    "honorificSuffix": "honorific_suffix",
    "lastName": "last_name",
    "locale": "locale",
    "login": "login",
    "manager": "manager",
    "managerId": "manager_id",
    "middleName": "middle_name",
    "mobilePhone": "mobile_phone",
    "nickName": "nick_name",
    "organization": "organization",
    "postalAddress": "postal_address",
    "preferredLanguage": "preferred_language",
    "primaryPhone": "primary_phone",
    "profileUrl": "profile_url",
    "secondEmail": "second_email",
    "state": "state",
    "streetAddress": "street_address",
    "timezone": "timezone",
    "title": "title",
    "userType": "user_type",
    "zipCode": "zip_code",
}

# Transitional statuses reported as ACTIVE; raw_status keeps the original
ACTIVE_EQUIVALENT_STATUSES = {"PASSWORD_EXPIRED", "RECOVERY", "LOCKED_OUT", "PROVISIONED"}


def to_set(values: Optional[Iterable[Any]]) -> FrozenSet[str]:
    return frozenset(str(v) for v in values or ())


def to_json(value: Any) -> str:
    """Canonical JSON text: sorted keys, no insignificant whitespace."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def map_status(status: str) -> str:
    return "ACTIVE" if status in ACTIVE_EQUIVALENT_STATUSES else status


def flatten_oauth_app(app: Dict[str, Any], client_secret: str = "") -> Dict[str, Any]:
    """
    Flatten an OpenID Connect application.

    Args:
        app: Application object from ``/api/v1/apps``
        client_secret: The secret chosen by ``select_client_secret``

    Returns:
        Flat state mapping
    """
    state: Dict[str, Any] = {
        "id": app.get("id"),
        "label": app.get("label"),
        "name": app.get("name"),
        "status": app.get("status"),
        "client_secret": client_secret,
    }

    visibility = app.get("visibility")
    if visibility is not None:
        hide = visibility.get("hide") or {}
        state["auto_submit_toolbar"] = bool(visibility.get("autoSubmitToolbar"))
        state["hide_ios"] = bool(hide.get("iOS"))
        state["hide_web"] = bool(hide.get("web"))

    oauth_client = (app.get("settings") or {}).get("oauthClient")
    credentials = (app.get("credentials") or {}).get("oauthClient") or {}

    state["grant_types"] = frozenset()
    state["response_types"] = frozenset()
    state["redirect_uris"] = frozenset()
    state["post_logout_redirect_uris"] = frozenset()

    if oauth_client is not None:
        state.update({
            "type": oauth_client.get("application_type"),
            "client_uri": oauth_client.get("client_uri"),
            "logo_uri": oauth_client.get("logo_uri"),
            "login_uri": oauth_client.get("initiate_login_uri"),
            "client_id": credentials.get("client_id"),
            "policy_uri": oauth_client.get("policy_uri"),
            "wildcard_redirect": oauth_client.get("wildcard_redirect"),
            "grant_types": to_set(oauth_client.get("grant_types")),
            "response_types": to_set(oauth_client.get("response_types")),
            "redirect_uris": to_set(oauth_client.get("redirect_uris")),
            "post_logout_redirect_uris": to_set(oauth_client.get("post_logout_redirect_uris")),
        })

        idp_login = oauth_client.get("idp_initiated_login")
        if idp_login is not None:
            state["login_mode"] = idp_login.get("mode")
            state["login_scopes"] = to_set(idp_login.get("default_scope"))

    if app.get("_links") is not None:
        state["links"] = to_json(app["_links"])

    return state


def flatten_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a user, splitting standard and custom profile attributes."""
    profile = user.get("profile") or {}
    raw_status = user.get("status") or ""

    state: Dict[str, Any] = {
        "id": user.get("id"),
        "status": map_status(raw_status),
        "raw_status": raw_status,
    }

    custom: Dict[str, Any] = {}
    for key, value in profile.items():
        if key in USER_PROFILE_FIELDS:
            if value is not None:
                state[USER_PROFILE_FIELDS[key]] = value
        else:
            custom[key] = value

    state["custom_profile_attributes"] = to_json(custom)
    return state
