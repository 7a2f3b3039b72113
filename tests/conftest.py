"""
Pytest configuration and fixtures for oktasource tests.

Okta is faked with pytest-httpx: responses are registered per method, path
and pagination cursor, so every test exercises the real client code.
"""

import os
import re
from typing import Any, Dict, List, Optional

import httpx
import pytest
from pytest_httpx import HTTPXMock

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["OKTA_DOMAIN"] = "test.okta.com"
os.environ["OKTA_API_TOKEN"] = "test-token"

from oktasource.config.settings import get_settings
from oktasource.tools.okta_api_client import OktaAPIClient

OKTA_BASE = "https://test.okta.com/api/v1"


def okta_url(path: str, after: Optional[str] = None) -> "re.Pattern[str]":
    """
    Match ``/api/v1{path}`` with any query string.

    Without ``after`` only first pages (no ``after`` cursor) match.
    """
    base = re.escape(f"{OKTA_BASE}{path}")
    if after is None:
        return re.compile(base + r"(\?(?!(.*&)?after=).*)?$")
    return re.compile(base + r"\?(.*&)?after=" + re.escape(after) + r"(&.*)?$")


class OktaMock:
    """Registers canned Okta responses on ``httpx_mock``."""

    def __init__(self, httpx_mock: HTTPXMock):
        self.httpx_mock = httpx_mock

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status: int = 200,
        after: Optional[str] = None,
        next_after: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Register a response for ``/api/v1{path}``.

        ``next_after`` adds a ``Link: rel="next"`` header pointing at the page
        registered with ``after=next_after``. Several responses for the same
        request are served in order, the last one repeating.
        """
        headers = dict(headers or {})
        if next_after is not None:
            headers["Link"] = f'<{OKTA_BASE}{path}?after={next_after}&limit=2>; rel="next"'
        self.httpx_mock.add_response(
            method=method,
            url=okta_url(path, after),
            status_code=status,
            json=json,
            headers=headers,
        )

    @property
    def requests(self) -> List[httpx.Request]:
        return self.httpx_mock.get_requests()

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


def pytest_collection_modifyitems(session, config, items):
    for item in items:
        # Fixtures register whole orgs; a test only requests part of one
        item.add_marker(
            pytest.mark.httpx_mock(
                can_send_already_matched_responses=True,
                assert_all_responses_were_requested=False,
            )
        )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; start every test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def okta_mock(httpx_mock):
    return OktaMock(httpx_mock)


@pytest.fixture
def api_client(okta_mock):
    """Open client talking to the mocked org, with a page size of 2."""
    with OktaAPIClient(
        okta_domain="test.okta.com",
        api_token="test-token",
        page_limit=2,
    ) as client:
        yield client


@pytest.fixture
def oauth_app():
    """An OIDC application as returned by /api/v1/apps."""
    return {
        "id": "0oa1abc",
        "name": "oidc_client",
        "label": "Portal",
        "status": "ACTIVE",
        "signOnMode": "OPENID_CONNECT",
        "visibility": {
            "autoSubmitToolbar": False,
            "hide": {"iOS": True, "web": False},
        },
        "credentials": {
            "oauthClient": {
                "client_id": "client-123",
                "client_secret": "stale-secret",
                "token_endpoint_auth_method": "client_secret_basic",
            }
        },
        "settings": {
            "oauthClient": {
                "application_type": "web",
                "client_uri": "https://portal.example.com",
                "logo_uri": "https://portal.example.com/logo.png",
                "initiate_login_uri": "https://portal.example.com/login",
                "policy_uri": "https://portal.example.com/policy",
                "wildcard_redirect": "DISABLED",
                "redirect_uris": ["https://portal.example.com/cb", "https://portal.example.com/cb2"],
                "post_logout_redirect_uris": ["https://portal.example.com/bye"],
                "response_types": ["code", "token"],
                "grant_types": ["authorization_code", "implicit"],
                "idp_initiated_login": {"mode": "OKTA", "default_scope": ["openid", "email"]},
            }
        },
        "_links": {
            "users": {"href": f"{OKTA_BASE}/apps/0oa1abc/users"},
            "groups": {"href": f"{OKTA_BASE}/apps/0oa1abc/groups"},
        },
    }


def make_user(user_id: str, login: str, status: str = "ACTIVE", **profile: Any) -> Dict[str, Any]:
    first, _, rest = login.partition(".")
    return {
        "id": user_id,
        "status": status,
        "profile": {
            "login": login,
            "email": login,
            "firstName": first.title(),
            "lastName": rest.split("@")[0].title(),
            **profile,
        },
    }


@pytest.fixture
def user_factory():
    """Factory for user objects as returned by /api/v1/users."""
    return make_user


# Pytest markers for different test types
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
