"""
Integration tests for the OAuth application data source.

Runs complete reads against a mocked Okta org: resolve, fetch, select,
flatten.
"""

import pytest

from oktasource.datasources.app_oauth import read_app_oauth
from oktasource.datasources.errors import DataSourceConfigError, DataSourceNotFoundError
from oktasource.tools.okta_api_client import OktaAPIError

SECRETS = [
    {"id": "ocs1", "status": "ACTIVE", "client_secret": "older", "lastUpdated": "2024-01-01T00:00:00.000Z"},
    {"id": "ocs2", "status": "ACTIVE", "client_secret": "newer", "lastUpdated": "2024-03-01T00:00:00.000Z"},
]


@pytest.fixture
def org(okta_mock, oauth_app):
    okta_mock.add("GET", "/apps/0oa1abc", json=oauth_app)
    okta_mock.add("GET", "/apps", json=[oauth_app])
    okta_mock.add("GET", "/apps/0oa1abc/credentials/secrets", json=SECRETS)
    okta_mock.add("GET", "/apps/0oa1abc/users", json=[{"id": "00u1"}, {"id": "00u2"}], next_after="p2")
    okta_mock.add("GET", "/apps/0oa1abc/users", json=[{"id": "00u3"}], after="p2")
    okta_mock.add("GET", "/apps/0oa1abc/groups", json=[{"id": "00g1"}])
    return okta_mock


@pytest.mark.integration
class TestReadAppOAuth:
    """End-to-end reads of okta_app_oauth state."""

    def test_read_by_id(self, api_client, org):
        state = read_app_oauth(api_client, id="0oa1abc")

        assert state["id"] == "0oa1abc"
        assert state["label"] == "Portal"
        assert state["client_secret"] == "newer"
        assert state["users"] == frozenset({"00u1", "00u2", "00u3"})
        assert state["groups"] == frozenset({"00g1"})
        assert "/api/v1/apps" not in org.paths()

    def test_read_by_label_sends_filter(self, api_client, org):
        state = read_app_oauth(api_client, label="Portal")

        assert state["id"] == "0oa1abc"
        lookup = org.requests[0]
        assert lookup.url.path == "/api/v1/apps"
        assert lookup.url.params["q"] == "Portal"
        assert lookup.url.params["limit"] == "1"
        assert lookup.url.params["filter"] == 'status eq "ACTIVE"'

    def test_read_by_prefix_without_status_filter(self, api_client, org):
        read_app_oauth(api_client, label_prefix="Port", active_only=False)

        lookup = org.requests[0]
        assert lookup.url.params["q"] == "Port"
        assert "filter" not in lookup.url.params

    def test_exact_label_mismatch_is_not_found(self, api_client, org):
        with pytest.raises(DataSourceNotFoundError, match="provided label: Port"):
            read_app_oauth(api_client, label="Port")

    def test_empty_lookup_is_not_found(self, api_client, okta_mock):
        okta_mock.add("GET", "/apps", json=[])

        with pytest.raises(DataSourceNotFoundError, match="provided filter"):
            read_app_oauth(api_client, label_prefix="Nope")

    def test_unknown_id_is_not_found(self, api_client, okta_mock):
        okta_mock.add("GET", "/apps/0oaMissing", json={"errorSummary": "Not found: Resource not found: 0oaMissing (AppInstance)"}, status=404)

        with pytest.raises(DataSourceNotFoundError, match="0oaMissing"):
            read_app_oauth(api_client, id="0oaMissing")

    def test_conflicting_selectors_make_no_requests(self, api_client, org):
        with pytest.raises(DataSourceConfigError):
            read_app_oauth(api_client, id="0oa1abc", label="Portal")

        assert org.requests == []

    def test_skip_users_and_groups(self, api_client, org):
        state = read_app_oauth(api_client, id="0oa1abc", skip_users=True, skip_groups=True)

        assert "users" not in state
        assert "groups" not in state
        assert "/api/v1/apps/0oa1abc/users" not in org.paths()
        assert "/api/v1/apps/0oa1abc/groups" not in org.paths()

    def test_no_active_secret_is_empty(self, api_client, okta_mock, oauth_app):
        okta_mock.add("GET", "/apps/0oa1abc", json=oauth_app)
        okta_mock.add("GET", "/apps/0oa1abc/credentials/secrets", json=[
            {"id": "ocs1", "status": "INACTIVE", "client_secret": "x", "lastUpdated": "2024-01-01T00:00:00.000Z"},
        ])

        state = read_app_oauth(api_client, id="0oa1abc", skip_users=True, skip_groups=True)

        assert state["client_secret"] == ""

    def test_secret_listing_failure_propagates(self, api_client, okta_mock, oauth_app):
        okta_mock.add("GET", "/apps/0oa1abc", json=oauth_app)
        okta_mock.add("GET", "/apps/0oa1abc/credentials/secrets", json={"errorSummary": "denied"}, status=403)

        with pytest.raises(OktaAPIError):
            read_app_oauth(api_client, id="0oa1abc")

    def test_repeated_reads_are_identical(self, api_client, org):
        assert read_app_oauth(api_client, id="0oa1abc") == read_app_oauth(api_client, id="0oa1abc")
