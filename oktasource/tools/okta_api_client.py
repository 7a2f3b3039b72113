"""
OktaAPIClient Tool for oktasource.

This tool provides synchronous access to the Okta Management API for the
data sources and resources in this package: applications and their client
secrets, users, groups, admin roles and email templates.
"""

from typing import Any, Dict, Iterator, List, Optional

import httpx

from oktasource import __version__
from oktasource.config.settings import get_settings
from oktasource.tools.query import QueryParams
from oktasource.utils.logging import LoggingMixin


class OktaAPIError(Exception):
    """Base exception for Okta API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OktaAuthenticationError(OktaAPIError):
    """Raised when API authentication fails."""
    pass


class OktaRateLimitError(OktaAPIError):
    """Raised when API rate limit is exceeded."""
    pass


class OktaResourceNotFoundError(OktaAPIError):
    """Raised when a requested resource is not found."""
    pass


class OktaAPIClient(LoggingMixin):
    """
    Okta Management API client.

    The underlying HTTP session only exists inside a ``with`` block:

        with OktaAPIClient() as client:
            app = client.get_app("0oa1...")

    List methods follow Okta's ``Link: <...>; rel="next"`` header and return
    every record in server order, or raise on the first failing page.
    """

    def __init__(
        self,
        okta_domain: Optional[str] = None,
        api_token: Optional[str] = None,
        page_limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the Okta API client.

        Args:
            okta_domain: Okta domain (e.g., company.okta.com)
            api_token: Okta API token for authentication
            page_limit: Page size for paginated list requests
            timeout: HTTP timeout in seconds
        """
        super().__init__()
        self.setup_logging("okta_api_client")

        settings = get_settings()

        # Use provided values or fall back to settings
        self.okta_domain = okta_domain or settings.okta.domain
        self.api_token = api_token or settings.okta.api_token
        self.page_limit = page_limit or settings.okta.page_limit

        if not self.okta_domain:
            raise OktaAPIError("Okta domain is required")
        if not self.api_token:
            raise OktaAPIError("Okta API token is required")

        if self.okta_domain.startswith(("https://", "http://")):
            self.base_url = self.okta_domain.rstrip("/")
        else:
            self.base_url = f"https://{self.okta_domain.rstrip('/')}"

        self.api_base_url = f"{self.base_url}/api/v1"

        self.timeout = httpx.Timeout(timeout or settings.okta.request_timeout)
        self.headers = {
            "Authorization": f"SSWS {self.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"oktasource/{__version__}",
        }
        self._client: Optional[httpx.Client] = None

        self.logger.info("Okta API client initialized", domain=self.okta_domain)

    def __enter__(self):
        self._client = httpx.Client(
            timeout=self.timeout,
            headers=self.headers,
            follow_redirects=True,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _url(self, path: str, query: Optional[QueryParams] = None) -> str:
        url = path if path.startswith(("https://", "http://")) else f"{self.api_base_url}{path}"
        if query is not None:
            url += query.to_query_string()
        return url

    def _send(self, method: str, url: str, data: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """
        Issue one request and map error statuses onto client exceptions.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: Absolute request URL, query string included
            data: Request body data
        """
        if self._client is None:
            raise OktaAPIError("Client not initialized. Use the client as a context manager.")

        self.log_method_call("_send", method=method, url=url, has_data=data is not None)

        try:
            response = self._client.request(method=method, url=url, json=data)
        except httpx.RequestError as e:
            self.log_error("_send", e, method=method, url=url)
            raise OktaAPIError(f"Request failed: {e}") from e

        status = response.status_code
        if status == 401:
            raise OktaAuthenticationError("Invalid API token or insufficient permissions", status)
        elif status == 403:
            raise OktaAuthenticationError("Access forbidden - check API token permissions", status)
        elif status == 404:
            raise OktaResourceNotFoundError(f"Resource not found: {method} {url}", status)
        elif status == 429:
            reset = response.headers.get("X-Rate-Limit-Reset", "unknown")
            raise OktaRateLimitError(f"Okta rate limit exceeded. Limit resets at {reset}.", status)
        elif status >= 400:
            raise OktaAPIError(f"API request failed: {_error_summary(response)}", status)

        self.log_method_result("_send", {"status_code": status, "has_content": bool(response.content)})
        return response

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise OktaAPIError(f"Failed to decode response from {response.request.url}: {e}") from e

    def request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        query: Optional[QueryParams] = None,
    ) -> Any:
        """
        Make an authenticated request and return the decoded JSON body.

        Returns:
            Decoded response body, or None for empty responses
        """
        response = self._send(method, self._url(path, query), data=data)
        return self._decode(response)

    def get(self, path: str, query: Optional[QueryParams] = None) -> Any:
        return self.request("GET", path, query=query)

    # ========== PAGINATION ==========

    def paginate(self, path: str, query: Optional[QueryParams] = None) -> Iterator[List[Dict[str, Any]]]:
        """
        Yield one list of records per page.

        The first request uses ``query``; later requests use the URL from the
        ``next`` link verbatim, since it already carries the cursor.
        """
        url: Optional[str] = self._url(path, query)
        while url:
            self.logger.debug("Fetching page", url=url)
            response = self._send("GET", url)
            page = self._decode(response) or []
            if not isinstance(page, list):
                raise OktaAPIError(f"Expected a JSON list from {url}, got {type(page).__name__}")
            yield page
            url = response.links.get("next", {}).get("url")

    def list_all(self, path: str, query: Optional[QueryParams] = None) -> List[Dict[str, Any]]:
        """Collect every page of a list endpoint into one list."""
        records: List[Dict[str, Any]] = []
        for page in self.paginate(path, query):
            records.extend(page)
        self.log_method_result("list_all", {"path": path, "count": len(records)})
        return records

    # ========== APPLICATIONS ==========

    def get_app(self, app_id: str) -> Dict[str, Any]:
        """Get an application by its ID."""
        return self.get(f"/apps/{app_id}")

    def list_apps(self, query: QueryParams) -> List[Dict[str, Any]]:
        """List applications matching ``query``. Only the first page is read."""
        return self.get("/apps", query=query) or []

    def list_app_client_secrets(self, app_id: str) -> List[Dict[str, Any]]:
        return self.get(f"/apps/{app_id}/credentials/secrets") or []

    def list_app_users(self, app_id: str) -> List[Dict[str, Any]]:
        return self.list_all(f"/apps/{app_id}/users", QueryParams(limit=self.page_limit))

    def list_app_groups(self, app_id: str) -> List[Dict[str, Any]]:
        return self.list_all(f"/apps/{app_id}/groups", QueryParams(limit=self.page_limit))

    # ========== USERS AND GROUPS ==========

    def list_users(self, query: QueryParams) -> List[Dict[str, Any]]:
        return self.list_all("/users", query)

    def list_group_users(self, group_id: str) -> List[Dict[str, Any]]:
        return self.list_all(f"/groups/{group_id}/users", QueryParams(limit=self.page_limit))

    def list_user_groups(self, user_id: str) -> List[Dict[str, Any]]:
        return self.list_all(f"/users/{user_id}/groups")

    def list_user_roles(self, user_id: str) -> List[Dict[str, Any]]:
        return self.list_all(f"/users/{user_id}/roles")

    # ========== UTILITY METHODS ==========

    def test_connection(self) -> Dict[str, Any]:
        """
        Test the API connection and authentication.

        Returns:
            Connection test result
        """
        self.log_method_call("test_connection")

        try:
            result = self.get("/org") or {}
        except OktaAPIError as e:
            self.log_error("test_connection", e)
            return {
                "success": False,
                "error": str(e),
                "domain": self.okta_domain,
            }

        org_info = {
            "success": True,
            "org_id": result.get("id"),
            "org_name": result.get("companyName"),
            "domain": self.okta_domain,
            "api_version": "v1",
        }
        self.logger.info("API connection test successful", org_name=org_info["org_name"])
        return org_info


def _error_summary(response: httpx.Response) -> str:
    """Okta's ``errorSummary`` if the body carries one, else the status code."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("errorSummary"):
        return body["errorSummary"]
    return f"HTTP {response.status_code}"
