"""
oktasource - Okta data sources as plain Python

Reads Okta OAuth applications and users into flat state mappings, and
manages custom email templates, over the Okta Management API.
"""

__version__ = "0.1.0"

from oktasource.config.settings import Settings
from oktasource.tools.okta_api_client import OktaAPIClient

__all__ = [
    "OktaAPIClient",
    "Settings",
    "__version__",
]
