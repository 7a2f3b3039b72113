"""
Custom email templates (``/api/v1/templates/emails``).

Thin create/read/update/delete calls plus the pydantic models for the
template body. Empty fields are left out of request bodies.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from oktasource.tools.okta_api_client import OktaAPIClient
from oktasource.tools.query import QueryParams

EMAIL_TEMPLATES_PATH = "/templates/emails"


class EmailTranslation(BaseModel):
    """Subject and body for one language."""

    subject: Optional[str] = None
    template: Optional[str] = None


class EmailTemplate(BaseModel):
    """A custom email template."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    default_language: Optional[str] = Field(default=None, alias="defaultLanguage")
    subject: Optional[str] = None
    template: Optional[str] = None
    translations: Optional[Dict[str, EmailTranslation]] = None

    def to_api(self) -> Dict[str, Any]:
        """Request body with camelCase keys and empty values omitted."""
        return _omit_empty(self.model_dump(by_alias=True, exclude_none=True))


def _omit_empty(value: Any) -> Any:
    if isinstance(value, dict):
        cleaned = {k: _omit_empty(v) for k, v in value.items()}
        return {k: v for k, v in cleaned.items() if v not in ("", {}, None)}
    return value


def create_email_template(
    client: OktaAPIClient,
    body: EmailTemplate,
    query: Optional[QueryParams] = None,
) -> EmailTemplate:
    """Create a template and return it as stored by Okta."""
    client.log_method_call("create_email_template", name=body.name, type=body.type)
    result = client.request("POST", EMAIL_TEMPLATES_PATH, data=body.to_api(), query=query)
    return EmailTemplate.model_validate(result or {})


def update_email_template(
    client: OktaAPIClient,
    template_id: str,
    body: EmailTemplate,
    query: Optional[QueryParams] = None,
) -> EmailTemplate:
    client.log_method_call("update_email_template", template_id=template_id)
    result = client.request("PUT", f"{EMAIL_TEMPLATES_PATH}/{template_id}", data=body.to_api(), query=query)
    return EmailTemplate.model_validate(result or {})


def get_email_template(client: OktaAPIClient, template_id: str) -> EmailTemplate:
    result = client.get(f"{EMAIL_TEMPLATES_PATH}/{template_id}")
    return EmailTemplate.model_validate(result or {})


def delete_email_template(client: OktaAPIClient, template_id: str) -> None:
    client.log_method_call("delete_email_template", template_id=template_id)
    client.request("DELETE", f"{EMAIL_TEMPLATES_PATH}/{template_id}")
    client.logger.info("Email template deleted", template_id=template_id)
