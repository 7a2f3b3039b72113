"""
Command Line Interface for oktasource.

Runs the data source reads and email template calls against the Okta org
configured through ``OKTA_DOMAIN`` / ``OKTA_API_TOKEN`` and prints the
flattened state as JSON.
"""

import json
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from oktasource import __version__
from oktasource.datasources.app_oauth import read_app_oauth
from oktasource.datasources.errors import DataSourceError
from oktasource.datasources.filters import SearchClause
from oktasource.datasources.users import read_users
from oktasource.resources.email_template import delete_email_template, get_email_template
from oktasource.tools.okta_api_client import OktaAPIClient, OktaAPIError
from oktasource.utils.logging import setup_logging

app = typer.Typer(
    name="oktasource",
    help="oktasource - read Okta applications and users as flat state",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        console.print(f"oktasource v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """oktasource - read Okta applications and users as flat state."""
    setup_logging()


def _jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def _print_state(state: Any) -> None:
    console.print_json(json.dumps(_jsonable(state)))


def _fail(error: Exception) -> None:
    console.print(f"❌ [red]{escape(str(error))}[/red]")
    raise typer.Exit(1)


def parse_search_clause(raw: str) -> SearchClause:
    """Parse ``name:comparison[:value]`` into a ``SearchClause``."""
    parts = raw.split(":", 2)
    if len(parts) < 2 or not parts[0]:
        raise typer.BadParameter(f"expected name:comparison[:value], got {raw!r}")
    name, comparison = parts[0], parts[1]
    value = parts[2] if len(parts) == 3 else ""
    return SearchClause(name=name, comparison=comparison, value=value)


@app.command()
def check() -> None:
    """Test the API connection and authentication."""
    try:
        with OktaAPIClient() as client:
            result = client.test_connection()
    except OktaAPIError as e:
        _fail(e)

    if not result["success"]:
        _fail(RuntimeError(result["error"]))
    console.print(f"✅ Connected to [green]{result['org_name']}[/green] ({result['domain']})")


@app.command("app-oauth")
def app_oauth(
    id: Optional[str] = typer.Option(None, "--id", help="Application id"),
    label: Optional[str] = typer.Option(None, help="Exact application label"),
    label_prefix: Optional[str] = typer.Option(None, help="Application label prefix"),
    all_statuses: bool = typer.Option(False, "--all-statuses", help="Also match inactive applications"),
    skip_users: bool = typer.Option(False, "--skip-users", help="Do not list assigned users"),
    skip_groups: bool = typer.Option(False, "--skip-groups", help="Do not list assigned groups"),
) -> None:
    """Read one OAuth application."""
    try:
        with OktaAPIClient() as client:
            state = read_app_oauth(
                client,
                id=id,
                label=label,
                label_prefix=label_prefix,
                active_only=not all_statuses,
                skip_users=skip_users,
                skip_groups=skip_groups,
            )
    except (DataSourceError, OktaAPIError) as e:
        _fail(e)
    _print_state(state)


@app.command()
def users(
    group_id: Optional[str] = typer.Option(None, help="List members of this group"),
    search: List[str] = typer.Option([], "--search", "-s", help="Search clause as name:comparison[:value]"),
    expression: List[str] = typer.Option([], "--expression", "-e", help="Raw search expression"),
    operator: str = typer.Option("and", "--operator", help="Operator joining search clauses (and/or)"),
    all_statuses: bool = typer.Option(False, "--all-statuses", help="Also match inactive users"),
    include_groups: bool = typer.Option(False, "--include-groups", help="Fetch group memberships"),
    include_roles: bool = typer.Option(False, "--include-roles", help="Fetch admin roles"),
    delay: Optional[str] = typer.Option(None, "--delay", help="Seconds to wait before reading"),
) -> None:
    """List users by group membership or search."""
    try:
        clauses = [parse_search_clause(raw) for raw in search]
        clauses.extend(SearchClause(expression=expr) for expr in expression)
        with OktaAPIClient() as client:
            state = read_users(
                client,
                group_id=group_id,
                search=clauses or None,
                compound_search_operator=operator,
                active_only=not all_statuses,
                include_groups=include_groups,
                include_roles=include_roles,
                delay_read_seconds=delay,
            )
    except (DataSourceError, OktaAPIError) as e:
        _fail(e)
    _print_state(state)


# Email template commands
templates_app = typer.Typer(name="email-template", help="Manage custom email templates")
app.add_typer(templates_app)


@templates_app.command("show")
def show_template(template_id: str = typer.Argument(..., help="Template id")) -> None:
    """Show an email template."""
    try:
        with OktaAPIClient() as client:
            template = get_email_template(client, template_id)
    except OktaAPIError as e:
        _fail(e)
    _print_state(template.model_dump(by_alias=True, exclude_none=True))


@templates_app.command("delete")
def delete_template(
    template_id: str = typer.Argument(..., help="Template id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete an email template."""
    if not yes:
        typer.confirm(f"Delete email template {template_id}?", abort=True)
    try:
        with OktaAPIClient() as client:
            delete_email_template(client, template_id)
    except OktaAPIError as e:
        _fail(e)
    console.print(f"🗑️  Deleted email template [blue]{template_id}[/blue]")


if __name__ == "__main__":
    app()
