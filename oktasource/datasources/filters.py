"""
Selector resolution for the data sources.

Each data source accepts several mutually exclusive selectors. The resolvers
here check that exactly one was supplied and turn it into the query the
fetch step sends to Okta.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from oktasource.datasources.errors import DataSourceConfigError
from oktasource.tools.query import QueryParams

ACTIVE_STATUS_FILTER = 'status eq "ACTIVE"'

SEARCH_COMPARISONS = ("eq", "lt", "gt", "sw", "pr", "ge", "le", "co", "ew", "ne")
COMPOUND_OPERATORS = ("and", "or")


def _supplied(**selectors: Optional[str]) -> List[str]:
    return [name for name, value in selectors.items() if value]


@dataclass(frozen=True)
class AppFilters:
    """Resolved application selector."""

    id: str = ""
    label: str = ""
    label_prefix: str = ""
    status: str = ""

    @property
    def q(self) -> str:
        """Server-side search term: the exact label if given, else the prefix."""
        return self.label or self.label_prefix

    def to_query(self) -> QueryParams:
        return QueryParams(limit=1, filter=self.status, q=self.q)

    def __str__(self) -> str:
        return f'id: "{self.id}", label: "{self.label}", label_prefix: "{self.label_prefix}"'


def resolve_app_filters(
    id: Optional[str] = None,
    label: Optional[str] = None,
    label_prefix: Optional[str] = None,
    active_only: bool = True,
) -> AppFilters:
    """
    Resolve the application selectors into one ``AppFilters``.

    Raises:
        DataSourceConfigError: if none or more than one of ``id``, ``label``
            and ``label_prefix`` is supplied
    """
    supplied = _supplied(id=id, label=label, label_prefix=label_prefix)
    if not supplied:
        raise DataSourceConfigError("you must provide either a label_prefix, id, or label")
    if len(supplied) > 1:
        raise DataSourceConfigError(f"conflicting application selectors: {', '.join(supplied)}")

    return AppFilters(
        id=id or "",
        label=label or "",
        label_prefix=label_prefix or "",
        status=ACTIVE_STATUS_FILTER if active_only else "",
    )


@dataclass(frozen=True)
class SearchClause:
    """
    One clause of a user search.

    ``expression`` is used verbatim when set; otherwise the clause renders as
    ``name comparison "value"``, dropping the value for comparisons such as
    ``pr`` that take none.
    """

    name: str = ""
    value: str = ""
    comparison: str = "eq"
    expression: str = ""

    def __post_init__(self):
        if self.expression:
            return
        if not self.name:
            raise DataSourceConfigError("search clause needs either a name or an expression")
        if self.comparison not in SEARCH_COMPARISONS:
            raise DataSourceConfigError(
                f"invalid search comparison {self.comparison!r}, expected one of {SEARCH_COMPARISONS}"
            )

    def render(self) -> str:
        if self.expression:
            return self.expression
        clause = f"{self.name} {self.comparison}"
        if self.value:
            clause += f' "{self.value}"'
        return clause


def check_operator(operator: str) -> None:
    if operator not in COMPOUND_OPERATORS:
        raise DataSourceConfigError(
            f"invalid compound search operator {operator!r}, expected one of {COMPOUND_OPERATORS}"
        )


def build_search_criteria(clauses: Iterable[SearchClause], operator: str = "and") -> str:
    """
    Join rendered clauses with the compound operator.

    Clauses are sorted first, so the criteria (and any id derived from it)
    does not depend on the order they were supplied in.
    """
    check_operator(operator)
    rendered = sorted({clause.render() for clause in clauses})
    return f" {operator} ".join(rendered)


@dataclass(frozen=True)
class UserFilters:
    """Resolved user selector: a group id or a search criteria string."""

    group_id: str = ""
    search: str = ""
    page_limit: int = 200

    @property
    def by_group(self) -> bool:
        return bool(self.group_id)

    def to_query(self) -> QueryParams:
        return QueryParams(search=self.search, limit=self.page_limit, sort_order="0")


def resolve_user_filters(
    group_id: Optional[str] = None,
    search: Optional[Sequence[SearchClause]] = None,
    compound_search_operator: str = "and",
    active_only: bool = True,
    page_limit: int = 200,
) -> UserFilters:
    """
    Resolve the user selectors into one ``UserFilters``.

    With ``active_only`` the search is narrowed to ``ACTIVE`` users. The group
    path lists members as-is.

    Raises:
        DataSourceConfigError: if neither or both of ``group_id`` and
            ``search`` are supplied, the operator is unknown, or a clause
            is malformed
    """
    check_operator(compound_search_operator)
    if group_id and search:
        raise DataSourceConfigError("conflicting user selectors: group_id, search")
    if group_id:
        return UserFilters(group_id=group_id, page_limit=page_limit)
    if not search:
        raise DataSourceConfigError("must specify either group_id or search attributes")

    criteria = build_search_criteria(search, compound_search_operator)
    if active_only:
        # "and" binds tighter than "or"
        criteria = f"({criteria}) and {ACTIVE_STATUS_FILTER}"
    return UserFilters(search=criteria, page_limit=page_limit)
