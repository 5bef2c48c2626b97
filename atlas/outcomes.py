"""
Query outcomes
==============

A directory query ends in exactly one state:

- NORMAL             -> render the page of results
- EMPTY_BY_SEARCH    -> a search query matched nothing
- EMPTY_BY_FILTER    -> the timezone / time-of-day filters matched nothing
- INVALID_PAGE       -> the requested page is past the last page
- INVALID_PARAMETER  -> the request carried an unknown parameter

Every non-normal state comes with a fixed title, message and list of
suggestions. Renderers (HTML pages, JSON APIs, the CLI) show these as-is, so
the wording below is part of the public contract.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
from .models import Country, Listing, QueryCriteria

class OutcomeState(str, Enum):
    NORMAL = "normal"
    EMPTY_BY_SEARCH = "search"
    EMPTY_BY_FILTER = "timezone"
    INVALID_PAGE = "page"
    INVALID_PARAMETER = "invalid_param"

    @property
    def status_code(self) -> int:
        """HTTP status a web front end should answer with."""
        return 200 if self is OutcomeState.NORMAL else 404

@dataclass(frozen=True)
class OutcomeMessage:
    title: str
    message: str
    suggestions: Tuple[str, ...]

@dataclass(frozen=True)
class QueryResult:
    """Everything needed to render one page of the directory."""
    listings: List[Listing]
    # the full filtered + searched set (all pages), e.g. for export
    matches: List[Country]
    current_page: int
    total_pages: int
    items_per_page: int
    regions: List[str]
    timezones: List[str]
    criteria: QueryCriteria

@dataclass(frozen=True)
class QueryOutcome:
    state: OutcomeState
    result: Optional[QueryResult] = None
    message: Optional[OutcomeMessage] = None
    # state-specific detail: the query, the max page or the parameter name
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.state is OutcomeState.NORMAL

_SUGGESTIONS = {
    OutcomeState.EMPTY_BY_SEARCH: (
        "Check your spelling",
        "Try a more general search term",
        "Search by region instead",
        "Browse all countries without filters",
    ),
    OutcomeState.EMPTY_BY_FILTER: (
        "Try a different time zone",
        "Check our world map to see time zone coverage",
        "Browse all countries without time zone filter",
    ),
    OutcomeState.INVALID_PAGE: (
        "Go to the first page",
        "Use the pagination controls at the bottom of the page",
        "Return to the homepage without filters",
    ),
    OutcomeState.INVALID_PARAMETER: (
        "Remove the invalid parameter from the URL",
        "Check for typos in the URL",
        "Use the navigation and search forms instead of manually editing the URL",
        "Return to the homepage without filters",
    ),
}

def describe(state: OutcomeState, detail: str = "") -> OutcomeMessage:
    """Title, message and suggestions for a non-normal state."""
    if state is OutcomeState.EMPTY_BY_SEARCH:
        return OutcomeMessage(
            "No Results Found",
            f"No countries match your search criteria: '{detail}'",
            _SUGGESTIONS[state],
        )
    if state is OutcomeState.EMPTY_BY_FILTER:
        return OutcomeMessage(
            "No Countries in Time Zone",
            "We couldn't find any countries in the selected time zone.",
            _SUGGESTIONS[state],
        )
    if state is OutcomeState.INVALID_PAGE:
        msg = "The requested page number does not exist."
        if detail == "1":
            msg += " There is only 1 page available."
        elif detail:
            msg += f" Available pages: 1 to {detail}."
        return OutcomeMessage("Invalid Page Number", msg, _SUGGESTIONS[state])
    if state is OutcomeState.INVALID_PARAMETER:
        return OutcomeMessage(
            "Invalid URL Parameter",
            f"The URL contains an invalid parameter: '{detail}'",
            _SUGGESTIONS[state],
        )
    raise ValueError(f"No message for state: {state.value}")

def terminal(state: OutcomeState, detail: str = "") -> QueryOutcome:
    """Build a non-normal outcome with its message attached."""
    return QueryOutcome(state=state, message=describe(state, detail), detail=detail)
