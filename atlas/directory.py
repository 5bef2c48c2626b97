"""
Directory service (ATLAS)
=========================

The Directory owns the loaded country collection and the favorites store,
and answers directory queries:

1) validate parameter names          -> INVALID_PARAMETER
2) filter (region/timezone/timerange) -> EMPTY_BY_FILTER
3) search                             -> EMPTY_BY_SEARCH
4) check the page against the total   -> INVALID_PAGE
5) paginate + annotate favorites      -> NORMAL

The collection is a tuple of frozen records loaded once; queries never
change it, so concurrent readers need no locking. Favorites are the only
mutable part and the store serializes its own updates.
"""

from __future__ import annotations
import csv
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from .engine import (
    ITEMS_PER_PAGE,
    filter_countries,
    paginate_countries,
    search_countries,
    total_pages,
    unique_regions,
    unique_timezones,
)
from .favorites import FavoritesStore
from .models import Country, Listing, QueryCriteria
from .outcomes import OutcomeState, QueryOutcome, QueryResult, terminal
from .params import Params, as_pairs, criteria_from_pairs, find_invalid

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "name", "capital", "region", "population", "area", "languages", "currency",
    "calling_code", "driving_side", "timezones", "borders",
    "hdi_rank", "hdi_value", "hdi_category", "life_expectancy", "school_years", "gni_per_capita",
]

@dataclass
class Directory:
    """Country directory: the loaded catalog plus the user's favorites."""
    countries: Sequence[Country]
    favorites: FavoritesStore = field(default_factory=FavoritesStore)

    def __post_init__(self) -> None:
        self.countries = tuple(self.countries)

    # ---------------- Queries ----------------
    def answer(self, params: Optional[Params]) -> QueryOutcome:
        """Answer a raw request (mapping, pairs or query string)."""
        pairs = as_pairs(params)
        bad = find_invalid(pairs)
        if bad is not None:
            logger.info("Rejected query with unknown parameter %r", bad)
            return terminal(OutcomeState.INVALID_PARAMETER, bad)
        return self.run(criteria_from_pairs(pairs))

    def run(self, criteria: QueryCriteria) -> QueryOutcome:
        """Answer already validated criteria (steps 2 to 5)."""
        filtered = filter_countries(self.countries, criteria.region, criteria.timezone, criteria.time_range)
        if filtered.empty_by_filter:
            return terminal(OutcomeState.EMPTY_BY_FILTER)

        searched = search_countries(filtered.countries, criteria.query)
        if criteria.query and not searched:
            return terminal(OutcomeState.EMPTY_BY_SEARCH, criteria.query)

        pages = total_pages(len(searched))
        if pages > 0 and criteria.page > pages:
            return terminal(OutcomeState.INVALID_PAGE, str(pages))

        page_items, _ = paginate_countries(searched, criteria.page)
        favs = self.favorites.snapshot()
        result = QueryResult(
            listings=[Listing(c, c.name in favs) for c in page_items],
            matches=searched,
            current_page=criteria.page,
            total_pages=pages,
            items_per_page=ITEMS_PER_PAGE,
            regions=self.regions(),
            timezones=self.timezones(),
            criteria=criteria,
        )
        return QueryOutcome(state=OutcomeState.NORMAL, result=result)

    def regions(self) -> List[str]:
        return unique_regions(self.countries)

    def timezones(self) -> List[str]:
        return unique_timezones(self.countries)

    def find(self, name: str) -> Optional[Country]:
        """Exact-name lookup (first match), falling back to case-insensitive."""
        for c in self.countries:
            if c.name == name:
                return c
        low = name.lower()
        return next((c for c in self.countries if c.name.lower() == low), None)

    def catalog_payload(self) -> List[Dict[str, Any]]:
        """Whole catalog in its public JSON shape."""
        return [c.to_dict() for c in self.countries]

    def stats(self) -> Dict[str, int]:
        return {
            "countries": len(self.countries),
            "with_hdi": sum(1 for c in self.countries if not c.hdi.is_empty),
            "regions": len(self.regions()),
            "timezones": len(self.timezones()),
            "favorites": len(self.favorites),
        }

    # ---------------- Favorites ----------------
    def favorite_countries(self) -> List[Listing]:
        """Favorite countries in catalog order."""
        favs = self.favorites.snapshot()
        return [Listing(c, True) for c in self.countries if c.name in favs]

    def set_favorite(self, name: str, action: str) -> bool:
        """Apply 'add' or 'remove'; returns True if the favorites changed."""
        if action == "add":
            return self.favorites.add(name)
        if action == "remove":
            return self.favorites.remove(name)
        raise ValueError(f"Invalid action: {action!r} (expected 'add' or 'remove')")

    # ---------------- Export ----------------
    def export_csv(self, countries: Sequence[Country], path: str) -> None:
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(CSV_COLUMNS)
            for c in countries:
                w.writerow([c.name, c.capital, c.region, c.population, c.area,
                            ";".join(c.languages), c.currency, c.calling_code, c.driving_side,
                            ";".join(c.timezones), ";".join(c.borders),
                            c.hdi.rank, c.hdi.value, c.hdi.category,
                            c.hdi.life_expectancy, c.hdi.school_years, c.hdi.gni_per_capita])

    def export_json(self, countries: Sequence[Country], path: str) -> None:
        """Export countries in the public JSON shape."""
        payload = [c.to_dict() for c in countries]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
