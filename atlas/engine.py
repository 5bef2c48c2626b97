"""
Query engine (ATLAS)
====================

The directory answers every request with the same pipeline:

1) filter   -> region / timezone / time-of-day
2) search   -> case-insensitive substring on name, region or capital
3) paginate -> fixed page size, 1-based pages

Facets (distinct regions and timezones) are computed separately and always
over the whole collection, so every filter choice stays on offer.

Every function here is pure: it reads a sequence of immutable `Country`
records and returns new lists. Nothing is cached; facets are recomputed on
each call.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple
from .models import Country

ITEMS_PER_PAGE = 12

# Offsets offered in the timezone filter even if no country uses them.
STANDARD_TIMEZONES = (
    "UTC-12:00", "UTC-11:00", "UTC-10:00", "UTC-09:30", "UTC-09:00",
    "UTC-08:00", "UTC-07:00", "UTC-06:00", "UTC-05:00", "UTC-04:00",
    "UTC-03:30", "UTC-03:00", "UTC-02:00", "UTC-01:00", "UTC",
    "UTC+01:00", "UTC+02:00", "UTC+03:00", "UTC+03:30", "UTC+04:00",
    "UTC+04:30", "UTC+05:00", "UTC+05:30", "UTC+05:45", "UTC+06:00",
    "UTC+06:30", "UTC+07:00", "UTC+08:00", "UTC+08:45", "UTC+09:00",
    "UTC+09:30", "UTC+10:00", "UTC+10:30", "UTC+11:00", "UTC+12:00",
    "UTC+13:00", "UTC+14:00",
)

# name -> [start hour, end hour)
TIME_RANGES = {
    "night": (0, 6),
    "morning": (6, 12),
    "afternoon": (12, 18),
    "evening": (18, 24),
}

@dataclass(frozen=True)
class FilterResult:
    """Filtered countries, plus whether the time filters emptied the set."""
    countries: List[Country]
    empty_by_filter: bool = False

# ---------------- Filters ----------------
def in_time_range(current_time: str, time_range: str) -> bool:
    """True if an 'HH:MM' time falls into the named time-of-day bucket.

    An empty or unknown bucket name matches everything.
    """
    if not time_range or time_range not in TIME_RANGES:
        return True
    try:
        hour = int(current_time.split(":")[0])
    except ValueError:
        return False
    lo, hi = TIME_RANGES[time_range]
    return lo <= hour < hi

def matches_filters(c: Country, region: str = "", timezone: str = "", time_range: str = "") -> bool:
    return ((not region or c.region == region)
            and (not timezone or timezone in c.timezones)
            and (not time_range or in_time_range(c.current_time, time_range)))

def filter_countries(
    countries: Sequence[Country],
    region: str = "",
    timezone: str = "",
    time_range: str = "",
) -> FilterResult:
    """Keep countries matching every supplied criterion (empty = any)."""
    if not (region or timezone or time_range):
        return FilterResult(list(countries))
    out = [c for c in countries if matches_filters(c, region, timezone, time_range)]
    # a region on its own never counts as a filter-caused empty result
    return FilterResult(out, empty_by_filter=not out and bool(timezone or time_range))

# ---------------- Search ----------------
def search_countries(countries: Sequence[Country], query: str) -> List[Country]:
    if not query:
        return list(countries)
    q = query.lower()
    return [c for c in countries
            if q in c.name.lower() or q in c.region.lower() or q in c.capital.lower()]

# ---------------- Pagination ----------------
def total_pages(count: int, per_page: int = ITEMS_PER_PAGE) -> int:
    return math.ceil(count / per_page)

def paginate_countries(
    countries: Sequence[Country],
    page: int,
    per_page: int = ITEMS_PER_PAGE,
) -> Tuple[List[Country], int]:
    """Return (items on `page`, total pages); `page` is clamped to [1, total]."""
    pages = total_pages(len(countries), per_page)
    if pages == 0:
        return [], 0
    page = min(max(page, 1), pages)
    start = (page - 1) * per_page
    return list(countries[start:start + per_page]), pages

# ---------------- Facets ----------------
def unique_regions(countries: Sequence[Country]) -> List[str]:
    return sorted({c.region for c in countries})

def unique_timezones(countries: Sequence[Country]) -> List[str]:
    """Standard offsets plus every zone in use, sorted as plain strings.

    String order puts 'UTC-01:00' before 'UTC-12:00'; renderers rely on this
    order, so it is not sorted by actual offset.
    """
    zones = set(STANDARD_TIMEZONES)
    for c in countries:
        for tz in c.timezones:
            clean = tz.strip()
            if clean:
                zones.add(clean)
    return sorted(zones)
