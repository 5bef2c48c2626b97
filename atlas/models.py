"""
Data model (Country, DevelopmentMetrics, QueryCriteria)
======================================================

Each catalog record is converted into a `Country` object, and each ranked row
of the HDI table into a `DevelopmentMetrics` object. Both are immutable
(`frozen=True`) so that:
- records cannot be accidentally modified after loading, and
- queries build new lists instead of editing the loaded collection.

Favorite status is NOT part of `Country`; it is attached per response through
`Listing`.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Tuple

@dataclass(frozen=True)
class DevelopmentMetrics:
    """One ranked row of the HDI table."""
    rank: int = 0
    value: float = 0.0
    category: str = ""
    life_expectancy: float = 0.0
    school_years: float = 0.0
    # kept as printed in the source, e.g. "45,678"
    gni_per_capita: str = ""

    @property
    def is_empty(self) -> bool:
        return self.rank == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hdi_rank": self.rank,
            "hdi_value": self.value,
            "category": self.category,
            "life_expectancy": self.life_expectancy,
            "school_years": self.school_years,
            "gni_per_capita": self.gni_per_capita,
        }

# Sentinel for countries the HDI table does not cover.
EMPTY_METRICS = DevelopmentMetrics()

@dataclass(frozen=True)
class Country:
    """One normalized catalog entry joined with its HDI metrics."""
    name: str
    capital: str
    region: str
    flag: str
    timezones: Tuple[str, ...]
    # primary timezone, used for current_time
    timezone: str
    current_time: str
    population: str
    area: float
    languages: Tuple[str, ...]
    currency: str
    calling_code: str
    driving_side: str
    borders: Tuple[str, ...]
    hdi: DevelopmentMetrics = EMPTY_METRICS

    def to_dict(self) -> Dict[str, Any]:
        """Public JSON shape (primary timezone and current time are internal)."""
        return {
            "name": self.name,
            "capital": self.capital,
            "region": self.region,
            "flag": self.flag,
            "timezones": list(self.timezones),
            "population": self.population,
            "area": self.area,
            "languages": list(self.languages),
            "currency": self.currency,
            "callingCode": self.calling_code,
            "drivingSide": self.driving_side,
            "borders": list(self.borders),
            "hdi": self.hdi.to_dict(),
        }

@dataclass(frozen=True)
class Listing:
    """A country as shown in one response, with its favorite flag."""
    country: Country
    is_favorite: bool

@dataclass(frozen=True)
class QueryCriteria:
    """Everything a directory query can ask for."""
    query: str = ""
    region: str = ""
    timezone: str = ""
    time_range: str = ""
    page: int = 1
