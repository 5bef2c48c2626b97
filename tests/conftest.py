from __future__ import annotations

from datetime import datetime, timezone

import pytest

from atlas.models import Country, DevelopmentMetrics, EMPTY_METRICS


SAMPLE_HDI = """Table 1. Human Development Index and its components,,,,,,,,,
HDI rank,Country,Human Development Index (HDI) ,,Life expectancy at birth,,Expected years of schooling,,Gross national income (GNI) per capita,
,,Value,,(years),,(years),,(2017 PPP $),
VERY HIGH HUMAN DEVELOPMENT,,,,,,,,,
1,Switzerland,0.967,,84.3,,16.6,,"69,433",
2,Norway,0.966,,83.4,,18.8,,"69,190",
HIGH HUMAN DEVELOPMENT,,,,,,,,,
70,Testland,0.790,,75.3,,13.2,,"15,678",

MEDIUM HUMAN DEVELOPMENT,,,,,,,,,
120,Midland,0.650,a,70.1,b,12.0,,"7,500",
LOW HUMAN DEVELOPMENT,,,,,,,,,
190,Lowland,0.420,,60.0,,9.5,,"1,200",
Other countries or territories,,,,,,,,,
"""


@pytest.fixture
def now():
    """Frozen clock: 10:00 UTC."""
    return datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_hdi_text():
    return SAMPLE_HDI


@pytest.fixture
def raw_record():
    """Factory for catalog records shaped like the REST endpoint's."""
    def _make(name="France", **overrides):
        rec = {
            "name": {"common": name, "official": f"Republic of {name}"},
            "capital": ["Paris"],
            "region": "Europe",
            "flag": "\U0001F1EB\U0001F1F7",
            "timezones": ["UTC+01:00", "UTC-10:00"],
            "population": 67391582,
            "area": 551695.0,
            "languages": {"fra": "French"},
            "currencies": {"EUR": {"name": "Euro", "symbol": "€"}},
            "idd": {"root": "+3", "suffixes": ["3"]},
            "car": {"side": "right"},
            "borders": ["AND", "BEL", "DEU"],
        }
        rec.update(overrides)
        return rec
    return _make


@pytest.fixture
def make_country():
    """Factory for normalized countries with only the fields a test cares about."""
    def _make(name, region="Europe", capital="", timezones=("UTC",), current_time="12:00",
              hdi: DevelopmentMetrics = EMPTY_METRICS):
        timezones = tuple(timezones)
        return Country(
            name=name,
            capital=capital,
            region=region,
            flag="",
            timezones=timezones,
            timezone=timezones[0] if timezones else "UTC",
            current_time=current_time,
            population="0",
            area=0.0,
            languages=(),
            currency="",
            calling_code="",
            driving_side="Right",
            borders=(),
            hdi=hdi,
        )
    return _make


@pytest.fixture
def many_countries(make_country):
    """Factory: n countries named Country 01, Country 02, ..."""
    def _make(n, **kwargs):
        return [make_country(f"Country {i:02d}", **kwargs) for i in range(1, n + 1)]
    return _make
