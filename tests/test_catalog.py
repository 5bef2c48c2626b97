from datetime import timedelta

import pytest

from atlas.catalog import (
    calling_code,
    current_time_for,
    format_population,
    normalize_catalog,
    normalize_record,
    parse_utc_offset,
    pick_currency,
)
from atlas.models import DevelopmentMetrics, EMPTY_METRICS


FRANCE_HDI = DevelopmentMetrics(rank=28, value=0.91, category="VERY HIGH HUMAN DEVELOPMENT",
                                life_expectancy=82.6, school_years=15.8, gni_per_capita="47,173")


@pytest.mark.parametrize("n, expected", [
    (0, "0"),
    (999, "999"),
    (1000, "1,000"),
    (1234567, "1,234,567"),
    (-999, "-999"),
    (-1234567, "-1,234,567"),
])
def test_format_population(n, expected):
    assert format_population(n) == expected


@pytest.mark.parametrize("tz, expected", [
    ("UTC", "10:00"),
    ("UTC+05:30", "15:30"),
    ("UTC-03:30", "07:30"),
    ("UTC-00:30", "10:30"),
    ("UTC+01", "11:00"),
    ("UTC-10:00", "00:00"),
    ("UTC+14:00", "00:00"),
    ("UTC+13:45", "23:45"),
    ("UTC+abc", "10:00"),
    ("Mars/Olympus", "10:00"),
])
def test_current_time_for(tz, expected, now):
    assert current_time_for(tz, now) == expected


def test_parse_utc_offset_signed_hours_unsigned_minutes():
    assert parse_utc_offset("UTC") == timedelta(0)
    assert parse_utc_offset("UTC+05:45") == timedelta(hours=5, minutes=45)
    assert parse_utc_offset("UTC-09:30") == timedelta(hours=-9, minutes=30)
    assert parse_utc_offset("UTC-09:30") == -timedelta(hours=8, minutes=30)
    assert parse_utc_offset("UTC?") is None


def test_normalize_record_fields(raw_record, now):
    c = normalize_record(raw_record(), {"France": FRANCE_HDI}, now)
    assert c.name == "France"
    assert c.capital == "Paris"
    assert c.region == "Europe"
    assert c.timezones == ("UTC+01:00", "UTC-10:00")
    assert c.timezone == "UTC+01:00"
    assert c.current_time == "11:00"
    assert c.population == "67,391,582"
    assert c.area == 551695.0
    assert set(c.languages) == {"French"}
    assert c.currency == "Euro"
    assert c.calling_code == "+33"
    assert c.driving_side == "Right"
    assert c.borders == ("AND", "BEL", "DEU")
    assert c.hdi == FRANCE_HDI


def test_missing_capital_and_timezones(raw_record, now):
    c = normalize_record(raw_record(capital=[], timezones=[]), {}, now)
    assert c.capital == ""
    assert c.timezones == ()
    assert c.timezone == "UTC"
    assert c.current_time == "10:00"


def test_languages_are_all_values(raw_record, now):
    c = normalize_record(raw_record(languages={"deu": "German", "fra": "French", "ita": "Italian"}), {}, now)
    assert sorted(c.languages) == ["French", "German", "Italian"]


def test_calling_code_variants():
    assert calling_code({"root": "+1", "suffixes": ["242", "246"]}) == "+1242"
    assert calling_code({"root": "+7", "suffixes": []}) == "+7"
    assert calling_code({"root": "+7"}) == "+7"
    assert calling_code({"suffixes": ["1"]}) == ""
    assert calling_code({}) == ""
    assert calling_code(None) == ""


def test_currency_skips_entries_without_name():
    assert pick_currency({"XXX": {"symbol": "?"}, "CHF": {"name": "Swiss franc"}}) == "Swiss franc"
    assert pick_currency({"XXX": "oops"}) == ""
    assert pick_currency({}) == ""
    assert pick_currency(None) == ""


def test_drive_side_is_title_cased(raw_record, now):
    assert normalize_record(raw_record(car={"side": "left"}), {}, now).driving_side == "Left"
    assert normalize_record(raw_record(car={}), {}, now).driving_side == ""


def test_unmatched_name_gets_empty_metrics(raw_record, now):
    c = normalize_record(raw_record(), {"france": FRANCE_HDI}, now)
    assert c.hdi is EMPTY_METRICS
    assert c.hdi.rank == 0


def test_malformed_subfields_degrade(raw_record, now):
    c = normalize_record(raw_record(
        capital="Paris",
        population="many",
        area=-12.5,
        languages=["French"],
        currencies=None,
        idd="+33",
        car=None,
        borders=None,
        timezones="UTC+01:00",
    ), {}, now)
    assert c.capital == ""
    assert c.population == "0"
    assert c.area == 0.0
    assert c.languages == ()
    assert c.currency == ""
    assert c.calling_code == ""
    assert c.driving_side == ""
    assert c.borders == ()
    assert c.timezone == "UTC"


def test_join_completeness(raw_record, now):
    hdi = {"France": FRANCE_HDI, "Norway": DevelopmentMetrics(rank=2, value=0.966)}
    records = [raw_record("France"), raw_record("Norway"), raw_record("Atlantis")]
    countries = normalize_catalog(records, hdi, now=now)
    assert len(countries) == 3
    for c in countries:
        assert c.hdi is not None
        assert (c.hdi.rank == 0) == (c.name not in hdi)


def test_non_mapping_records_are_skipped(raw_record, now):
    countries = normalize_catalog([raw_record(), "junk", None, raw_record("Spain")], {}, now=now)
    assert [c.name for c in countries] == ["France", "Spain"]


def test_missing_name_gives_empty_name(raw_record, now):
    c = normalize_record(raw_record(name=None), {}, now)
    assert c.name == ""
