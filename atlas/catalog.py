"""
Catalog normalizer (raw catalog records -> Country list)
=======================================================

The REST catalog returns one loosely typed dict per country: a localized name
object, a capital list, a currency map, dialing code parts, a drive-side
string and so on. This module turns each of them into a `Country` and joins
in the HDI metrics by exact (case-sensitive) common name.

Key ideas:
- A malformed sub-field degrades to an empty/default value; it never drops
  the whole record (only a record that is not a mapping at all is skipped).
- `current_time` is computed once, at load time, from the primary timezone.
- Pass `now` to make the time computation deterministic (tests do).
"""

from __future__ import annotations
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
from .models import Country, DevelopmentMetrics, EMPTY_METRICS

logger = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r"^\s*([+-]?)(\d{1,2})(?::(\d{1,2}))?")

def _to_str(x: Any) -> str:
    if x is None: return ""
    return x if isinstance(x, str) else str(x)

def _to_int(x: Any) -> int:
    if isinstance(x, bool): return 0
    try: return int(x)
    except (TypeError, ValueError): return 0

def _to_float(x: Any) -> float:
    if isinstance(x, bool): return 0.0
    try: return float(x)
    except (TypeError, ValueError): return 0.0

def _str_list(x: Any) -> Tuple[str, ...]:
    if not isinstance(x, (list, tuple)):
        return ()
    return tuple(v for v in x if isinstance(v, str))

def _mapping(x: Any) -> Mapping[str, Any]:
    return x if isinstance(x, Mapping) else {}

# ---------------- Field rules ----------------
def first_or(values: Tuple[str, ...], default: str) -> str:
    return values[0] if values else default

def format_population(n: int) -> str:
    """1234567 -> '1,234,567' (negative sign kept, no decimals)."""
    return f"{int(n):,}"

def parse_utc_offset(tz: str) -> Optional[timedelta]:
    """'UTC+05:30' -> +5h30m, 'UTC' -> 0, unparseable -> None.

    Hours are signed, minutes are not, and the two are added: 'UTC-03:30'
    is -3h +30m, i.e. -2h30m. The minutes part is optional ('UTC+01' is +1h).
    """
    rest = tz[3:] if tz.startswith("UTC") else tz
    if rest == "":
        return timedelta(0)
    m = _OFFSET_RE.match(rest)
    if not m:
        return None
    hours = int(m.group(1) + m.group(2))
    minutes = int(m.group(3) or 0)
    return timedelta(hours=hours, minutes=minutes)

def current_time_for(tz: str, now: Optional[datetime] = None) -> str:
    """Local wall-clock time 'HH:MM' for a 'UTC±HH:MM' timezone string."""
    now = now or datetime.now(timezone.utc)
    offset = parse_utc_offset(tz)
    if offset is None:
        logger.debug("Unparseable timezone %r, using UTC", tz)
        offset = timedelta(0)
    return (now + offset).strftime("%H:%M")

def pick_currency(currencies: Any) -> str:
    """Display name of the first currency entry (in source order) that has one."""
    for entry in _mapping(currencies).values():
        if isinstance(entry, Mapping) and isinstance(entry.get("name"), str):
            return entry["name"]
    return ""

def calling_code(idd: Any) -> str:
    idd = _mapping(idd)
    root = _to_str(idd.get("root"))
    if not root:
        return ""
    suffixes = _str_list(idd.get("suffixes"))
    return root + suffixes[0] if suffixes else root

# ---------------- Records ----------------
def normalize_record(raw: Mapping[str, Any], hdi: Mapping[str, DevelopmentMetrics], now: datetime) -> Country:
    """Convert one raw catalog record into a Country."""
    name = _to_str(_mapping(raw.get("name")).get("common"))
    timezones = _str_list(raw.get("timezones"))
    primary = first_or(timezones, "UTC")
    languages = tuple(v for v in _mapping(raw.get("languages")).values() if isinstance(v, str))

    metrics = hdi.get(name)
    if metrics is None:
        metrics = EMPTY_METRICS

    return Country(
        name=name,
        capital=first_or(_str_list(raw.get("capital")), ""),
        region=_to_str(raw.get("region")),
        flag=_to_str(raw.get("flag")),
        timezones=timezones,
        timezone=primary,
        current_time=current_time_for(primary, now),
        population=format_population(_to_int(raw.get("population"))),
        area=max(_to_float(raw.get("area")), 0.0),
        languages=languages,
        currency=pick_currency(raw.get("currencies")),
        calling_code=calling_code(raw.get("idd")),
        driving_side=_to_str(_mapping(raw.get("car")).get("side")).title(),
        borders=_str_list(raw.get("borders")),
        hdi=metrics,
    )

def normalize_catalog(
    records: Iterable[Any],
    hdi: Mapping[str, DevelopmentMetrics],
    now: Optional[datetime] = None,
) -> List[Country]:
    """Normalize every catalog record and join HDI metrics by name."""
    now = now or datetime.now(timezone.utc)
    countries: List[Country] = []
    for i, raw in enumerate(records):
        if not isinstance(raw, Mapping):
            logger.warning("Skipping catalog record #%d: not an object (%s)", i, type(raw).__name__)
            continue
        countries.append(normalize_record(raw, hdi, now))

    matched = sum(1 for c in countries if not c.hdi.is_empty)
    logger.info("Normalized %d countries (%d with HDI data)", len(countries), matched)
    unmatched: Dict[str, None] = {c.name: None for c in countries if c.hdi.is_empty}
    if unmatched:
        logger.debug("Countries without HDI data: %s", ", ".join(unmatched))
    return countries
