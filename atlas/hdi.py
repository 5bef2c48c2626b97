"""
HDI table parser (text rows -> DevelopmentMetrics by country name)
=================================================================

The HDI statistical annex is exported as a loosely formatted CSV: title and
footnote lines, category header lines ("VERY HIGH HUMAN DEVELOPMENT", ...)
and ranked country rows whose values alternate with footnote columns:

    rank, name, hdi, _, life expectancy, _, school years, _, GNI per capita, ...

Parsing is a fold over the rows. The accumulator carries the current category
(taken from the most recent header line) and the mapping built so far; the
step function never touches anything outside the accumulator.

Nothing in here raises: malformed rows are skipped (or their optional values
zeroed) and logged, and an empty source gives an empty mapping.
"""

from __future__ import annotations
import csv
import logging
from functools import reduce
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence
from .models import DevelopmentMetrics

logger = logging.getLogger(__name__)

CATEGORY_MARKERS = (
    "VERY HIGH HUMAN DEVELOPMENT",
    "HIGH HUMAN DEVELOPMENT",
    "MEDIUM HUMAN DEVELOPMENT",
    "LOW HUMAN DEVELOPMENT",
)

# column positions in a country row
RANK, NAME, VALUE, LIFE_EXPECTANCY, SCHOOL_YEARS, GNI = 0, 1, 2, 4, 6, 8

class _ParseState(NamedTuple):
    category: str
    table: Dict[str, DevelopmentMetrics]

def _clean(field: object) -> str:
    return str(field).strip().strip('"').strip()

def _field(fields: Sequence[str], i: int) -> str:
    return fields[i] if i < len(fields) else ""

def _to_int(s: str) -> Optional[int]:
    try: return int(s)
    except ValueError: return None

def _to_float(s: str) -> Optional[float]:
    try: return float(s)
    except ValueError: return None

def _category_of(first: str) -> Optional[str]:
    for marker in CATEGORY_MARKERS:
        if marker in first:
            return first
    return None

def _step(state: _ParseState, raw_fields: Sequence[object]) -> _ParseState:
    """Consume one row and return the next accumulator."""
    fields = [_clean(f) for f in raw_fields]
    if not any(fields):
        return state

    category = _category_of(fields[0])
    if category is not None:
        logger.debug("Found category: %s", category)
        return _ParseState(category, state.table)

    rank = _to_int(fields[0])
    if rank is None:
        return state  # title, footnote or separator line

    name = _field(fields, NAME)
    if not name:
        return state

    value = _to_float(_field(fields, VALUE))
    if value is None:
        logger.warning("Could not parse HDI value for %s: %r", name, _field(fields, VALUE))
        return state

    metrics = DevelopmentMetrics(
        rank=rank,
        value=value,
        category=state.category,
        life_expectancy=_to_float(_field(fields, LIFE_EXPECTANCY)) or 0.0,
        school_years=_to_float(_field(fields, SCHOOL_YEARS)) or 0.0,
        gni_per_capita=_field(fields, GNI),
    )
    logger.debug("Parsed HDI row for %s (rank %d, value %.3f)", name, rank, value)
    # last occurrence of a name wins
    return _ParseState(state.category, {**state.table, name: metrics})

def split_lines(text: str) -> List[List[str]]:
    """Split raw text into field lists (quote aware, blank lines dropped)."""
    rows: List[List[str]] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        # one reader per line: a stray quote must not swallow the next row
        rows.append(next(csv.reader([line], skipinitialspace=True)))
    return rows

def parse_hdi_rows(rows: Iterable[Sequence[object]]) -> Dict[str, DevelopmentMetrics]:
    """Fold already split rows into a name -> DevelopmentMetrics mapping."""
    final = reduce(_step, rows, _ParseState("", {}))
    logger.info("Parsed HDI data for %d countries", len(final.table))
    return final.table

def parse_hdi_text(text: Optional[str]) -> Dict[str, DevelopmentMetrics]:
    """Parse the HDI CSV text. Empty or missing text gives an empty mapping."""
    if not text:
        return {}
    return parse_hdi_rows(split_lines(text))
