"""
Request parameters (raw query -> QueryCriteria)
==============================================

A directory query arrives as a handful of named parameters:

    q=<search text>  region=<region>  timezone=<UTC±HH:MM>
    timerange=<night|morning|afternoon|evening>  page=<n>

They can come in three shapes:
- a mapping (what web frameworks hand over),
- a list of (name, value) pairs,
- a string, either URL style (`?q=fra&page=2`) or CLI style
  (`q=fra region="South America"`).

This module turns any of them into ordered pairs, spots unknown parameter
names, and builds the immutable `QueryCriteria`.
"""

from __future__ import annotations
import re
import shlex
from typing import Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlsplit
from .models import QueryCriteria

VALID_PARAMS = ("q", "region", "timezone", "timerange", "page")

Pairs = List[Tuple[str, str]]
Params = Union[str, Mapping[str, str], Iterable[Tuple[str, str]]]

_PAGE_RE = re.compile(r"^[+-]?\d+$")

class ParseError(ValueError):
    pass

def _looks_like_url(text: str) -> bool:
    if text.startswith("?") or "://" in text:
        return True
    # quoted or space separated text is CLI style even when a value holds '&'
    return "&" in text and not any(ch in text for ch in "\"' ")

def parse_query_string(text: str) -> Pairs:
    """Split a parameter string into ordered (name, value) pairs.

    URL style strings are decoded with `parse_qsl`; anything else is split
    like a shell command line, each token being `name=value`.
    """
    text = text.strip()
    if not text:
        return []
    if _looks_like_url(text):
        if "://" in text:
            text = urlsplit(text).query
        return parse_qsl(text.lstrip("?"), keep_blank_values=True)

    try:
        tokens = shlex.split(text)
    except ValueError as e:
        raise ParseError(f"Cannot split parameters: {e}") from e
    pairs: Pairs = []
    for tok in tokens:
        name, sep, value = tok.partition("=")
        if not sep or not name:
            raise ParseError(f"Expected name=value, got: {tok!r}")
        pairs.append((name, value))
    return pairs

def as_pairs(params: Optional[Params]) -> Pairs:
    if params is None:
        return []
    if isinstance(params, str):
        return parse_query_string(params)
    if isinstance(params, Mapping):
        return [(str(k), str(v)) for k, v in params.items()]
    return [(str(k), str(v)) for k, v in params]

def find_invalid(pairs: Pairs) -> Optional[str]:
    """First parameter name (in request order) that is not recognized."""
    for name, _ in pairs:
        if name not in VALID_PARAMS:
            return name
    return None

def parse_page(raw: str) -> int:
    """Page number as requested; missing, malformed or < 1 means page 1."""
    raw = raw or ""
    if not _PAGE_RE.match(raw):
        return 1
    return max(int(raw), 1)

def criteria_from_pairs(pairs: Pairs) -> QueryCriteria:
    """Build QueryCriteria; when a name repeats, its first value is used."""
    first = {}
    for name, value in pairs:
        first.setdefault(name, value)
    return QueryCriteria(
        query=first.get("q", ""),
        region=first.get("region", ""),
        timezone=first.get("timezone", ""),
        time_range=first.get("timerange", ""),
        page=parse_page(first.get("page", "")),
    )
