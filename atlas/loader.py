"""
Dataset loader (HDI table + country catalog -> Directory)
========================================================

Startup runs one pipeline:

1) favorites file -> FavoritesStore        (missing file is fine, broken file is fatal)
2) HDI table      -> {name: metrics}       (best effort, never blocks the load)
3) catalog        -> raw records           (HTTP or a local JSON snapshot; failure is fatal)
4) normalize + join by name -> Directory

Key ideas:
- The HDI table is usually the CSV export of the statistical annex, but the
  original .xlsx works too; both feed the same row parser in `hdi.py`.
- Conversion helpers (_cell_to_str) keep spreadsheet blanks and numbers sane.
- Nothing here edits the source files.
"""

from __future__ import annotations
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import pandas as pd
import requests
from .catalog import normalize_catalog
from .config import Settings
from .directory import Directory
from .errors import CatalogError
from .favorites import FavoritesStore
from .hdi import parse_hdi_rows, parse_hdi_text
from .models import DevelopmentMetrics

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "atlas-directory",
}

EXCEL_SUFFIXES = (".xlsx", ".xlsm")

def _cell_to_str(x) -> str:
    """Spreadsheet cell -> text as it would appear in the CSV export."""
    if pd.isna(x): return ""
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    return str(x).strip()

# ---------------- HDI ----------------
def read_hdi_excel(path: Path) -> Dict[str, DevelopmentMetrics]:
    df = pd.read_excel(path, header=None, engine="openpyxl")
    rows = [[_cell_to_str(v) for v in row] for row in df.itertuples(index=False, name=None)]
    return parse_hdi_rows(rows)

def read_hdi_source(path: Optional[str]) -> Dict[str, DevelopmentMetrics]:
    """Read and parse the HDI table. Any failure gives an empty mapping."""
    if not path:
        logger.warning("No HDI source configured; HDI data will be empty")
        return {}
    p = Path(path)
    try:
        if p.suffix.lower() in EXCEL_SUFFIXES:
            table = read_hdi_excel(p)
        else:
            table = parse_hdi_text(p.read_text(encoding="utf-8-sig", errors="replace"))
    except Exception as e:
        # HDI enrichment never blocks the load (missing file, broken workbook, ...)
        logger.warning("Could not load HDI data from %s: %s", p, e)
        return {}
    if not table:
        logger.warning("HDI source %s yielded no rows", p)
    return table

# ---------------- Catalog ----------------
def _check_records(payload: Any, source: str) -> List[Any]:
    if not isinstance(payload, list):
        raise CatalogError(source, f"expected a JSON list of countries, got {type(payload).__name__}")
    return payload

def fetch_catalog(url: str, timeout: float = 30.0) -> List[Any]:
    """Download the raw country catalog. Raises CatalogError on any failure."""
    logger.info("Fetching country catalog from %s", url)
    try:
        resp = requests.get(url, headers=REQUEST_HEADERS, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as e:
        raise CatalogError(url, f"request failed: {e}") from e
    except ValueError as e:
        raise CatalogError(url, f"response is not valid JSON: {e}") from e
    return _check_records(payload, url)

def load_catalog_file(path: str) -> List[Any]:
    """Read a catalog snapshot saved from the REST endpoint."""
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(str(p), f"cannot read catalog file: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(str(p), f"invalid JSON: {e}") from e
    return _check_records(payload, str(p))

# ---------------- Pipeline ----------------
def load_directory(settings: Settings, now: Optional[datetime] = None) -> Directory:
    """Run the startup pipeline and return a ready Directory."""
    # an empty favorites path keeps favorites in memory only
    favorites = FavoritesStore.load(settings.favorites_path) if settings.favorites_path else FavoritesStore()
    hdi = read_hdi_source(settings.hdi_path)
    if settings.catalog_file:
        raw = load_catalog_file(settings.catalog_file)
    else:
        raw = fetch_catalog(settings.catalog_url, timeout=settings.http_timeout)
    countries = normalize_catalog(raw, hdi, now=now)
    logger.info("Directory ready: %d countries, %d favorites", len(countries), len(favorites))
    return Directory(countries=countries, favorites=favorites)
