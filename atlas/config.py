"""
Configuration
=============

Settings come from environment variables (a local `.env` file is merged in
first). CLI flags override them.

    ATLAS_CATALOG_URL     REST endpoint of the country catalog
    ATLAS_CATALOG_FILE    load the catalog from this JSON file instead (offline)
    ATLAS_HDI_PATH        HDI table (.csv or .xlsx)
    ATLAS_FAVORITES_PATH  favorites JSON file
    ATLAS_HTTP_TIMEOUT    catalog request timeout, seconds
    ATLAS_LOG_LEVEL       logging level name
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = (
    "https://restcountries.com/v3.1/all"
    "?fields=name,capital,region,flag,timezones,population,area,languages,currencies,idd,car,borders"
)
DEFAULT_HDI_PATH = "HDR23-24_Statistical_Annex_HDI_Table - HDI.csv"
DEFAULT_FAVORITES_PATH = "favorites.json"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    catalog_url: str = DEFAULT_CATALOG_URL
    catalog_file: Optional[str] = None
    hdi_path: str = DEFAULT_HDI_PATH
    favorites_path: str = DEFAULT_FAVORITES_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL


def _get_env(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = env.get(name, default)
    if value is None or value == "":
        return default
    return value


def _timeout(raw: Optional[str]) -> float:
    if raw is None:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring ATLAS_HTTP_TIMEOUT=%r (not a number)", raw)
        return DEFAULT_HTTP_TIMEOUT
    if value <= 0:
        logger.warning("Ignoring ATLAS_HTTP_TIMEOUT=%r (must be positive)", raw)
        return DEFAULT_HTTP_TIMEOUT
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from `env` (default: the process environment plus `.env`)."""
    if env is None:
        load_dotenv()
        env = os.environ

    return Settings(
        catalog_url=_get_env(env, "ATLAS_CATALOG_URL", DEFAULT_CATALOG_URL),
        catalog_file=_get_env(env, "ATLAS_CATALOG_FILE"),
        hdi_path=_get_env(env, "ATLAS_HDI_PATH", DEFAULT_HDI_PATH),
        favorites_path=_get_env(env, "ATLAS_FAVORITES_PATH", DEFAULT_FAVORITES_PATH),
        http_timeout=_timeout(_get_env(env, "ATLAS_HTTP_TIMEOUT")),
        log_level=(_get_env(env, "ATLAS_LOG_LEVEL", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper(),
    )
