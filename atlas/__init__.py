"""
ATLAS package
=============

This package contains the country directory engine (ATLAS): world countries
joined with Human Development Index (HDI) rankings, answered through filters,
free-text search and pagination.

- The CLI entry point is in `atlas/cli.py`.
- The query engine (filter, search, paginate, facets) is in `atlas/engine.py`.
- The directory service and its outcome policy are in `atlas/directory.py`.
- Dataset loading is in `atlas/loader.py` (HDI parsing in `atlas/hdi.py`,
  catalog normalization in `atlas/catalog.py`).
"""

__version__ = '0.3.0'
