from __future__ import annotations

"""
ATLAS report generator
----------------------
This module generates a DOCX report from a list of Country objects (a query
result or the whole catalog).

Design goals:
- Keep ATLAS usable even if report dependencies are missing (lazy imports).
- Choose charts that match the result set.
  Example: if the set covers a single region, a "countries per region" chart
  says nothing, so the HDI category chart is shown on its own.
- Summaries per region are built with pandas (groupby), charts with matplotlib.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import os
import tempfile
from collections import Counter

import pandas as pd

from .models import Country


# -----------------------------
# Configuration
# -----------------------------

@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "ATLAS Country Report"
    subtitle: str = "Country directory with Human Development Index data"
    dataset_name: str = "REST Countries catalog + HDR statistical annex (HDI table)"

    # How many rows to show in the ranking / preview tables
    top_n: int = 10
    max_rows_preview: int = 15

    # Optional: the query that produced the result set, e.g. "q=an region=Europe"
    query_text: Optional[str] = None


# -----------------------------
# Tabular summaries
# -----------------------------

def countries_frame(countries: Sequence[Country]) -> pd.DataFrame:
    """One row per country with the numeric HDI columns (unmatched HDI -> NaN)."""
    rows = []
    for c in countries:
        matched = not c.hdi.is_empty
        rows.append({
            "name": c.name,
            "region": c.region or "(none)",
            "area": c.area,
            "hdi_rank": c.hdi.rank if matched else None,
            "hdi_value": c.hdi.value if matched else None,
            "hdi_category": c.hdi.category if matched else None,
            "life_expectancy": c.hdi.life_expectancy if matched else None,
        })
    df = pd.DataFrame(rows, columns=["name", "region", "area", "hdi_rank", "hdi_value",
                                     "hdi_category", "life_expectancy"])
    for col in ("hdi_rank", "hdi_value", "life_expectancy"):
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def region_summary(countries: Sequence[Country]) -> pd.DataFrame:
    """Countries, HDI coverage and mean HDI per region, sorted by region."""
    df = countries_frame(countries)
    if df.empty:
        return pd.DataFrame(columns=["region", "countries", "with_hdi", "mean_hdi"])
    out = (
        df.groupby("region")
        .agg(countries=("name", "count"), with_hdi=("hdi_value", "count"), mean_hdi=("hdi_value", "mean"))
        .reset_index()
        .sort_values("region")
    )
    return out


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    countries: Sequence[Country],
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    scope_label: str = "Current Result Set",
) -> str:
    """
    Generate a DOCX report + charts for a list of countries.

    The report is built from the in-memory collection; no source file is read
    or modified.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when "report" is used.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install with: python -m pip install matplotlib"
        ) from e

    if not countries:
        raise ValueError("No countries to report on (result set is empty).")

    # -----------------------------
    # 1) Stats
    # -----------------------------
    df = countries_frame(countries)
    summary = region_summary(countries)
    hdi_values = [float(v) for v in df["hdi_value"].dropna()]
    c_region = Counter(c.region or "(none)" for c in countries)
    c_category = Counter(c.hdi.category for c in countries if not c.hdi.is_empty and c.hdi.category)

    # -----------------------------
    # 2) Charts
    # -----------------------------
    tmpdir = tempfile.mkdtemp(prefix="atlas_report_")
    # Each chart is: (title, file_path)
    chart_paths: List[Tuple[str, str]] = []

    def _save(filename: str) -> str:
        path = os.path.join(tmpdir, filename)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close()
        return path

    def _bar(title: str, labels: List[str], values: List[int], filename: str) -> None:
        plt.figure()
        plt.bar(labels, values)
        plt.xticks(rotation=45, ha="right")
        plt.title(title)
        plt.ylabel("Countries")
        chart_paths.append((title, _save(filename)))

    if len(c_region) > 1:
        regions = sorted(c_region)
        _bar(f"Countries per Region ({scope_label})", regions, [c_region[r] for r in regions], "bar_regions.png")

    if c_category:
        cats = sorted(c_category, key=lambda k: -c_category[k])
        _bar(f"Countries per HDI Category ({scope_label})", cats, [c_category[k] for k in cats], "bar_categories.png")

    if len(hdi_values) >= 2:
        plt.figure()
        plt.hist(hdi_values, bins=min(20, len(hdi_values)), range=(0.0, 1.0), edgecolor="black", linewidth=0.8)
        plt.title(f"Distribution of HDI values ({scope_label})")
        plt.xlabel("HDI value")
        plt.ylabel("Countries")
        chart_paths.append((f"Distribution of HDI values ({scope_label})", _save("hist_hdi.png")))

    # -----------------------------
    # 3) Build DOCX report
    # -----------------------------
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    _kv("Scope", scope_label)
    if config.query_text:
        _kv("Query", config.query_text)
    _kv("Countries in scope", str(len(countries)))
    _kv("Countries with HDI data", f"{len(hdi_values)} of {len(countries)}")

    # Region breakdown
    doc.add_paragraph("")
    doc.add_heading("Regions", level=1)
    t = doc.add_table(rows=1, cols=4)
    h = t.rows[0].cells
    h[0].text = "Region"
    h[1].text = "Countries"
    h[2].text = "With HDI"
    h[3].text = "Mean HDI"
    for row in summary.itertuples(index=False):
        cells = t.add_row().cells
        cells[0].text = str(row.region)
        cells[1].text = str(int(row.countries))
        cells[2].text = str(int(row.with_hdi))
        cells[3].text = "" if pd.isna(row.mean_hdi) else f"{row.mean_hdi:.3f}"

    # Visualizations
    if chart_paths:
        doc.add_paragraph("")
        doc.add_heading("Visualizations", level=1)
        for title, path in chart_paths:
            doc.add_paragraph(title)
            doc.add_picture(path, width=Inches(6.0))
            doc.add_paragraph("")

    # Ranking by HDI
    ranked = sorted((c for c in countries if not c.hdi.is_empty), key=lambda c: c.hdi.rank)[:config.top_n]
    if ranked:
        doc.add_heading(f"Top {config.top_n} by HDI rank (within scope)", level=1)
        t2 = doc.add_table(rows=1, cols=6)
        h = t2.rows[0].cells
        h[0].text = "Rank"
        h[1].text = "Country"
        h[2].text = "HDI"
        h[3].text = "Life exp."
        h[4].text = "School years"
        h[5].text = "GNI per capita"
        for c in ranked:
            r = t2.add_row().cells
            r[0].text = str(c.hdi.rank)
            r[1].text = c.name
            r[2].text = f"{c.hdi.value:.3f}"
            r[3].text = f"{c.hdi.life_expectancy:.1f}"
            r[4].text = f"{c.hdi.school_years:.1f}"
            r[5].text = c.hdi.gni_per_capita

    # A small preview table (first N records)
    doc.add_paragraph("")
    doc.add_heading("Preview of first few countries", level=1)
    t3 = doc.add_table(rows=1, cols=5)
    h = t3.rows[0].cells
    h[0].text = "Country"
    h[1].text = "Capital"
    h[2].text = "Region"
    h[3].text = "Population"
    h[4].text = "Currency"
    for c in list(countries)[:config.max_rows_preview]:
        r = t3.add_row().cells
        r[0].text = c.name
        r[1].text = c.capital
        r[2].text = c.region
        r[3].text = c.population
        r[4].text = c.currency

    # Reproducibility footer
    doc.add_paragraph("")
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as atlas_version
    from datetime import datetime as _dt
    doc.add_paragraph(f"ATLAS version: {atlas_version}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
    doc.add_paragraph("Countries without an exact name match in the HDI table are reported without HDI values.")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
