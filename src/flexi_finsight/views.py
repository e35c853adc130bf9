# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Flexi FinSight.

The engine publishes statements as lists of per-period dicts (the document
format stored for the dashboard). This module pivots them into pandas
DataFrames with one row per statement line and one column per period, which
is what the CLI prints and exports.

Views:

- summary:  roll-up totals only,
- detailed: every category line followed by the totals.
"""

from collections.abc import Sequence

import pandas as pd

from .rollups import BALANCE_SHEET_ROLLUPS, INCOME_STATEMENT_TOTALS

VIEW_LEVELS = ("summary", "detailed")

BALANCE_SHEET_TOTALS = tuple(rule.key for rule in BALANCE_SHEET_ROLLUPS)
TOTAL_KEYS = frozenset(INCOME_STATEMENT_TOTALS) | frozenset(BALANCE_SHEET_TOTALS)


def _line_order(keys: Sequence[str]) -> list[str]:
    """Category lines first (alphabetical), then totals in declaration order."""
    categories = sorted(k for k in keys if k not in TOTAL_KEYS)
    totals = [
        k
        for k in list(INCOME_STATEMENT_TOTALS) + list(BALANCE_SHEET_TOTALS)
        if k in keys
    ]
    return categories + totals


def statement_frame(periods: Sequence[dict], view: str = "detailed") -> pd.DataFrame:
    """Pivot a monthly series into a line-by-period DataFrame.

    Args:
        periods: Output of the engine (each dict has a ``month`` key).
        view: 'summary' or 'detailed'.

    Returns:
        DataFrame indexed by line key with one column per period index
        (0..12 for balance sheets, 1..12 for income statements).

    Raises:
        ValueError: on an unknown view.
    """
    if view not in VIEW_LEVELS:
        raise ValueError(
            f"Unknown view {view!r}. Expected one of: {', '.join(VIEW_LEVELS)}."
        )
    if not periods:
        return pd.DataFrame()

    df = pd.DataFrame(list(periods)).set_index("month").T
    df.index.name = "line"
    df.columns.name = "month"

    order = _line_order(list(df.index))
    if view == "summary":
        order = [k for k in order if k in TOTAL_KEYS]
    return df.loc[order]


def cash_flow_frame(summary: dict) -> pd.DataFrame:
    """Two-column (line, amount) frame for a cash flow summary dict."""
    rows = [
        {"line": key, "amount": value}
        for key, value in summary.items()
        if key not in ("first_month", "last_month")
    ]
    return pd.DataFrame(rows, columns=["line", "amount"])
