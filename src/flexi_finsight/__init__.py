# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Flexi FinSight
--------------

Financial reporting core for companies keeping their books in AbraFlexi.
The project pulls each company's yearly trial balance ("stav účtu") and
derives standardized monthly Income Statement and Balance Sheet time series
for a multi-tenant dashboard.

Main capabilities:
- account classification by chart-of-accounts prefix (Slovak chart built in,
  custom charts from CSV),
- income statement aggregation over 12 months, with year-to-date series,
- balance sheet aggregation over 13 snapshots (opening + month-ends), with
  dual-sign accounts and contra-asset corrections,
- explicit roll-up totals and a shared rounding convention,
- indirect cash flow summary,
- AbraFlexi REST client, SQLite document storage and a sync pipeline,
- a command-line interface.

The engine (classification, engine, rollups) is pure and stateless; I/O
lives in abraflexi.py, storage.py and sync.py.

Usage:
    python -m flexi_finsight.cli --help
"""

__all__ = ["classification", "engine", "rollups", "rows", "views"]

__version__ = "0.1.0"
