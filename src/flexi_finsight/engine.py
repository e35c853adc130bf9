# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core statement aggregation engine for Flexi FinSight.

This module turns a company's trial balance (one RawAccountRow per account)
into two monthly time series:

1. Income statement
   -----------------
   12 periods (month 1..12). For every Cost / Revenue account and month:

       revenue: amount = credit turnover - debit turnover
       cost:    amount = debit turnover - credit turnover

   The amount is added to the account's category. Each month then gets the
   roll-up totals revenue_total, costs_total, profit_before_tax and
   profit_after_tax (see rollups.py).

2. Balance sheet
   --------------
   13 snapshots (0 = opening balance, 1..12 = month-end balances). For every
   balance sheet account and snapshot:

       Asset:     +balance  into category
       Liability: -balance  into category (credit balances are negative in
                            the feed, so liabilities come out positive)
       DualSign:  balance > 0  → +balance into asset_category
                  balance <= 0 → -balance into liability_category

   Each snapshot then gets the balance sheet roll-up totals.

Every published number is rounded with ``amounts.round_amount``. Unclassified
accounts, closing accounts, rows in an unaccepted currency and malformed
amounts contribute nothing; the engine never raises because of a single bad
row and performs no cross-row validation (assets vs liabilities_and_equity
is left to the caller).

The engine is pure and keeps no state between calls: the same rows always
produce the same output, and concurrent calls with different rows are safe.

Supplementary series
--------------------
- income statement ``cumulative``: year-to-date running sums, month 1..12,
- balance sheet ``changes``: month-over-month deltas, month 1..12.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .amounts import round_amount
from .classification import (
    ClassificationTable,
    DualClassification,
    Nature,
    classify,
)
from .rollups import (
    BALANCE_SHEET_BASE_CATEGORIES,
    BALANCE_SHEET_ROLLUPS,
    apply_rollups,
    income_statement_rollups,
)
from .rows import MONTHS, RawAccountRow, parse_row

logger = logging.getLogger(__name__)

BALANCE_SNAPSHOTS = MONTHS + 1
CURRENT_RESULT_CATEGORY = "equity_current_result"
DEFAULT_CURRENCIES = ("EUR",)

Period = dict[str, float]


def _resolve_table(table: Optional[ClassificationTable]) -> ClassificationTable:
    if table is None:
        from .chart_sk import DEFAULT_TABLE

        return DEFAULT_TABLE
    return table


def _as_rows(rows: Optional[Iterable[Union[RawAccountRow, Mapping[str, Any]]]]):
    """Accept typed rows or raw AbraFlexi records (parsed on the fly)."""
    if rows is None:
        return []
    out: list[RawAccountRow] = []
    for row in rows:
        if isinstance(row, RawAccountRow):
            out.append(row)
        elif isinstance(row, Mapping):
            out.append(parse_row(row))
    return out


def _in_currency(
    rows: Iterable[RawAccountRow], currencies: Optional[Iterable[str]]
) -> list[RawAccountRow]:
    """Keep rows whose currency is accepted.

    A row without a currency tag is kept. ``currencies=None`` accepts all.
    """
    if currencies is None:
        return list(rows)
    accepted = {c.strip().upper() for c in currencies}
    out: list[RawAccountRow] = []
    for row in rows:
        if row.currency and row.currency.upper() not in accepted:
            logger.debug(
                "Skipping account %r: unrecognized currency %r",
                row.account,
                row.currency,
            )
            continue
        out.append(row)
    return out


def _finalize(index_key: str, index: int, values: Mapping[str, float]) -> Period:
    """Round every value and put the period index first."""
    period: Period = {index_key: index}
    for key, value in values.items():
        period[key] = round_amount(value)
    return period


# ---------------------------------------------------------------------------
# Income statement
# ---------------------------------------------------------------------------


def aggregate_income_statement(
    rows: Iterable[RawAccountRow],
    table: Optional[ClassificationTable] = None,
    currencies: Optional[Iterable[str]] = DEFAULT_CURRENCIES,
) -> list[Period]:
    """Aggregate Cost / Revenue turnovers into 12 monthly income statements.

    Rows in a currency outside ``currencies`` contribute nothing.

    Returns:
        A list of 12 dicts, ``month`` = 1..12, with one key per cost/revenue
        category known to the table plus revenue_total, costs_total,
        profit_before_tax and profit_after_tax. All values rounded.
    """
    table = _resolve_table(table)
    categories = table.categories([Nature.COST, Nature.REVENUE])
    buckets: list[dict[str, float]] = [
        {c: 0.0 for c in categories} for _ in range(MONTHS)
    ]

    for row in _in_currency(rows, currencies):
        c = classify(row.account, table)
        if c is None or isinstance(c, DualClassification):
            continue
        if c.nature is Nature.REVENUE:
            for i, m in enumerate(row.months):
                buckets[i][c.category] = buckets[i].get(c.category, 0.0) + (
                    m.credit - m.debit
                )
        elif c.nature is Nature.COST:
            for i, m in enumerate(row.months):
                buckets[i][c.category] = buckets[i].get(c.category, 0.0) + (
                    m.debit - m.credit
                )

    rules = income_statement_rollups(categories)
    return [
        _finalize("month", i + 1, apply_rollups(bucket, rules))
        for i, bucket in enumerate(buckets)
    ]


# ---------------------------------------------------------------------------
# Balance sheet
# ---------------------------------------------------------------------------


def _add_balance(
    snapshot: dict[str, float], classification, balance: float
) -> None:
    """Route one balance into a snapshot according to the account nature."""
    if isinstance(classification, DualClassification):
        if balance > 0:
            key = classification.asset_category
            snapshot[key] = snapshot.get(key, 0.0) + balance
        else:
            key = classification.liability_category
            snapshot[key] = snapshot.get(key, 0.0) - balance
    elif classification.nature is Nature.ASSET:
        key = classification.category
        snapshot[key] = snapshot.get(key, 0.0) + balance
    elif classification.nature is Nature.LIABILITY:
        key = classification.category
        snapshot[key] = snapshot.get(key, 0.0) - balance


def aggregate_balance_sheet(
    rows: Iterable[RawAccountRow],
    table: Optional[ClassificationTable] = None,
    current_result_in_equity: bool = False,
    currencies: Optional[Iterable[str]] = DEFAULT_CURRENCIES,
) -> list[Period]:
    """Aggregate account balances into 13 balance sheet snapshots.

    Args:
        rows: Typed trial balance rows.
        table: Classification table (defaults to the Slovak chart).
        current_result_in_equity: When True, the balances of cost and revenue
            accounts (the year's result not yet closed into equity) are
            subtracted into ``equity_current_result``. Off by default.
        currencies: Accepted currency codes; rows tagged with another
            currency contribute nothing. None accepts every currency.

    Returns:
        A list of 13 dicts, ``month`` = 0 (opening) .. 12, with every balance
        sheet category and roll-up total. All values rounded.
    """
    table = _resolve_table(table)
    categories = sorted(
        set(BALANCE_SHEET_BASE_CATEGORIES)
        | set(
            table.categories([Nature.ASSET, Nature.LIABILITY, Nature.DUAL_SIGN])
        )
    )
    snapshots: list[dict[str, float]] = [
        {c: 0.0 for c in categories} for _ in range(BALANCE_SNAPSHOTS)
    ]

    for row in _in_currency(rows, currencies):
        c = classify(row.account, table)
        if c is None:
            continue
        balances = [row.opening] + [m.balance for m in row.months]

        if isinstance(c, DualClassification) or c.nature in (
            Nature.ASSET,
            Nature.LIABILITY,
        ):
            for snapshot, balance in zip(snapshots, balances):
                _add_balance(snapshot, c, balance)
        elif current_result_in_equity and c.nature in (Nature.COST, Nature.REVENUE):
            for snapshot, balance in zip(snapshots, balances):
                snapshot[CURRENT_RESULT_CATEGORY] -= balance

    return [
        _finalize("month", i, apply_rollups(snapshot, BALANCE_SHEET_ROLLUPS))
        for i, snapshot in enumerate(snapshots)
    ]


# ---------------------------------------------------------------------------
# Derived series
# ---------------------------------------------------------------------------


def cumulate(monthly: list[Period]) -> list[Period]:
    """Year-to-date running sums of every field of a monthly series."""
    out: list[Period] = []
    running: dict[str, float] = {}
    for period in monthly:
        for key, value in period.items():
            if key == "month":
                continue
            running[key] = running.get(key, 0.0) + value
        out.append(_finalize("month", period["month"], running))
    return out


def month_over_month(snapshots: list[Period]) -> list[Period]:
    """Differences between consecutive snapshots (``month`` = later index)."""
    out: list[Period] = []
    for prev, curr in zip(snapshots, snapshots[1:]):
        delta = {
            key: value - prev.get(key, 0.0)
            for key, value in curr.items()
            if key != "month"
        }
        out.append(_finalize("month", curr["month"], delta))
    return out


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FinancialStatements:
    """Result of one aggregation run.

    Attributes:
        income_monthly: 12 monthly income statements.
        balance_monthly: 13 balance sheet snapshots (opening + month-ends).
        income_cumulative: 12 year-to-date income statements.
        balance_changes: 12 month-over-month balance sheet deltas.
    """

    income_monthly: list[Period]
    balance_monthly: list[Period]
    income_cumulative: list[Period] = field(default_factory=list)
    balance_changes: list[Period] = field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        """Output document consumed by storage and presentation layers."""
        return {
            "incomeStatement": {
                "monthly": self.income_monthly,
                "cumulative": self.income_cumulative,
            },
            "balanceSheet": {
                "monthly": self.balance_monthly,
                "changes": self.balance_changes,
            },
        }


def aggregate(
    rows: Optional[Iterable[Union[RawAccountRow, Mapping[str, Any]]]],
    table: Optional[ClassificationTable] = None,
    *,
    current_result_in_equity: bool = False,
    currencies: Optional[Iterable[str]] = DEFAULT_CURRENCIES,
) -> FinancialStatements:
    """Compute both statements from a full trial balance.

    ``rows`` may contain RawAccountRow objects or raw AbraFlexi records; None
    or an empty list gives zero-filled statements. Rows whose ``mena`` is set
    to a currency outside ``currencies`` are skipped.
    """
    typed = _in_currency(_as_rows(rows), currencies)
    table = _resolve_table(table)
    income = aggregate_income_statement(typed, table, currencies=None)
    balance = aggregate_balance_sheet(
        typed,
        table,
        current_result_in_equity=current_result_in_equity,
        currencies=None,
    )
    return FinancialStatements(
        income_monthly=income,
        balance_monthly=balance,
        income_cumulative=cumulate(income),
        balance_changes=month_over_month(balance),
    )
