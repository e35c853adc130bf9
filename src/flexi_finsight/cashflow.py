# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Indirect cash flow summary derived from the aggregated statements.

The summary explains the change in financial assets between the opening
snapshot of the first selected month and the closing snapshot of the last
selected month:

    operating_cash_flow = profit + depreciation
                          + change_receivables + change_inventory
                          + change_payables
    investments         = -(change in net fixed assets)
    other               = net_change - operating_cash_flow - investments

Increases of receivables and inventory consume cash (negative), increases
of operating payables release cash (positive). Short-term bank loans are
financing, not operating payables, so they end up in ``other``.
"""

from dataclasses import asdict, dataclass
from typing import Any

from .amounts import round_amount
from .engine import FinancialStatements


@dataclass(frozen=True)
class CashFlowSummary:
    first_month: int
    last_month: int
    opening_cash: float
    closing_cash: float
    profit: float
    depreciation: float
    change_receivables: float
    change_inventory: float
    change_payables: float
    operating_cash_flow: float
    investments: float
    other: float
    net_change: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _operating_payables(snapshot: dict[str, float]) -> float:
    return snapshot.get("liabilities_short_term_total", 0.0) - snapshot.get(
        "liabilities_bank_loans_short_term", 0.0
    )


def _net_fixed_assets(snapshot: dict[str, float]) -> float:
    return snapshot.get("fixed_assets_total", 0.0) + snapshot.get(
        "corrections_total", 0.0
    )


def compute_cash_flow(
    statements: FinancialStatements, first_month: int = 1, last_month: int = 12
) -> CashFlowSummary:
    """Build the cash flow summary for months ``first_month..last_month``.

    Raises:
        ValueError: if the month range is outside 1..12 or reversed.
    """
    if not (1 <= first_month <= last_month <= 12):
        raise ValueError(
            f"Invalid month range {first_month}..{last_month}: expected "
            "1 <= first <= last <= 12."
        )

    start = statements.balance_monthly[first_month - 1]
    end = statements.balance_monthly[last_month]
    months = statements.income_monthly[first_month - 1 : last_month]

    profit = sum(m.get("profit_after_tax", 0.0) for m in months)
    depreciation = sum(m.get("costs_depreciation", 0.0) for m in months)

    change_receivables = -(
        end.get("receivables_total", 0.0) - start.get("receivables_total", 0.0)
    )
    change_inventory = -(
        end.get("inventory_total", 0.0) - start.get("inventory_total", 0.0)
    )
    change_payables = _operating_payables(end) - _operating_payables(start)
    operating = (
        profit + depreciation + change_receivables + change_inventory + change_payables
    )
    investments = -(_net_fixed_assets(end) - _net_fixed_assets(start)) - depreciation

    opening_cash = start.get("financial_assets_total", 0.0)
    closing_cash = end.get("financial_assets_total", 0.0)
    net_change = closing_cash - opening_cash

    return CashFlowSummary(
        first_month=first_month,
        last_month=last_month,
        opening_cash=round_amount(opening_cash),
        closing_cash=round_amount(closing_cash),
        profit=round_amount(profit),
        depreciation=round_amount(depreciation),
        change_receivables=round_amount(change_receivables),
        change_inventory=round_amount(change_inventory),
        change_payables=round_amount(change_payables),
        operating_cash_flow=round_amount(operating),
        investments=round_amount(investments),
        other=round_amount(net_change - operating - investments),
        net_change=round_amount(net_change),
    )
