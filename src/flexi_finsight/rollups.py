# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Roll-up totals for Flexi FinSight statements.

A roll-up rule derives a total line (e.g. ``current_assets_total``) from
other lines. Every component is declared with an explicit sign, so whether a
line adds to or reduces its parent is configuration rather than a naming
convention:

    RollupRule("corrections_total", (("corrections_depreciation_tangible", -1), ...))

Rules are evaluated in declaration order, so a rule may reference totals
declared before it. Components missing from the values count as 0.

Income statement rules are built per period from the category keys present
(``revenue_*`` and ``costs_*`` prefixes); balance sheet rules are static.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

INCOME_TAX_CATEGORY = "costs_income_tax"


@dataclass(frozen=True)
class RollupRule:
    """A derived line: ``key = sum(sign * values[source] for source, sign)``."""

    key: str
    components: tuple[tuple[str, int], ...]

    def evaluate(self, values: Mapping[str, float]) -> float:
        return sum(sign * values.get(source, 0.0) for source, sign in self.components)


def _plus(*keys: str) -> tuple[tuple[str, int], ...]:
    return tuple((k, 1) for k in keys)


def _minus(*keys: str) -> tuple[tuple[str, int], ...]:
    return tuple((k, -1) for k in keys)


FIXED_ASSET_CATEGORIES = (
    "fixed_assets_intangible",
    "fixed_assets_tangible_depreciated",
    "fixed_assets_tangible_non_depreciated",
    "fixed_assets_in_progress",
    "fixed_assets_advances",
    "fixed_assets_financial",
)
INVENTORY_CATEGORIES = (
    "inventory_material",
    "inventory_own_production",
    "inventory_goods",
    "inventory_advances",
)
RECEIVABLE_CATEGORIES = (
    "receivables_trade",
    "receivables_employees_social",
    "receivables_state_taxes",
    "receivables_state_subsidies",
    "receivables_partners",
    "receivables_other",
)
FINANCIAL_ASSET_CATEGORIES = (
    "financial_cash",
    "financial_bank",
    "financial_short_term_assets",
    "financial_transfers",
)
CORRECTION_CATEGORIES = (
    "corrections_depreciation_intangible",
    "corrections_depreciation_tangible",
    "corrections_impairment_fixed",
    "corrections_impairment_inventory",
    "corrections_impairment_financial_short_term",
    "corrections_impairment_receivables",
)
EQUITY_CATEGORIES = (
    "equity_capital",
    "equity_capital_funds",
    "equity_profit_funds",
    "equity_retained_earnings",
    "equity_current_result",
)
LONG_TERM_LIABILITY_CATEGORIES = (
    "liabilities_reserves",
    "liabilities_bank_loans_long_term",
    "liabilities_other_long_term",
    "liabilities_deferred_tax",
)
SHORT_TERM_LIABILITY_CATEGORIES = (
    "liabilities_trade",
    "liabilities_employees_social",
    "liabilities_state_taxes",
    "liabilities_state_subsidies",
    "liabilities_partners",
    "liabilities_other",
    "liabilities_bank_loans_short_term",
)

BALANCE_SHEET_ROLLUPS: tuple[RollupRule, ...] = (
    RollupRule("fixed_assets_total", _plus(*FIXED_ASSET_CATEGORIES)),
    RollupRule("inventory_total", _plus(*INVENTORY_CATEGORIES)),
    RollupRule("receivables_total", _plus(*RECEIVABLE_CATEGORIES)),
    RollupRule("financial_assets_total", _plus(*FINANCIAL_ASSET_CATEGORIES)),
    RollupRule(
        "current_assets_total",
        _plus(
            "inventory_total",
            "receivables_total",
            "financial_assets_total",
            "accruals_assets",
        ),
    ),
    # Correction lines hold positive magnitudes; the total reduces assets.
    RollupRule("corrections_total", _minus(*CORRECTION_CATEGORIES)),
    RollupRule(
        "assets",
        _plus("fixed_assets_total", "current_assets_total", "corrections_total"),
    ),
    RollupRule("equity_total", _plus(*EQUITY_CATEGORIES)),
    RollupRule("liabilities_long_term_total", _plus(*LONG_TERM_LIABILITY_CATEGORIES)),
    RollupRule(
        "liabilities_short_term_total", _plus(*SHORT_TERM_LIABILITY_CATEGORIES)
    ),
    RollupRule(
        "liabilities_total",
        _plus(
            "liabilities_long_term_total",
            "liabilities_short_term_total",
            "accruals_liabilities",
        ),
    ),
    RollupRule("liabilities_and_equity", _plus("equity_total", "liabilities_total")),
)

BALANCE_SHEET_BASE_CATEGORIES: tuple[str, ...] = (
    FIXED_ASSET_CATEGORIES
    + INVENTORY_CATEGORIES
    + RECEIVABLE_CATEGORIES
    + FINANCIAL_ASSET_CATEGORIES
    + ("accruals_assets",)
    + CORRECTION_CATEGORIES
    + EQUITY_CATEGORIES
    + LONG_TERM_LIABILITY_CATEGORIES
    + SHORT_TERM_LIABILITY_CATEGORIES
    + ("accruals_liabilities",)
)

INCOME_STATEMENT_TOTALS = (
    "revenue_total",
    "costs_total",
    "profit_before_tax",
    "profit_after_tax",
)


def income_statement_rollups(categories: Iterable[str]) -> tuple[RollupRule, ...]:
    """Build the income statement roll-ups for a set of category keys.

    - revenue_total: every ``revenue_*`` category,
    - costs_total: every ``costs_*`` category except income tax,
    - profit_before_tax = revenue_total - costs_total,
    - profit_after_tax = profit_before_tax - costs_income_tax.
    """
    keys = sorted(set(categories) - set(INCOME_STATEMENT_TOTALS))
    revenue = tuple(k for k in keys if k.startswith("revenue_"))
    costs = tuple(
        k for k in keys if k.startswith("costs_") and k != INCOME_TAX_CATEGORY
    )
    return (
        RollupRule("revenue_total", _plus(*revenue)),
        RollupRule("costs_total", _plus(*costs)),
        RollupRule(
            "profit_before_tax", _plus("revenue_total") + _minus("costs_total")
        ),
        RollupRule(
            "profit_after_tax",
            _plus("profit_before_tax") + _minus(INCOME_TAX_CATEGORY),
        ),
    )


def apply_rollups(
    values: Mapping[str, float], rules: Iterable[RollupRule]
) -> dict[str, float]:
    """Return a copy of ``values`` extended with every rule's total."""
    out = dict(values)
    for rule in rules:
        out[rule.key] = rule.evaluate(out)
    return out
