# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Default classification table: Slovak chart of accounts (rámcová účtová osnova).

Classes:
    0  fixed assets and their depreciation / impairment corrections
    1  inventory
    2  financial accounts
    3  receivables, payables and accruals
    4  equity and long-term liabilities
    5  costs
    6  revenue
    7  closing accounts (recognized, excluded from the statements)

Classes 8 and 9 are internal (management) accounting and are left unmapped.

Contra-asset accounts (07x, 08x, 09x, 19x, 29x, 391) are credit-normal like
liabilities; they are classified as Liability so that their credit balances
become positive ``corrections_*`` magnitudes. The ``corrections_total``
roll-up turns them into an asset-side reduction (see rollups.py).
"""

from .classification import (
    ClassificationTable,
    DualClassification,
    Nature,
    SingleClassification,
)


def _asset(category: str, label: str) -> SingleClassification:
    return SingleClassification(Nature.ASSET, category, label=label)


def _liability(category: str, label: str) -> SingleClassification:
    return SingleClassification(Nature.LIABILITY, category, label=label)


def _cost(category: str, label: str, taxable: bool = True) -> SingleClassification:
    return SingleClassification(Nature.COST, category, taxable, label)


def _revenue(category: str, label: str, taxable: bool = True) -> SingleClassification:
    return SingleClassification(Nature.REVENUE, category, taxable, label)


def _dual(asset: str, liability: str, label: str) -> DualClassification:
    return DualClassification(asset, liability, label=label)


def _closing(label: str) -> SingleClassification:
    return SingleClassification(Nature.CLOSING_ACCOUNT, "", label=label)


SK_CHART_OF_ACCOUNTS = {
    # --- Class 0: fixed assets ---------------------------------------------
    "01": _asset("fixed_assets_intangible", "Dlhodobý nehmotný majetok"),
    "02": _asset("fixed_assets_tangible_depreciated", "Dlhodobý hmotný majetok odpisovaný"),
    "03": _asset("fixed_assets_tangible_non_depreciated", "Dlhodobý hmotný majetok neodpisovaný"),
    "04": _asset("fixed_assets_in_progress", "Obstaranie dlhodobého majetku"),
    "05": _asset("fixed_assets_advances", "Poskytnuté preddavky na dlhodobý majetok"),
    "06": _asset("fixed_assets_financial", "Dlhodobý finančný majetok"),
    "07": _liability("corrections_depreciation_intangible", "Oprávky k dlhodobému nehmotnému majetku"),
    "08": _liability("corrections_depreciation_tangible", "Oprávky k dlhodobému hmotnému majetku"),
    "09": _liability("corrections_impairment_fixed", "Opravné položky k dlhodobému majetku"),
    # --- Class 1: inventory ------------------------------------------------
    "11": _asset("inventory_material", "Materiál"),
    "12": _asset("inventory_own_production", "Zásoby vlastnej výroby"),
    "13": _asset("inventory_goods", "Tovar"),
    "15": _asset("inventory_advances", "Poskytnuté preddavky na zásoby"),
    "19": _liability("corrections_impairment_inventory", "Opravné položky k zásobám"),
    # --- Class 2: financial accounts -----------------------------------------
    "21": _asset("financial_cash", "Peniaze"),
    "22": _dual("financial_bank", "liabilities_bank_loans_short_term", "Účty v bankách"),
    "23": _liability("liabilities_bank_loans_short_term", "Bežné bankové úvery"),
    "24": _liability("liabilities_other", "Krátkodobé finančné výpomoci"),
    "25": _asset("financial_short_term_assets", "Krátkodobý finančný majetok"),
    "26": _asset("financial_transfers", "Peniaze na ceste"),
    "29": _liability("corrections_impairment_financial_short_term", "Opravné položky k finančným účtom"),
    # --- Class 3: receivables, payables, accruals ------------------------------
    "31": _asset("receivables_trade", "Pohľadávky"),
    "315": _asset("receivables_other", "Ostatné pohľadávky"),
    "316": _asset("receivables_other", "Pohľadávky z derivátových operácií"),
    "32": _liability("liabilities_trade", "Záväzky"),
    "325": _liability("liabilities_other", "Ostatné záväzky"),
    "33": _liability("liabilities_employees_social", "Zúčtovanie so zamestnancami a inštitúciami"),
    "335": _asset("receivables_employees_social", "Pohľadávky voči zamestnancom"),
    "34": _dual("receivables_state_taxes", "liabilities_state_taxes", "Zúčtovanie daní"),
    "346": _dual("receivables_state_subsidies", "liabilities_state_subsidies", "Dotácie zo štátneho rozpočtu"),
    "347": _dual("receivables_state_subsidies", "liabilities_state_subsidies", "Ostatné dotácie"),
    "35": _asset("receivables_partners", "Pohľadávky voči spoločníkom"),
    "36": _liability("liabilities_partners", "Záväzky voči spoločníkom"),
    "37": _asset("receivables_other", "Iné pohľadávky"),
    "372": _liability("liabilities_other", "Záväzky z upísaných nesplatených cenných papierov"),
    "379": _liability("liabilities_other", "Iné záväzky"),
    "381": _asset("accruals_assets", "Náklady budúcich období"),
    "382": _asset("accruals_assets", "Komplexné náklady budúcich období"),
    "383": _liability("accruals_liabilities", "Výdavky budúcich období"),
    "384": _liability("accruals_liabilities", "Výnosy budúcich období"),
    "385": _asset("accruals_assets", "Príjmy budúcich období"),
    "391": _liability("corrections_impairment_receivables", "Opravné položky k pohľadávkam"),
    "395": _dual("receivables_other", "liabilities_other", "Vnútorné zúčtovanie"),
    "398": _dual("receivables_other", "liabilities_other", "Spojovací účet pri združení"),
    # --- Class 4: equity and long-term liabilities -----------------------------
    "41": _liability("equity_capital", "Základné imanie a kapitálové fondy"),
    "413": _liability("equity_capital_funds", "Ostatné kapitálové fondy"),
    "414": _liability("equity_capital_funds", "Oceňovacie rozdiely"),
    "42": _liability("equity_profit_funds", "Fondy zo zisku"),
    "428": _liability("equity_retained_earnings", "Nerozdelený zisk minulých rokov"),
    "429": _liability("equity_retained_earnings", "Neuhradená strata minulých rokov"),
    "43": _liability("equity_retained_earnings", "Výsledok hospodárenia v schvaľovaní"),
    "45": _liability("liabilities_reserves", "Rezervy"),
    "46": _liability("liabilities_bank_loans_long_term", "Bankové úvery"),
    "47": _liability("liabilities_other_long_term", "Dlhodobé záväzky"),
    "48": _dual("receivables_state_taxes", "liabilities_deferred_tax", "Odložená daňová pohľadávka a záväzok"),
    "49": _liability("equity_capital", "Individuálny podnikateľ"),
    # --- Class 5: costs --------------------------------------------------------
    "50": _cost("costs_consumed_purchases", "Spotrebované nákupy"),
    "504": _cost("costs_goods_sold", "Predaný tovar"),
    "51": _cost("costs_services", "Služby"),
    "513": _cost("costs_services", "Náklady na reprezentáciu", taxable=False),
    "52": _cost("costs_personnel", "Osobné náklady"),
    "53": _cost("costs_taxes_fees", "Dane a poplatky"),
    "54": _cost("costs_other_operating", "Iné náklady na hospodársku činnosť"),
    "543": _cost("costs_other_operating", "Dary", taxable=False),
    "545": _cost("costs_other_operating", "Ostatné pokuty, penále a úroky z omeškania", taxable=False),
    "55": _cost("costs_reserves_adjustments", "Tvorba rezerv a opravných položiek"),
    "551": _cost("costs_depreciation", "Odpisy dlhodobého majetku"),
    "56": _cost("costs_financial", "Finančné náklady"),
    "59": _cost("costs_income_tax", "Dane z príjmov", taxable=False),
    "596": _cost("costs_other_operating", "Prevod podielov na výsledku hospodárenia spoločníkom"),
    # --- Class 6: revenue ------------------------------------------------------
    "60": _revenue("revenue_sales", "Tržby za vlastné výkony"),
    "604": _revenue("revenue_goods", "Tržby za tovar"),
    "61": _revenue("revenue_inventory_change", "Zmeny stavu vnútroorganizačných zásob"),
    "62": _revenue("revenue_capitalization", "Aktivácia"),
    "64": _revenue("revenue_other_operating", "Iné výnosy z hospodárskej činnosti"),
    "65": _revenue("revenue_reserves_adjustments", "Zúčtovanie rezerv a opravných položiek"),
    "66": _revenue("revenue_financial", "Finančné výnosy"),
    # --- Class 7: closing accounts ---------------------------------------------
    "7": _closing("Závierkové a podsúvahové účty"),
}

DEFAULT_TABLE = ClassificationTable(SK_CHART_OF_ACCOUNTS)
