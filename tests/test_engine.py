import json
from pathlib import Path

import pytest

from flexi_finsight.classification import (
    ClassificationTable,
    DualClassification,
    Nature,
    SingleClassification,
)
from flexi_finsight.engine import aggregate, aggregate_balance_sheet
from flexi_finsight.rows import parse_row, read_rows_json

SAMPLE = Path(__file__).resolve().parent.parent / "data" / "samples" / "stav-uctu-sample.json"


def row(ucet, **fields):
    """Build a typed row from AbraFlexi-style field names."""
    payload = {"ucet": f"code:{ucet}", "mena": "code:EUR"}
    payload.update(fields)
    return parse_row(payload)


def income_month(result, month):
    return result.income_monthly[month - 1]


def snapshot(result, index):
    return result.balance_monthly[index]


def test_empty_input_gives_zero_filled_statements():
    for rows in (None, []):
        result = aggregate(rows)
        assert [m["month"] for m in result.income_monthly] == list(range(1, 13))
        assert [s["month"] for s in result.balance_monthly] == list(range(0, 13))
        for period in result.income_monthly + result.balance_monthly:
            assert all(v == 0 for k, v in period.items() if k != "month")
        assert len(result.income_cumulative) == 12
        assert len(result.balance_changes) == 12


def test_aggregate_is_idempotent():
    rows = read_rows_json(SAMPLE)
    first = json.dumps(aggregate(rows).to_document(), sort_keys=True)
    second = json.dumps(aggregate(rows).to_document(), sort_keys=True)
    assert first == second


def test_unclassified_account_contributes_nothing():
    baseline = aggregate([]).to_document()
    result = aggregate([row("999999", pocatek=500, obratMd01=10, stav01=510)])
    assert result.to_document() == baseline


def test_missing_account_code_is_excluded():
    result = aggregate([parse_row({"pocatek": 100, "obratDal01": 100})])
    assert result.to_document() == aggregate([]).to_document()


def test_closing_accounts_are_excluded():
    result = aggregate([row("702000", pocatek=-900, obratDal01=50, stav01=-950)])
    assert result.to_document() == aggregate([]).to_document()


def test_revenue_is_credit_normal():
    result = aggregate([row("601000", obratDal01=100, obratMd01=30)])
    assert income_month(result, 1)["revenue_sales"] == 70
    assert income_month(result, 1)["revenue_total"] == 70


def test_cost_is_debit_normal():
    result = aggregate([row("501000", obratMd01=50, obratDal01=10)])
    assert income_month(result, 1)["costs_consumed_purchases"] == 40
    assert income_month(result, 1)["costs_total"] == 40


def test_end_to_end_profit():
    result = aggregate(
        [
            row("601", obratDal01=1000, obratMd01=0),
            row("501", obratMd01=400, obratDal01=0),
        ]
    )
    jan = income_month(result, 1)
    assert jan["revenue_total"] == 1000
    assert jan["costs_total"] == 400
    assert jan["profit_before_tax"] == 600
    assert jan["profit_after_tax"] == 600
    # Other months stay empty
    assert income_month(result, 2)["profit_after_tax"] == 0


def test_income_tax_is_not_counted_twice():
    result = aggregate(
        [
            row("601", obratDal01=1000),
            row("501", obratMd01=400),
            row("591", obratMd01=114),
        ]
    )
    jan = income_month(result, 1)
    assert jan["costs_income_tax"] == 114
    assert jan["costs_total"] == 400
    assert jan["profit_before_tax"] == 600
    assert jan["profit_after_tax"] == 486


def test_dual_sign_account_routes_by_balance_sign():
    result = aggregate([row("221000", stav03=500, stav04=-200)])

    march = snapshot(result, 3)
    assert march["financial_bank"] == 500
    assert march["liabilities_bank_loans_short_term"] == 0

    april = snapshot(result, 4)
    assert april["financial_bank"] == 0
    assert april["liabilities_bank_loans_short_term"] == 200


def test_liability_balance_is_subtracted():
    result = aggregate([row("321000", pocatek=-1000)])
    assert snapshot(result, 0)["liabilities_trade"] == 1000
    assert snapshot(result, 0)["liabilities_total"] == 1000
    assert snapshot(result, 0)["liabilities_and_equity"] == 1000


def test_asset_balance_is_added():
    result = aggregate([row("311000", pocatek=250, stav01=300)])
    assert snapshot(result, 0)["receivables_trade"] == 250
    assert snapshot(result, 1)["receivables_total"] == 300
    assert snapshot(result, 1)["current_assets_total"] == 300
    assert snapshot(result, 1)["assets"] == 300


def test_contra_asset_corrections_reduce_assets():
    result = aggregate(
        [
            row("022000", pocatek=1000),
            row("082000", pocatek=-300),
        ]
    )
    opening = snapshot(result, 0)
    assert opening["fixed_assets_total"] == 1000
    assert opening["corrections_depreciation_tangible"] == 300
    assert opening["corrections_total"] == -300
    assert opening["assets"] == 700


def test_each_snapshot_is_independent():
    result = aggregate([row("211000", pocatek=10, stav01=20, stav12=5)])
    cash = [s["financial_cash"] for s in result.balance_monthly]
    assert cash[0] == 10
    assert cash[1] == 20
    assert cash[2:12] == [0] * 10
    assert cash[12] == 5


def test_rollups_stay_consistent_after_rounding():
    rows = [
        row("221000", pocatek="1000,004", stav01="-333,335"),
        row("321000", pocatek="-0,005", stav01="-12,345"),
        row("411000", pocatek="-999,999", stav01="-999,999"),
        row("461000", pocatek="-0,333", stav01="-0,333"),
        row("384000", pocatek="-1,115", stav01="-1,115"),
    ]
    result = aggregate(rows)
    for s in result.balance_monthly:
        assert s["liabilities_and_equity"] == pytest.approx(
            round(s["equity_total"] + s["liabilities_total"], 2), abs=0.01
        )
        assert s["assets"] == pytest.approx(
            s["fixed_assets_total"] + s["current_assets_total"] + s["corrections_total"],
            abs=0.02,
        )


def test_sample_trial_balance_balances_with_current_result():
    rows = read_rows_json(SAMPLE)
    result = aggregate(rows, current_result_in_equity=True)

    opening = snapshot(result, 0)
    assert opening["assets"] == 10000
    assert opening["liabilities_and_equity"] == 10000

    for s in result.balance_monthly[1:]:
        assert s["financial_bank"] == 9600
        assert s["receivables_trade"] == 1000
        assert s["equity_current_result"] == 600
        assert s["assets"] == s["liabilities_and_equity"] == 10600


def test_current_result_is_off_by_default():
    rows = read_rows_json(SAMPLE)
    result = aggregate(rows)
    assert snapshot(result, 12)["equity_current_result"] == 0
    assert snapshot(result, 12)["equity_total"] == 10000


def test_cumulative_income_statement():
    result = aggregate(
        [row("601", obratDal01=100, obratDal02=50, obratMd03=30, obratDal12="0,5")]
    )
    cumulative = [m["revenue_total"] for m in result.income_cumulative]
    assert cumulative[:3] == [100, 150, 120]
    assert cumulative[11] == 120.5
    assert [m["month"] for m in result.income_cumulative] == list(range(1, 13))


def test_month_over_month_changes():
    result = aggregate([row("211", pocatek=100, stav01=150, stav02=120)])
    changes = result.balance_changes
    assert [c["month"] for c in changes] == list(range(1, 13))
    assert changes[0]["financial_cash"] == 50
    assert changes[1]["financial_cash"] == -30
    assert changes[2]["financial_cash"] == -120


def test_raw_payloads_are_accepted():
    payloads = [{"ucet": "code:601000", "obratDal01": "10,5"}]
    result = aggregate(payloads)
    assert income_month(result, 1)["revenue_sales"] == 10.5


def test_custom_table_is_used():
    table = ClassificationTable(
        {
            "1": SingleClassification(Nature.ASSET, "financial_cash"),
            "2": DualClassification("receivables_other", "liabilities_other"),
            "3": SingleClassification(Nature.REVENUE, "revenue_custom"),
        }
    )
    result = aggregate(
        [
            row("100", pocatek=5),
            row("200", pocatek=-7),
            row("300", obratDal01=9),
            # Known to the default chart, unknown here
            row("501", obratMd01=400),
        ],
        table,
    )
    assert snapshot(result, 0)["financial_cash"] == 5
    assert snapshot(result, 0)["liabilities_other"] == 7
    jan = income_month(result, 1)
    assert jan["revenue_custom"] == 9
    assert jan["costs_total"] == 0
    assert "costs_consumed_purchases" not in jan


def test_output_document_shape():
    doc = aggregate([]).to_document()
    assert set(doc) == {"incomeStatement", "balanceSheet"}
    assert len(doc["incomeStatement"]["monthly"]) == 12
    assert len(doc["balanceSheet"]["monthly"]) == 13
    assert "lastSync" not in doc


def test_balance_sheet_contains_every_declared_line():
    snapshots = aggregate_balance_sheet([])
    keys = set(snapshots[0])
    for expected in (
        "fixed_assets_total",
        "current_assets_total",
        "inventory_total",
        "receivables_total",
        "financial_assets_total",
        "corrections_total",
        "assets",
        "equity_total",
        "liabilities_long_term_total",
        "liabilities_short_term_total",
        "liabilities_total",
        "liabilities_and_equity",
        "accruals_assets",
        "accruals_liabilities",
    ):
        assert expected in keys


def test_oversized_json_integer_counts_as_zero():
    payload = json.loads('{"ucet": "code:211000", "pocatek": 1' + "0" * 400 + ', "stav01": 5}')
    result = aggregate([payload])
    assert snapshot(result, 0)["financial_cash"] == 0
    assert snapshot(result, 1)["financial_cash"] == 5


def test_rows_in_unrecognized_currency_are_skipped():
    rows = [
        parse_row({"ucet": "code:211000", "mena": "code:???", "pocatek": 100}),
        parse_row({"ucet": "code:601000", "mena": "code:USD", "obratDal01": 40}),
        parse_row({"ucet": "code:311000", "mena": "code:eur", "pocatek": 7}),
        parse_row({"ucet": "code:321000", "pocatek": -3}),
    ]
    result = aggregate(rows)

    opening = snapshot(result, 0)
    assert opening["financial_cash"] == 0
    assert opening["receivables_trade"] == 7
    assert opening["liabilities_trade"] == 3
    assert income_month(result, 1)["revenue_total"] == 0


def test_accepted_currencies_are_configurable():
    rows = [row("211000", mena="code:CZK", pocatek=100)]
    assert snapshot(aggregate(rows), 0)["financial_cash"] == 0
    assert snapshot(aggregate(rows, currencies=["CZK"]), 0)["financial_cash"] == 100
    assert snapshot(aggregate(rows, currencies=None), 0)["financial_cash"] == 100
