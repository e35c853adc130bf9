import pandas as pd
import pytest

from flexi_finsight.chart_sk import DEFAULT_TABLE
from flexi_finsight.classification import (
    ClassificationTable,
    DualClassification,
    Nature,
    SingleClassification,
    classify,
    normalize_account_code,
)

# Small chart used to check the prefix fallback order.
TABLE = ClassificationTable(
    {
        "021": SingleClassification(Nature.ASSET, "fixed_assets_tangible_depreciated"),
        "02": SingleClassification(Nature.ASSET, "fixed_assets_intangible"),
        "0": SingleClassification(Nature.ASSET, "fixed_assets_financial"),
        "601": SingleClassification(Nature.REVENUE, "revenue_sales"),
    }
)


def test_three_character_prefix_wins():
    c = classify("0211", TABLE)
    assert c is TABLE["021"]


def test_falls_back_to_two_then_one_character_prefix():
    assert classify("0291", TABLE) is TABLE["02"]
    assert classify("0999", TABLE) is TABLE["0"]


def test_short_codes_use_shorter_prefixes():
    assert classify("02", TABLE) is TABLE["02"]
    assert classify("0", TABLE) is TABLE["0"]


@pytest.mark.parametrize("code", ["999999", "9", "", None, "code:"])
def test_unmapped_or_empty_codes_are_unclassified(code):
    assert classify(code, TABLE) is None


def test_scheme_prefix_is_stripped():
    assert normalize_account_code("code:601000") == "601000"
    assert normalize_account_code(" 601000 ") == "601000"
    assert normalize_account_code(None) == ""
    assert classify("code:601000", TABLE) is TABLE["601"]


def test_default_table_dual_sign_bank_account():
    c = classify("code:221000")
    assert isinstance(c, DualClassification)
    assert c.nature is Nature.DUAL_SIGN
    assert c.asset_category == "financial_bank"
    assert c.liability_category == "liabilities_bank_loans_short_term"


def test_default_table_closing_and_contra_accounts():
    closing = classify("701000")
    assert closing.nature is Nature.CLOSING_ACCOUNT

    contra = classify("082100")
    assert contra.nature is Nature.LIABILITY
    assert contra.category == "corrections_depreciation_tangible"


def test_default_table_taxable_flag():
    assert classify("513000").taxable is False
    assert classify("518000").taxable is True
    assert classify("591000").category == "costs_income_tax"


def test_default_table_examples():
    assert classify("601000").category == "revenue_sales"
    assert classify("604000").category == "revenue_goods"
    assert classify("501000").category == "costs_consumed_purchases"
    assert classify("551000").category == "costs_depreciation"
    assert classify("999999") is None


def test_table_is_read_only():
    with pytest.raises(TypeError):
        DEFAULT_TABLE["999"] = SingleClassification(Nature.ASSET, "x")  # type: ignore[index]


@pytest.mark.parametrize("prefix", ["", "0211"])
def test_invalid_prefix_length_is_rejected(prefix):
    with pytest.raises(ValueError):
        ClassificationTable({prefix: SingleClassification(Nature.ASSET, "x")})


def test_categories_by_nature():
    assert TABLE.categories([Nature.REVENUE]) == ["revenue_sales"]
    cats = DEFAULT_TABLE.categories([Nature.DUAL_SIGN])
    assert "financial_bank" in cats
    assert "liabilities_state_taxes" in cats


def test_from_csv(tmp_path):
    csv_path = tmp_path / "chart.csv"
    csv_path.write_text(
        "prefix,nature,category,asset_category,liability_category,taxable,label\n"
        "021,Asset,fixed_assets_tangible_depreciated,,,true,Stavby\n"
        "221,DualSign,,financial_bank,liabilities_bank_loans_short_term,,Banka\n"
        "513,Cost,costs_services,,,false,Reprezentácia\n"
        "7,ClosingAccount,,,,,Závierka\n",
        encoding="utf-8",
    )

    table = ClassificationTable.from_csv(csv_path)

    assert len(table) == 4
    assert classify("021100", table).category == "fixed_assets_tangible_depreciated"
    bank = classify("221000", table)
    assert isinstance(bank, DualClassification)
    assert bank.taxable is True
    assert classify("513000", table).taxable is False
    assert classify("701", table).nature is Nature.CLOSING_ACCOUNT
    assert classify("022", table) is None


def test_from_csv_rejects_unknown_nature(tmp_path):
    csv_path = tmp_path / "chart.csv"
    csv_path.write_text("prefix,nature,category\n021,Equity,foo\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown nature"):
        ClassificationTable.from_csv(csv_path)


def test_from_csv_requires_both_dual_categories(tmp_path):
    csv_path = tmp_path / "chart.csv"
    csv_path.write_text(
        "prefix,nature,category,asset_category,liability_category\n"
        "221,DualSign,,financial_bank,\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="DualSign"):
        ClassificationTable.from_csv(csv_path)


def test_from_frame_rejects_numeric_prefix_column():
    df = pd.DataFrame(
        {"prefix": [21], "nature": ["Asset"], "category": ["fixed_assets_intangible"]}
    )
    with pytest.raises(ValueError, match="must hold strings"):
        ClassificationTable.from_frame(df)
