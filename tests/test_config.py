from datetime import date

import pytest

from flexi_finsight.chart_sk import DEFAULT_TABLE
from flexi_finsight.classification import Nature
from flexi_finsight.config import load_app_config, load_classification_table


def write_config(tmp_path, body: str):
    path = tmp_path / "flexi_finsight_config.toml"
    path.write_text(body, encoding="utf-8")
    return path


def test_full_config(tmp_path):
    path = write_config(
        tmp_path,
        """
[abraflexi]
year = 2024
timeout = 30

[statements]
current_result_in_equity = true

[storage]
engine = "sqlite"
path = "db/test.sqlite"

[[companies]]
id = "demo1"
name = "Demo s.r.o."
url = "https://demo.flexibee.eu/c/demo"
user = "winstrom"
password_env = "DEMO_PASSWORD"

[[companies]]
id = "offline-co"
""",
    )
    cfg = load_app_config(str(path))

    assert cfg.year == 2024
    assert cfg.timeout == 30
    assert cfg.current_result_in_equity is True
    assert cfg.chart_of_accounts is None
    assert cfg.storage.engine == "sqlite"
    assert cfg.storage.path == (tmp_path / "db" / "test.sqlite").resolve()

    demo = cfg.company("demo1")
    assert demo.name == "Demo s.r.o."
    assert demo.password_env == "DEMO_PASSWORD"
    assert demo.has_credentials

    offline = cfg.company("offline-co")
    assert offline.name == "offline-co"
    assert offline.password_env == "ABRAFLEXI_PASSWORD_OFFLINE_CO"
    assert not offline.has_credentials
    assert cfg.company("missing") is None


def test_defaults(tmp_path):
    cfg = load_app_config(str(write_config(tmp_path, "")))
    assert cfg.year == date.today().year
    assert cfg.timeout == 60
    assert cfg.current_result_in_equity is False
    assert cfg.companies == ()
    assert cfg.storage.path.name == "flexi_finsight.sqlite"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_invalid_toml(tmp_path):
    with pytest.raises(ValueError, match="Failed to parse"):
        load_app_config(str(write_config(tmp_path, "[abraflexi\nyear = ")))


def test_invalid_year(tmp_path):
    with pytest.raises(ValueError, match="abraflexi.year"):
        load_app_config(str(write_config(tmp_path, '[abraflexi]\nyear = "soon"\n')))


@pytest.mark.parametrize(
    "body, message",
    [
        ('[[companies]]\nname = "x"\n', "needs an 'id'"),
        ('[[companies]]\nid = "a"\n[[companies]]\nid = "a"\n', "Duplicate"),
        ('[[companies]]\nid = "a"\nurl = "https://x"\n', "both 'url' and 'user'"),
    ],
)
def test_invalid_companies(tmp_path, body, message):
    with pytest.raises(ValueError, match=message):
        load_app_config(str(write_config(tmp_path, body)))


def test_classification_table_default(tmp_path):
    cfg = load_app_config(str(write_config(tmp_path, "")))
    assert load_classification_table(cfg) is DEFAULT_TABLE


def test_classification_table_from_csv(tmp_path):
    (tmp_path / "chart.csv").write_text(
        "prefix,nature,category\n60,Revenue,revenue_sales\n",
        encoding="utf-8",
    )
    cfg = load_app_config(
        str(write_config(tmp_path, '[statements]\nchart_of_accounts = "chart.csv"\n'))
    )
    table = load_classification_table(cfg)
    assert len(table) == 1
    assert table.lookup("601000").nature is Nature.REVENUE


def test_classification_table_missing_csv(tmp_path):
    cfg = load_app_config(
        str(write_config(tmp_path, '[statements]\nchart_of_accounts = "gone.csv"\n'))
    )
    with pytest.raises(FileNotFoundError):
        load_classification_table(cfg)


def test_currencies(tmp_path):
    cfg = load_app_config(str(write_config(tmp_path, "")))
    assert cfg.currencies == ("EUR",)

    cfg = load_app_config(
        str(write_config(tmp_path, '[statements]\ncurrencies = ["eur", "CZK"]\n'))
    )
    assert cfg.currencies == ("EUR", "CZK")


@pytest.mark.parametrize(
    "body, message",
    [
        ('[statements]\ncurrent_result_in_equity = "false"\n', "current_result_in_equity"),
        ('[statements]\ncurrencies = "EUR"\n', "statements.currencies"),
        ('[statements]\ncurrencies = [1]\n', "statements.currencies"),
    ],
)
def test_invalid_statements_section(tmp_path, body, message):
    with pytest.raises(ValueError, match=message):
        load_app_config(str(write_config(tmp_path, body)))
