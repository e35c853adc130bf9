# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Flexi FinSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the rest of the application,
- resolving the classification table (compiled-in or CSV chart of accounts).

Example
-------
    [abraflexi]
    year = 2025
    timeout = 60

    [statements]
    current_result_in_equity = true
    currencies = ["EUR"]
    # chart_of_accounts = "data/charts/custom.csv"

    [storage]
    engine = "sqlite"
    path = "data/db/flexi_finsight.sqlite"

    [[companies]]
    id = "demo1"
    name = "Demo Firma s.r.o."
    url = "https://demo.flexibee.eu/c/demo"
    user = "winstrom"
    password_env = "ABRAFLEXI_PASSWORD_DEMO1"

All relative paths are resolved against the directory of the TOML file.
Passwords are never stored in the TOML file: ``password_env`` names the
environment variable holding them.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .abraflexi import DEFAULT_TIMEOUT
from .classification import ClassificationTable
from .engine import DEFAULT_CURRENCIES
from .storage import StorageConfig

DEFAULT_CONFIG_FILE = "flexi_finsight_config.toml"


@dataclass(frozen=True)
class CompanyConfig:
    """One AbraFlexi company connection."""

    id: str
    name: str
    url: str
    user: str
    password_env: str

    @property
    def has_credentials(self) -> bool:
        return bool(self.url and self.user)


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Flexi FinSight.

    Attributes
    ----------
    year:
        Accounting year fetched from AbraFlexi.
    timeout:
        HTTP timeout for AbraFlexi requests, in seconds.
    current_result_in_equity:
        Whether the balance sheet includes the year's running result in equity.
    currencies:
        Currency codes accepted by the engine; rows in other currencies are
        skipped.
    chart_of_accounts:
        Optional CSV replacing the compiled-in Slovak chart of accounts.
    storage:
        Where processed documents are stored.
    companies:
        Configured companies, in file order.
    """

    year: int
    timeout: float
    current_result_in_equity: bool
    chart_of_accounts: Optional[Path]
    storage: StorageConfig
    companies: tuple[CompanyConfig, ...]
    currencies: tuple[str, ...] = DEFAULT_CURRENCIES

    def company(self, company_id: str) -> Optional[CompanyConfig]:
        for c in self.companies:
            if c.id == company_id:
                return c
        return None


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_companies(raw: Mapping[str, Any]) -> tuple[CompanyConfig, ...]:
    """
    Parse the [[companies]] array of tables.

    Raises:
        ValueError: on a missing id, duplicate ids, or a company that has a
            url without a user (or the reverse).
    """
    items = raw.get("companies") or []
    if not isinstance(items, list):
        raise ValueError("'companies' must be an array of tables ([[companies]]).")

    companies: list[CompanyConfig] = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, Mapping):
            raise ValueError("Each [[companies]] entry must be a table.")
        company_id = str(item.get("id") or "").strip()
        if not company_id:
            raise ValueError("Every [[companies]] entry needs an 'id'.")
        if company_id in seen:
            raise ValueError(f"Duplicate company id {company_id!r} in config.")
        seen.add(company_id)

        url = str(item.get("url") or "").strip()
        user = str(item.get("user") or "").strip()
        if bool(url) != bool(user):
            raise ValueError(
                f"Company {company_id!r} must define both 'url' and 'user' "
                "(or neither)."
            )

        password_env = str(item.get("password_env") or "").strip()
        if not password_env:
            password_env = f"ABRAFLEXI_PASSWORD_{company_id.upper().replace('-', '_')}"

        companies.append(
            CompanyConfig(
                id=company_id,
                name=str(item.get("name") or company_id),
                url=url,
                user=user,
                password_env=password_env,
            )
        )
    return tuple(companies)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Flexi FinSight configuration from a TOML file.

    Parameters
    ----------
    config_path:
        Path to the TOML file; defaults to ``flexi_finsight_config.toml`` in
        the current working directory.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be parsed or contains invalid values.
    """
    config_file = Path(config_path or DEFAULT_CONFIG_FILE).resolve()
    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) AbraFlexi section
    abraflexi_section = _section(raw, "abraflexi")
    try:
        year = int(abraflexi_section.get("year") or date.today().year)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'abraflexi.year' in the configuration. "
            "Expected an integer."
        ) from exc
    try:
        timeout = float(abraflexi_section.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'abraflexi.timeout' in the configuration."
        ) from exc

    # 2) Statements section
    statements_section = _section(raw, "statements")
    current_result_in_equity = statements_section.get(
        "current_result_in_equity", False
    )
    if not isinstance(current_result_in_equity, bool):
        raise ValueError(
            "Invalid value for 'statements.current_result_in_equity' in the "
            "configuration. Expected true or false."
        )
    currencies_raw = statements_section.get("currencies", list(DEFAULT_CURRENCIES))
    if not isinstance(currencies_raw, list) or not all(
        isinstance(c, str) and c.strip() for c in currencies_raw
    ):
        raise ValueError(
            "Invalid value for 'statements.currencies' in the configuration. "
            'Expected a list of currency codes, e.g. ["EUR"].'
        )
    currencies = tuple(c.strip().upper() for c in currencies_raw)
    chart_raw = statements_section.get("chart_of_accounts") or None
    chart_of_accounts = (base_dir / str(chart_raw)).resolve() if chart_raw else None

    # 3) Storage section
    storage_section = _section(raw, "storage")
    engine = str(storage_section.get("engine") or "sqlite")
    db_path_raw = storage_section.get("path") or "data/db/flexi_finsight.sqlite"
    storage = StorageConfig(engine=engine, path=(base_dir / str(db_path_raw)).resolve())

    # 4) Companies
    companies = _parse_companies(raw)

    return AppConfig(
        year=year,
        timeout=timeout,
        current_result_in_equity=current_result_in_equity,
        chart_of_accounts=chart_of_accounts,
        storage=storage,
        companies=companies,
        currencies=currencies,
    )


def load_classification_table(config: AppConfig) -> ClassificationTable:
    """Return the CSV chart of accounts if configured, else the default table."""
    if config.chart_of_accounts is None:
        from .chart_sk import DEFAULT_TABLE

        return DEFAULT_TABLE
    if not config.chart_of_accounts.is_file():
        raise FileNotFoundError(
            f"Chart of accounts file not found: {config.chart_of_accounts}"
        )
    return ClassificationTable.from_csv(config.chart_of_accounts)
