# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Flexi FinSight.

The CLI is intentionally thin: it does not implement accounting logic
itself. It wires configuration, the AbraFlexi client, the engine and the
document storage together.

Subcommands
-----------

classify CODE [CODE ...]
    Show how account codes are classified by the active chart of accounts.

process FILE
    Aggregate a saved AbraFlexi ``stav-uctu`` JSON response and print the
    selected statement (``--statement income|balance|cashflow``) with the
    selected level of detail (``--view summary|detailed``). ``--output``
    writes the full statements document as JSON.

accounts FILE [--account CODE]
    Account explorer: monthly opening balance, debit and credit turnovers
    and closing balance per account.

sync [COMPANY_ID] [--all]
    Fetch the trial balance of one company (or every configured company)
    from AbraFlexi, process it and store the result.

show COMPANY_ID
    Print the statements stored for a company by the last sync.

Configuration
-------------
``--config PATH`` selects the TOML configuration (default:
``flexi_finsight_config.toml`` in the current directory). ``classify``,
``process`` and ``accounts`` work without a configuration file, using the
compiled-in Slovak chart of accounts.

AbraFlexi passwords are read from environment variables; a ``.env`` file in
the current directory is loaded at startup.

Examples
--------
    python -m flexi_finsight.cli classify 221000 code:604001
    python -m flexi_finsight.cli process data/stav-uctu-2025.json --statement balance
    python -m flexi_finsight.cli sync --all
    python -m flexi_finsight.cli show demo1 --view summary
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .abraflexi import AbraFlexiError
from .cashflow import compute_cash_flow
from .classification import (
    ClassificationTable,
    DualClassification,
    classify,
    normalize_account_code,
)
from .config import AppConfig, load_app_config, load_classification_table
from .engine import FinancialStatements, aggregate
from .rows import read_rows_json, rows_to_frame
from .storage import get_document, init_storage
from .sync import SyncError, run_all_companies_sync, run_company_sync
from .views import VIEW_LEVELS, cash_flow_frame, statement_frame

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="flexi_finsight",
        description=(
            "Flexi FinSight: income statement and balance sheet time series "
            "from AbraFlexi trial balances."
        ),
    )
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the Flexi FinSight version and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help="Path to the TOML configuration file.",
    )
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )

    subparsers = ap.add_subparsers(dest="command")

    p_classify = subparsers.add_parser(
        "classify", help="Show the classification of account codes."
    )
    p_classify.add_argument("codes", nargs="+", help="Account codes.")

    p_process = subparsers.add_parser(
        "process", help="Aggregate a saved AbraFlexi stav-uctu JSON file."
    )
    p_process.add_argument("file", help="Path to the JSON file.")
    p_process.add_argument(
        "--statement",
        choices=["income", "balance", "cashflow"],
        default="income",
        help="Statement to print (default: income).",
    )
    p_process.add_argument(
        "--view",
        choices=list(VIEW_LEVELS),
        default="summary",
        help="Level of detail (default: summary).",
    )
    p_process.add_argument(
        "--output",
        help="Write the full statements document to this JSON file.",
    )

    p_accounts = subparsers.add_parser(
        "accounts", help="Account explorer for a saved AbraFlexi JSON file."
    )
    p_accounts.add_argument("file", help="Path to the JSON file.")
    p_accounts.add_argument(
        "--account", help="Only show accounts starting with this code."
    )

    p_sync = subparsers.add_parser(
        "sync", help="Fetch, process and store data from AbraFlexi."
    )
    p_sync.add_argument("company_id", nargs="?", help="Company to synchronize.")
    p_sync.add_argument(
        "--all", action="store_true", help="Synchronize every configured company."
    )

    p_show = subparsers.add_parser("show", help="Print stored statements.")
    p_show.add_argument("company_id", help="Company id.")
    p_show.add_argument(
        "--statement",
        choices=["income", "balance"],
        default="income",
        help="Statement to print (default: income).",
    )
    p_show.add_argument(
        "--view",
        choices=list(VIEW_LEVELS),
        default="summary",
        help="Level of detail (default: summary).",
    )

    return ap


def _optional_config(args: argparse.Namespace) -> Optional[AppConfig]:
    """Load the config when given explicitly or present in the cwd."""
    if args.config_path:
        return load_app_config(args.config_path)
    if Path("flexi_finsight_config.toml").is_file():
        return load_app_config()
    return None


def _table_for(config: Optional[AppConfig]) -> Optional[ClassificationTable]:
    return load_classification_table(config) if config is not None else None


def _handle_classify(args: argparse.Namespace, config: Optional[AppConfig]) -> None:
    table = _table_for(config)
    for raw in args.codes:
        code = normalize_account_code(raw)
        c = classify(code, table)
        if c is None:
            print(f"{code}: unclassified")
        elif isinstance(c, DualClassification):
            print(
                f"{code}: {c.nature.value} asset={c.asset_category} "
                f"liability={c.liability_category} ({c.label})"
            )
        else:
            taxable = "" if c.taxable else " [not taxable]"
            category = c.category or "-"
            print(f"{code}: {c.nature.value} {category}{taxable} ({c.label})")


def _print_statements(
    statements: FinancialStatements, statement: str, view: str
) -> None:
    if statement == "income":
        print("Income statement (monthly)")
        print(statement_frame(statements.income_monthly, view).to_string())
    elif statement == "balance":
        print("Balance sheet (0 = opening, 1-12 = month-end)")
        print(statement_frame(statements.balance_monthly, view).to_string())
    else:
        summary = compute_cash_flow(statements).to_dict()
        print("Cash flow (months 1-12)")
        print(cash_flow_frame(summary).to_string(index=False))


def _handle_process(
    args: argparse.Namespace, config: Optional[AppConfig], parser
) -> None:
    path = Path(args.file)
    if not path.is_file():
        parser.error(f"Trial balance file not found: {path}")

    rows = read_rows_json(path)
    if config is None:
        statements = aggregate(rows)
    else:
        statements = aggregate(
            rows,
            _table_for(config),
            current_result_in_equity=config.current_result_in_equity,
            currencies=config.currencies,
        )
    print(f"Processed {len(rows)} accounts from {path}.")
    _print_statements(statements, args.statement, args.view)

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(
            json.dumps(statements.to_document(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        print(f"Statements written to {out}.")


def _handle_accounts(args: argparse.Namespace, parser) -> None:
    path = Path(args.file)
    if not path.is_file():
        parser.error(f"Trial balance file not found: {path}")

    df = rows_to_frame(read_rows_json(path))
    if args.account:
        df = df[df["account"].str.startswith(normalize_account_code(args.account))]
    if df.empty:
        print("No matching accounts.")
        return
    print(df.to_string(index=False))


def _handle_sync(args: argparse.Namespace, config: AppConfig, parser) -> int:
    if args.all:
        results = run_all_companies_sync(config)
        for company_id, ok in results.items():
            print(f"{company_id}: {'ok' if ok else 'FAILED'}")
        return 0 if all(results.values()) else 1

    if not args.company_id:
        parser.error("Provide a COMPANY_ID or --all.")
    try:
        document = run_company_sync(config, args.company_id)
    except (SyncError, AbraFlexiError) as exc:
        print(f"Sync failed: {exc}", file=sys.stderr)
        return 1
    print(
        f"Sync for {args.company_id} complete: {document['rowCount']} accounts, "
        f"year {document['year']}."
    )
    return 0


def _handle_show(args: argparse.Namespace, config: AppConfig) -> int:
    init_storage(config.storage)
    document = get_document(config.storage, args.company_id)
    if document is None:
        print(f"No data stored for {args.company_id}. Run 'sync' first.")
        return 1

    print(f"Last sync: {document.get('lastSync', 'unknown')}")
    if args.statement == "income":
        periods = document["incomeStatement"]["monthly"]
    else:
        periods = document["balanceSheet"]["monthly"]
    print(statement_frame(periods, args.view).to_string())
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the Flexi FinSight CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"flexi_finsight version {__version__}")
        return 0

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()

    if args.command is None:
        parser.print_help()
        return 0

    # Bad input files (config, chart CSV, trial balance JSON) are usage errors.
    try:
        if args.command in ("classify", "process", "accounts"):
            config = _optional_config(args)
            if args.command == "classify":
                _handle_classify(args, config)
            elif args.command == "process":
                _handle_process(args, config, parser)
            else:
                _handle_accounts(args, parser)
            return 0

        config = load_app_config(args.config_path)
        if args.command == "sync":
            return _handle_sync(args, config, parser)
        return _handle_show(args, config)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
