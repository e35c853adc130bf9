# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Synchronization pipeline for Flexi FinSight.

This module is the glue between the external collaborators and the pure
engine. For one company, a sync run:

1. obtains the AbraFlexi credentials (url, user, password),
2. fetches the year's trial balance rows,
3. parses and aggregates them into statements (engine.aggregate),
4. stamps the result with ``lastSync``, ``year`` and ``rowCount``,
5. stores it as the company's ``"latest"`` document.

Collaborators are passed in as plain functions so that the scheduler, tests
or a future Web UI can substitute them:

- fetch_credentials(company) -> (url, user, password)
- fetch_rows(url, user, password, year, timeout) -> list[dict]

The default credential source reads the password from the environment
variable named by ``CompanyConfig.password_env``.
"""

import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

from .abraflexi import fetch_trial_balance
from .classification import ClassificationTable
from .config import AppConfig, CompanyConfig, load_classification_table
from .engine import DEFAULT_CURRENCIES, aggregate
from .rows import parse_rows
from .storage import init_storage, put_document

logger = logging.getLogger(__name__)

LATEST_KEY = "latest"

Credentials = tuple[str, str, str]
CredentialsFetcher = Callable[[CompanyConfig], Credentials]
RowsFetcher = Callable[..., list[dict[str, Any]]]


class SyncError(Exception):
    """A company could not be synchronized."""


def env_credentials(company: CompanyConfig) -> Credentials:
    """Credentials from the config plus the password environment variable."""
    return company.url, company.user, os.environ.get(company.password_env, "")


def synchronize_company(
    company: CompanyConfig,
    *,
    year: int,
    table: Optional[ClassificationTable] = None,
    fetch_credentials: CredentialsFetcher = env_credentials,
    fetch_rows: RowsFetcher = fetch_trial_balance,
    timeout: float = 60,
    current_result_in_equity: bool = False,
    currencies: Optional[tuple[str, ...]] = DEFAULT_CURRENCIES,
) -> dict[str, Any]:
    """Fetch and process one company's trial balance.

    Returns:
        The statements document with ``lastSync`` (UTC ISO-8601), ``year``
        and ``rowCount`` attached.

    Raises:
        SyncError: if url, user or password is missing.
        AbraFlexiError: propagated from the fetch function.
    """
    url, user, password = fetch_credentials(company)
    if not url or not user or not password:
        raise SyncError(f"Missing AbraFlexi credentials for company {company.name}")

    logger.info("Fetching trial balance of %s for %s", company.id, year)
    raw = fetch_rows(url, user, password, year, timeout=timeout)
    rows = parse_rows(raw)

    statements = aggregate(
        rows,
        table,
        current_result_in_equity=current_result_in_equity,
        currencies=currencies,
    )
    document = statements.to_document()
    document["year"] = year
    document["rowCount"] = len(rows)
    document["lastSync"] = datetime.now(timezone.utc).isoformat()
    logger.info("Processed %d accounts for %s", len(rows), company.id)
    return document


def run_company_sync(
    config: AppConfig,
    company_id: str,
    *,
    fetch_credentials: CredentialsFetcher = env_credentials,
    fetch_rows: RowsFetcher = fetch_trial_balance,
    table: Optional[ClassificationTable] = None,
) -> dict[str, Any]:
    """Synchronize one configured company and store its ``latest`` document.

    Raises:
        SyncError: if the company is unknown or has no credentials.
    """
    company = config.company(company_id)
    if company is None:
        raise SyncError(f"Company not found: {company_id}")

    logger.info("Manual sync triggered for company: %s", company_id)
    if table is None:
        table = load_classification_table(config)
    document = synchronize_company(
        company,
        year=config.year,
        table=table,
        fetch_credentials=fetch_credentials,
        fetch_rows=fetch_rows,
        timeout=config.timeout,
        current_result_in_equity=config.current_result_in_equity,
        currencies=config.currencies,
    )
    init_storage(config.storage)
    put_document(config.storage, company.id, LATEST_KEY, document)
    logger.info("Successfully synced data for company: %s", company_id)
    return document


def run_all_companies_sync(
    config: AppConfig,
    *,
    fetch_credentials: CredentialsFetcher = env_credentials,
    fetch_rows: RowsFetcher = fetch_trial_balance,
) -> dict[str, bool]:
    """Synchronize every company that has API credentials configured.

    A failing company is logged and does not stop the others.

    Returns:
        Mapping company id -> success flag (skipped companies are absent).
    """
    logger.info("Starting sync for all companies.")
    table = load_classification_table(config)
    results: dict[str, bool] = {}
    for company in config.companies:
        if not company.has_credentials:
            logger.info("Skipping %s: no AbraFlexi url/user configured", company.id)
            continue
        try:
            run_company_sync(
                config,
                company.id,
                fetch_credentials=fetch_credentials,
                fetch_rows=fetch_rows,
                table=table,
            )
        except Exception:
            logger.exception("Sync failed for %s", company.id)
            results[company.id] = False
        else:
            results[company.id] = True
    logger.info("Finished sync for all companies.")
    return results
