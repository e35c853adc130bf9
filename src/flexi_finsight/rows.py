# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Trial balance rows for Flexi FinSight.

AbraFlexi's ``stav-uctu`` (account balance) endpoint returns one record per
account and accounting year. Field names are built from a month suffix:

    ucet          account code, usually "code:221000"
    mena          currency reference, e.g. "code:EUR"
    nazev         account name (optional)
    pocatek       opening balance of the year
    obratMdNN     debit turnover of month NN (01..12)
    obratDalNN    credit turnover of month NN
    stavNN        closing balance at the end of month NN

Amounts may be JSON numbers or strings with a decimal comma.

This module converts these loosely-typed payloads once, at ingestion, into
``RawAccountRow`` objects carrying a fixed tuple of 12 ``MonthlyMovement``
values. Everything downstream (engine, views) works with these typed rows.

Output schema of ``rows_to_frame``
----------------------------------
One line per (account, month) with columns:

    account, name, month, opening_balance, debit, credit, closing_balance
"""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

import pandas as pd

from .amounts import parse_number
from .classification import normalize_account_code

logger = logging.getLogger(__name__)

MONTHS = 12

FRAME_COLUMNS = [
    "account",
    "name",
    "month",
    "opening_balance",
    "debit",
    "credit",
    "closing_balance",
]


@dataclass(frozen=True)
class MonthlyMovement:
    """Turnovers and closing balance of one account for one month."""

    debit: float = 0.0
    credit: float = 0.0
    balance: float = 0.0


@dataclass(frozen=True)
class RawAccountRow:
    """One account's trial balance for a reporting year.

    Attributes:
        account: Account code without the "code:" prefix ("" when missing).
        currency: Currency code without the "code:" prefix.
        opening: Opening balance of the year.
        months: Exactly 12 MonthlyMovement values, January first.
        name: Account name when AbraFlexi provides it.
    """

    account: str
    currency: str
    opening: float
    months: tuple[MonthlyMovement, ...]
    name: str = ""

    def __post_init__(self) -> None:
        if len(self.months) != MONTHS:
            raise ValueError(
                f"RawAccountRow needs {MONTHS} monthly movements, "
                f"got {len(self.months)}."
            )


def _month_suffix(month: int) -> str:
    return f"{month:02d}"


def parse_row(payload: Mapping[str, Any]) -> RawAccountRow:
    """Build a RawAccountRow from one AbraFlexi record.

    Missing or malformed numeric fields become 0.0; a missing ``ucet`` gives
    an empty account code, which no classification table matches.
    """
    months = tuple(
        MonthlyMovement(
            debit=parse_number(payload.get(f"obratMd{_month_suffix(m)}")),
            credit=parse_number(payload.get(f"obratDal{_month_suffix(m)}")),
            balance=parse_number(payload.get(f"stav{_month_suffix(m)}")),
        )
        for m in range(1, MONTHS + 1)
    )
    name = payload.get("nazev")
    return RawAccountRow(
        account=normalize_account_code(payload.get("ucet")),
        currency=normalize_account_code(payload.get("mena")),
        opening=parse_number(payload.get("pocatek")),
        months=months,
        name=str(name).strip() if name is not None else "",
    )


def parse_rows(payloads: Optional[Iterable[Any]]) -> list[RawAccountRow]:
    """Parse a list of AbraFlexi records, skipping anything that is not a dict."""
    if payloads is None:
        return []
    rows: list[RawAccountRow] = []
    for i, payload in enumerate(payloads):
        if not isinstance(payload, Mapping):
            logger.debug("Skipping trial balance record #%d: not an object", i)
            continue
        rows.append(parse_row(payload))
    return rows


def extract_records(document: Any) -> list[Any]:
    """Return the list of ``stav-uctu`` records from an AbraFlexi document.

    Accepts either the raw list or the full ``{"winstrom": {...}}`` envelope.

    Raises:
        ValueError: if the document has neither shape.
    """
    if isinstance(document, list):
        return document
    if isinstance(document, Mapping):
        winstrom = document.get("winstrom", document)
        if isinstance(winstrom, Mapping):
            records = winstrom.get("stav-uctu", [])
            if isinstance(records, list):
                return records
    raise ValueError(
        "Invalid trial balance document. Expected a list of records or a "
        '{"winstrom": {"stav-uctu": [...]}} envelope.'
    )


def read_rows_json(path: Union[str, "os.PathLike[str]"]) -> list[RawAccountRow]:
    """Read a saved AbraFlexi ``stav-uctu`` response from a JSON file.

    Raises:
        ValueError: if the file is not valid JSON or has an unexpected shape.
    """
    with open(path, encoding="utf-8") as fh:
        try:
            document = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in trial balance file: {path}") from exc
    return parse_rows(extract_records(document))


def rows_to_frame(rows: Iterable[RawAccountRow]) -> pd.DataFrame:
    """Flatten rows into a long DataFrame (one line per account and month).

    The opening balance of month 1 is the year's opening balance; the
    opening balance of any later month is the previous month's closing
    balance.
    """
    out = []
    for row in rows:
        opening = row.opening
        for month, movement in enumerate(row.months, start=1):
            out.append(
                {
                    "account": row.account,
                    "name": row.name,
                    "month": month,
                    "opening_balance": opening,
                    "debit": movement.debit,
                    "credit": movement.credit,
                    "closing_balance": movement.balance,
                }
            )
            opening = movement.balance
    return pd.DataFrame(out, columns=FRAME_COLUMNS)
