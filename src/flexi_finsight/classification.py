# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Account classification for Flexi FinSight.

A chart of accounts carries meaning in the account number itself: the first
digit is the account class, the first two digits the group, the first three
digits the synthetic account. This module resolves a raw account code to a
classification record describing how the account feeds the financial
statements.

Classification records come in two shapes:

- SingleClassification:
    the account always feeds one statement line (``category``) with a fixed
    nature (asset, liability, cost, revenue or closing account).

- DualClassification:
    the account's role depends on the sign of its balance. A positive
    (debit) balance is an asset and feeds ``asset_category``; a zero or
    negative (credit) balance is a liability and feeds
    ``liability_category``. Typical examples are bank accounts that can be
    overdrawn or VAT settlement accounts.

Lookup rule
-----------
The table is keyed by 1-, 2- or 3-character prefixes. ``classify()`` tries
the first 3 characters of the code, then the first 2, then the first 1, and
returns the first match. Codes with no matching prefix are unclassified and
``classify()`` returns None; callers exclude them from the statements.

The table is immutable and can be shared between concurrent aggregations.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Union

import pandas as pd

MAX_PREFIX_LENGTH = 3


class Nature(str, Enum):
    """Economic nature of an account."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    COST = "Cost"
    REVENUE = "Revenue"
    DUAL_SIGN = "DualSign"
    CLOSING_ACCOUNT = "ClosingAccount"


@dataclass(frozen=True)
class SingleClassification:
    """Account feeding a single statement line.

    Attributes:
        nature: Asset, Liability, Cost, Revenue or ClosingAccount.
        category: Statement line key (e.g. 'financial_cash', 'costs_services').
            Empty for closing accounts.
        taxable: Informational flag (tax-deductible cost / taxable revenue).
        label: Human-readable name of the account group.
    """

    nature: Nature
    category: str
    taxable: bool = True
    label: str = ""


@dataclass(frozen=True)
class DualClassification:
    """Account whose balance sign decides between an asset and a liability."""

    asset_category: str
    liability_category: str
    taxable: bool = True
    label: str = ""

    @property
    def nature(self) -> Nature:
        return Nature.DUAL_SIGN


Classification = Union[SingleClassification, DualClassification]


def normalize_account_code(code: object) -> str:
    """Return the bare account code used for table lookups.

    AbraFlexi references accounts as ``"code:221000"``; the scheme prefix is
    removed. None and empty values give "".
    """
    if code is None:
        return ""
    s = str(code).strip()
    if ":" in s:
        s = s.split(":", 1)[1].strip()
    return s


class ClassificationTable(Mapping):
    """Read-only mapping ``prefix -> Classification``.

    The table validates its keys at construction time (1 to 3 characters)
    and exposes the set of statement categories it can produce, which the
    aggregator uses to zero-fill its output.
    """

    def __init__(self, entries: Union[Mapping[str, Classification], Iterable]):
        items = entries.items() if isinstance(entries, Mapping) else entries
        data: dict[str, Classification] = {}
        for prefix, classification in items:
            key = str(prefix).strip()
            if not key or len(key) > MAX_PREFIX_LENGTH:
                raise ValueError(
                    f"Invalid account prefix {prefix!r}: expected 1 to "
                    f"{MAX_PREFIX_LENGTH} characters."
                )
            if key in data:
                raise ValueError(f"Duplicate account prefix {key!r}.")
            data[key] = classification
        self._data = MappingProxyType(data)

    def __getitem__(self, key: str) -> Classification:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ClassificationTable({len(self._data)} prefixes)"

    def lookup(self, code: str) -> Optional[Classification]:
        """Longest-prefix match over the first 3, 2 and 1 characters."""
        for length in range(MAX_PREFIX_LENGTH, 0, -1):
            if len(code) < length:
                continue
            found = self._data.get(code[:length])
            if found is not None:
                return found
        return None

    def categories(self, natures: Iterable[Nature]) -> list[str]:
        """Return the sorted statement categories produced by given natures."""
        wanted = set(natures)
        out: set[str] = set()
        for c in self._data.values():
            if isinstance(c, DualClassification):
                if Nature.DUAL_SIGN in wanted:
                    out.add(c.asset_category)
                    out.add(c.liability_category)
            elif c.nature in wanted and c.category:
                out.add(c.category)
        return sorted(out)

    @staticmethod
    def from_frame(df: pd.DataFrame) -> "ClassificationTable":
        """Build a table from a DataFrame.

        Required columns: prefix, nature. Depending on the nature:
            - category for Asset / Liability / Cost / Revenue,
            - asset_category and liability_category for DualSign.
        Optional columns: taxable (bool-like, default True), label.
        The prefix column must hold strings so that leading zeros survive.

        Raises:
            ValueError: on unknown natures, missing categories or a numeric
                prefix column.
        """
        df = df.copy()
        df.columns = [str(c).strip().lower() for c in df.columns]
        missing = {"prefix", "nature"} - set(df.columns)
        if missing:
            raise ValueError(
                f"Chart of accounts is missing column(s): {', '.join(sorted(missing))}."
            )
        if pd.api.types.is_numeric_dtype(df["prefix"]):
            # 021 read as a number is 21: the leading zero is already lost.
            raise ValueError(
                "Chart of accounts 'prefix' column must hold strings "
                "(read the CSV with dtype=str)."
            )
        df = df.fillna("")

        entries: list[tuple[str, Classification]] = []
        for _, r in df.iterrows():
            prefix = str(r["prefix"]).strip()
            raw_nature = str(r["nature"]).strip()
            try:
                nature = Nature(raw_nature)
            except ValueError as exc:
                raise ValueError(
                    f"Unknown nature {raw_nature!r} for prefix {prefix!r}."
                ) from exc

            taxable = _to_bool(r.get("taxable", ""), default=True)
            label = str(r.get("label", "")).strip()

            if nature is Nature.DUAL_SIGN:
                asset_cat = str(r.get("asset_category", "")).strip()
                liability_cat = str(r.get("liability_category", "")).strip()
                if not asset_cat or not liability_cat:
                    raise ValueError(
                        f"DualSign prefix {prefix!r} needs both asset_category "
                        "and liability_category."
                    )
                entries.append(
                    (prefix, DualClassification(asset_cat, liability_cat, taxable, label))
                )
                continue

            category = str(r.get("category", "")).strip()
            if not category and nature is not Nature.CLOSING_ACCOUNT:
                raise ValueError(f"Prefix {prefix!r} has no category.")
            entries.append(
                (prefix, SingleClassification(nature, category, taxable, label))
            )

        return ClassificationTable(entries)

    @staticmethod
    def from_csv(path: Union[str, Path]) -> "ClassificationTable":
        """Load a chart of accounts from a CSV file (see ``from_frame``)."""
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        return ClassificationTable.from_frame(df)


def _to_bool(value: object, default: bool) -> bool:
    s = str(value).strip().lower()
    if s in ("", "nan"):
        return default
    return s in ("1", "true", "yes", "y")


def classify(
    account_code: object, table: Optional[ClassificationTable] = None
) -> Optional[Classification]:
    """Resolve an account code to its classification.

    Args:
        account_code: Raw code, optionally prefixed with ``"code:"``.
        table: Classification table; defaults to the Slovak chart of accounts.

    Returns:
        The matching classification, or None when the code is empty or no
        3/2/1-character prefix is known.
    """
    if table is None:
        from .chart_sk import DEFAULT_TABLE

        table = DEFAULT_TABLE
    code = normalize_account_code(account_code)
    if not code:
        return None
    return table.lookup(code)
