# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Document storage for Flexi FinSight.

Processed statements are stored as opaque JSON documents, one per
(company_id, key) pair. The sync pipeline writes the ``"latest"`` document
of a company after each successful run; the CLI and presentation layers
read it back.

------------------------------------------------------------------------------
Schema
------------------------------------------------------------------------------

    documents(
        company_id  TEXT NOT NULL,
        doc_key     TEXT NOT NULL,
        payload     TEXT NOT NULL,   -- JSON
        updated_at  TEXT NOT NULL,   -- ISO-8601 UTC
        PRIMARY KEY (company_id, doc_key)
    )

Writes are upserts: when two runs for the same company overlap, the last
write wins.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class StorageConfig:
    """
    Storage configuration.

    Attributes
    ----------
    engine:
        Storage engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


def _ensure_sqlite(cfg: StorageConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported storage engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: StorageConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def init_storage(cfg: StorageConfig) -> None:
    """
    Create the database file and the ``documents`` table if needed.

    Idempotent: safe to call before every command.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)
    conn = _connect(cfg)
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                company_id  TEXT NOT NULL,
                doc_key     TEXT NOT NULL,
                payload     TEXT NOT NULL,
                updated_at  TEXT NOT NULL,
                PRIMARY KEY (company_id, doc_key)
            );
            """
        )
        conn.commit()
    finally:
        conn.close()


def put_document(
    cfg: StorageConfig, company_id: str, key: str, document: dict[str, Any]
) -> None:
    """Insert or replace the document stored under (company_id, key)."""
    payload = json.dumps(document, ensure_ascii=False, sort_keys=False)
    conn = _connect(cfg)
    try:
        conn.execute(
            """
            INSERT INTO documents (company_id, doc_key, payload, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (company_id, doc_key) DO UPDATE SET
                payload = excluded.payload,
                updated_at = excluded.updated_at;
            """,
            (company_id, key, payload, _utc_now()),
        )
        conn.commit()
    finally:
        conn.close()


def get_document(
    cfg: StorageConfig, company_id: str, key: str = "latest"
) -> dict[str, Any] | None:
    """Return the stored document, or None when nothing was stored yet."""
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            "SELECT payload FROM documents WHERE company_id = ? AND doc_key = ?;",
            (company_id, key),
        )
        row = cur.fetchone()
    finally:
        conn.close()
    if row is None:
        return None
    return json.loads(row[0])


def list_documents(cfg: StorageConfig) -> pd.DataFrame:
    """
    List stored documents (without payloads).

    Returns
    -------
    pandas.DataFrame
        Columns: company_id, key, updated_at; ordered by company and key.
    """
    conn = _connect(cfg)
    try:
        df = pd.read_sql_query(
            """
            SELECT company_id, doc_key AS key, updated_at
            FROM documents
            ORDER BY company_id, doc_key;
            """,
            conn,
        )
    finally:
        conn.close()
    return df
