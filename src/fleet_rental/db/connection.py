"""Database connection helpers."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fleet_rental.config import DB_BUSY_TIMEOUT_SECONDS

MEMORY_DATABASE = ":memory:"


def get_connection(
    database_path: Path | str, timeout: float = DB_BUSY_TIMEOUT_SECONDS
) -> sqlite3.Connection:
    """Open the store with foreign keys on.

    File databases run in WAL mode. ``timeout`` bounds the wait for another
    connection's write lock.
    """
    connection = sqlite3.connect(database_path, timeout=timeout)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON;")
    if str(database_path) != MEMORY_DATABASE:
        connection.execute("PRAGMA journal_mode = WAL;")
    return connection


@contextmanager
def transaction(connection: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Provide a transaction scope for SQLite operations."""
    try:
        yield connection
    except Exception:
        connection.rollback()
        raise
    else:
        connection.commit()


@contextmanager
def write_lock(connection: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Transaction that takes the database write lock before the first read.

    Used where a check and the write that depends on it must not interleave
    with another connection doing the same.
    """
    if connection.in_transaction:
        connection.commit()
    connection.execute("BEGIN IMMEDIATE")
    with transaction(connection):
        yield connection
