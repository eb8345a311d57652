from __future__ import annotations

import sqlite3
from pathlib import Path

from .. import config


_DB_FILE = "ordernest.db"


def _get_storage_directory() -> Path:
    target = config.storage_root()
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_database_path() -> Path:
    return _get_storage_directory() / _DB_FILE


def create_connection() -> sqlite3.Connection:
    connection = sqlite3.connect(get_database_path())
    connection.row_factory = sqlite3.Row
    _apply_pragmas(connection)
    return connection


def _apply_pragmas(connection: sqlite3.Connection) -> None:
    cursor = connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON;")
    cursor.execute("PRAGMA journal_mode = WAL;")
    cursor.close()


def initialize() -> None:
    with create_connection() as connection:
        cursor = connection.cursor()
        cursor.executescript(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS orders (
                id TEXT PRIMARY KEY,
                order_number TEXT,
                afm TEXT,
                customer_name TEXT,
                phone TEXT,
                order_for TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                discount TEXT NOT NULL DEFAULT 'none',
                has_cookies INTEGER NOT NULL DEFAULT 0,
                has_figures INTEGER NOT NULL DEFAULT 0,
                has_sets INTEGER NOT NULL DEFAULT 0,
                has_toppers INTEGER NOT NULL DEFAULT 0,
                has_prints INTEGER NOT NULL DEFAULT 0,
                has_other INTEGER NOT NULL DEFAULT 0,
                product_details TEXT NOT NULL DEFAULT '{}',
                created_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_orders_created_at
            ON orders(created_at);
            """
        )

        _ensure_column(connection, "orders", "remarks", "TEXT")
        _ensure_column(connection, "orders", "communication_method", "TEXT")
        _ensure_column(connection, "orders", "communication_value", "TEXT")

        cursor.close()
        connection.commit()


def _ensure_column(connection: sqlite3.Connection, table: str, column: str, definition: str) -> None:
    info = connection.execute(f"PRAGMA table_info({table});").fetchall()
    if not any(row[1] == column for row in info):
        connection.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition};")
