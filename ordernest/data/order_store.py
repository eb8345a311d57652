"""Document-store access for the ``orders`` record set.

Stores speak raw records (snake-case dictionaries); conversion to
:class:`~ordernest.models.order_models.Order` happens in ``order_records``.
Every call accepts an opaque ``session`` token from the account service. The
bundled sqlite store runs locally and ignores it.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol
from uuid import uuid4

from ..models.order_models import PRODUCT_CATEGORIES
from . import database, settings_repository
from .database import create_connection
from .order_records import format_timestamp, selection_column


logger = logging.getLogger(__name__)

_COLUMNS: List[str] = [
    "id",
    "order_number",
    "afm",
    "customer_name",
    "phone",
    "order_for",
    "remarks",
    "communication_method",
    "communication_value",
    "status",
    "discount",
    *[selection_column(category) for category in PRODUCT_CATEGORIES],
    "product_details",
    "created_at",
]

_GENERATED_COLUMNS = {"id", "order_number", "created_at"}
_WRITABLE_COLUMNS = [column for column in _COLUMNS if column not in _GENERATED_COLUMNS]
_FLAG_COLUMNS = {selection_column(category) for category in PRODUCT_CATEGORIES}


class StoreError(Exception):
    """Raised by a store when a query or write is rejected."""


class OrderStore(Protocol):
    def select_all(self, *, session: Optional[object] = None) -> List[Dict[str, Any]]:
        """Return every order record, newest ``created_at`` first."""
        ...

    def insert(self, record: Mapping[str, Any], *, session: Optional[object] = None) -> Dict[str, Any]:
        ...

    def update(
        self,
        order_id: str,
        changes: Mapping[str, Any],
        *,
        session: Optional[object] = None,
    ) -> Dict[str, Any]:
        ...

    def delete(self, order_id: str, *, session: Optional[object] = None) -> None:
        ...


class SqliteOrderStore:
    def __init__(self, *, initialize: bool = True) -> None:
        if initialize:
            database.initialize()

    def select_all(self, *, session: Optional[object] = None) -> List[Dict[str, Any]]:
        try:
            with create_connection() as connection:
                rows = connection.execute(
                    f"""
                    SELECT {", ".join(_COLUMNS)}
                    FROM orders
                    ORDER BY created_at DESC
                    """
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

        logger.debug("Fetched %d order records", len(rows))
        return [_row_to_record(row) for row in rows]

    def insert(self, record: Mapping[str, Any], *, session: Optional[object] = None) -> Dict[str, Any]:
        order_id = uuid4().hex
        values = _writable_values(record)
        try:
            order_number = settings_repository.reserve_next_order_number()
            with create_connection() as connection:
                columns = ["id", "order_number", "created_at", *values.keys()]
                placeholders = ", ".join("?" for _ in columns)
                connection.execute(
                    f"INSERT INTO orders ({', '.join(columns)}) VALUES ({placeholders})",
                    (
                        order_id,
                        order_number,
                        format_timestamp(datetime.now(timezone.utc)),
                        *values.values(),
                    ),
                )
                connection.commit()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

        logger.info("Inserted order %s (#%s)", order_id, order_number)
        return self._fetch(order_id)

    def update(
        self,
        order_id: str,
        changes: Mapping[str, Any],
        *,
        session: Optional[object] = None,
    ) -> Dict[str, Any]:
        values = _writable_values(changes)
        if values:
            assignments = ", ".join(f"{column} = ?" for column in values)
            try:
                with create_connection() as connection:
                    cursor = connection.execute(
                        f"UPDATE orders SET {assignments} WHERE id = ?",
                        (*values.values(), str(order_id)),
                    )
                    updated = cursor.rowcount
                    connection.commit()
            except sqlite3.Error as exc:
                raise StoreError(str(exc)) from exc
            if updated == 0:
                raise StoreError(f"Order {order_id} not found")

        logger.info("Updated order %s fields=%s", order_id, sorted(values))
        return self._fetch(order_id)

    def delete(self, order_id: str, *, session: Optional[object] = None) -> None:
        try:
            with create_connection() as connection:
                cursor = connection.execute("DELETE FROM orders WHERE id = ?", (str(order_id),))
                deleted = cursor.rowcount
                connection.commit()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        if deleted == 0:
            raise StoreError(f"Order {order_id} not found")
        logger.info("Deleted order %s", order_id)

    def _fetch(self, order_id: str) -> Dict[str, Any]:
        try:
            with create_connection() as connection:
                row = connection.execute(
                    f"SELECT {', '.join(_COLUMNS)} FROM orders WHERE id = ? LIMIT 1",
                    (str(order_id),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        if row is None:
            raise StoreError(f"Order {order_id} not found")
        return _row_to_record(row)


def _writable_values(record: Mapping[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for column in _WRITABLE_COLUMNS:
        if column not in record:
            continue
        value = record[column]
        if column == "product_details":
            value = json.dumps(value or {}, ensure_ascii=False)
        elif column in _FLAG_COLUMNS:
            value = 1 if value else 0
        values[column] = value
    return values


def _row_to_record(row: sqlite3.Row) -> Dict[str, Any]:
    record = {column: row[column] for column in _COLUMNS}
    for column in _FLAG_COLUMNS:
        record[column] = bool(record[column])
    return record
