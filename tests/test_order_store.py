import json
import sqlite3

import pytest

from ordernest.data import database
from ordernest.data.order_records import normalize_order
from ordernest.data.order_store import SqliteOrderStore, StoreError


def _record(name="Ελένη", **overrides):
    record = {
        "afm": "123456789",
        "customer_name": name,
        "phone": "6912345678",
        "status": "pending",
        "discount": "none",
        "has_cookies": True,
        "product_details": {"cookies": [{"id": "c1", "type": "Βανίλια", "quantity": 10}]},
    }
    record.update(overrides)
    return record


def test_database_lives_under_configured_root(storage_root, store):
    assert database.get_database_path().parent == storage_root
    assert database.get_database_path().exists()


def test_insert_assigns_generated_fields(store):
    first = store.insert(_record())
    second = store.insert(_record(name="Γιώργος"))

    assert first["id"] and first["id"] != second["id"]
    assert (first["order_number"], second["order_number"]) == ("1", "2")
    assert first["created_at"] < second["created_at"]


def test_generated_fields_in_payload_are_ignored(store):
    row = store.insert(_record(id="chosen", order_number="999", created_at="2000-01-01T00:00:00+00:00"))

    assert row["id"] != "chosen"
    assert row["order_number"] == "1"
    assert not row["created_at"].startswith("2000")


def test_select_all_is_newest_first(store):
    names = ["Α", "Β", "Γ"]
    for name in names:
        store.insert(_record(name=name))

    assert [row["customer_name"] for row in store.select_all()] == list(reversed(names))


def test_rows_round_trip_through_normalizer(store):
    row = store.insert(_record(remarks="Χωρίς ξηρούς καρπούς", communication_method="Viber"))

    order = normalize_order(row)
    assert isinstance(row["product_details"], str)
    assert json.loads(row["product_details"])["cookies"][0]["type"] == "Βανίλια"
    assert order.line_items["cookies"][0].quantity == 10
    assert order.selection["cookies"] is True
    assert order.selection["sets"] is False
    assert order.remarks == "Χωρίς ξηρούς καρπούς"
    assert order.contact_method == "Viber"
    assert order.contact_value == ""


def test_update_changes_only_given_fields(store):
    row = store.insert(_record())

    updated = store.update(row["id"], {"status": "payment"})

    assert updated["status"] == "payment"
    assert updated["customer_name"] == row["customer_name"]
    assert updated["created_at"] == row["created_at"]


def test_update_and_delete_of_missing_order_fail(store):
    with pytest.raises(StoreError):
        store.update("missing", {"status": "payment"})
    with pytest.raises(StoreError):
        store.delete("missing")


def test_delete_removes_row(store):
    row = store.insert(_record())

    store.delete(row["id"])

    assert store.select_all() == []


def test_sqlite_errors_become_store_errors(store, monkeypatch):
    def broken_connection():
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr("ordernest.data.order_store.create_connection", broken_connection)

    with pytest.raises(StoreError, match="database is locked"):
        store.select_all()


def test_initialize_is_idempotent(storage_root):
    SqliteOrderStore()
    SqliteOrderStore()

    assert SqliteOrderStore(initialize=False).select_all() == []
