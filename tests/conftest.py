from typing import Any, Dict, List, Optional

import pytest

from ordernest.data.order_store import SqliteOrderStore, StoreError
from ordernest.models.order_models import DraftLineItem, OrderDraft, empty_selection
from ordernest.services.order_service import OrderCollection


@pytest.fixture(autouse=True)
def storage_root(tmp_path, monkeypatch):
    """Point the sqlite storage directory at a per-test temporary folder."""
    root = tmp_path / "ordernest-home"
    monkeypatch.setenv("ORDERNEST_HOME", str(root))
    return root


@pytest.fixture
def store(storage_root):
    return SqliteOrderStore()


@pytest.fixture
def collection(store):
    return OrderCollection(store)


class RecordingStore:
    """Wraps a real store, records every call and fails the operations listed in ``failing``."""

    def __init__(self, inner: SqliteOrderStore) -> None:
        self.inner = inner
        self.failing: set = set()
        self.calls: List[tuple] = []

    def _enter(self, operation: str, session: Optional[object], payload: Any = None) -> None:
        self.calls.append((operation, session, payload))
        if operation in self.failing:
            raise StoreError(f"{operation} rejected by store")

    def select_all(self, *, session=None) -> List[Dict[str, Any]]:
        self._enter("select_all", session)
        return self.inner.select_all(session=session)

    def insert(self, record, *, session=None) -> Dict[str, Any]:
        self._enter("insert", session, dict(record))
        return self.inner.insert(record, session=session)

    def update(self, order_id, changes, *, session=None) -> Dict[str, Any]:
        self._enter("update", session, dict(changes))
        return self.inner.update(order_id, changes, session=session)

    def delete(self, order_id, *, session=None) -> None:
        self._enter("delete", session, order_id)
        self.inner.delete(order_id, session=session)


@pytest.fixture
def recording_store(store):
    return RecordingStore(store)


@pytest.fixture
def recording_collection(recording_store):
    return OrderCollection(recording_store)


def build_draft(
    name: str = "Μαρία Παπαδοπούλου",
    afm: str = "099999999",
    phone: str = "6900000000",
    items: Optional[Dict[str, List[tuple]]] = None,
    **fields: Any,
) -> OrderDraft:
    selection = empty_selection()
    line_items: Dict[str, List[DraftLineItem]] = {category: [] for category in selection}
    for category, entries in (items or {}).items():
        selection[category] = True
        line_items[category] = [
            DraftLineItem(product_type=product_type, quantity=quantity) for product_type, quantity in entries
        ]
    return OrderDraft(
        customer_name=name,
        customer_afm=afm,
        customer_phone=phone,
        selection=selection,
        line_items=line_items,
        **fields,
    )
