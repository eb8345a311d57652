"""In-memory order list kept in step with the order store.

The cached list changes only after the store has confirmed a call. A failed
call leaves the cache as it was and raises :class:`LoadError` or
:class:`WriteError` with the store's message; nothing is retried here.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Callable, List, Optional

from ..data.order_records import normalize_order, serialize_draft
from ..data.order_store import OrderStore, StoreError
from ..models.order_models import Order, OrderDraft
from . import status_workflow


logger = logging.getLogger(__name__)


class OrderServiceError(Exception):
    """Base class for failures reported by :class:`OrderCollection`."""


class LoadError(OrderServiceError):
    """The order listing could not be fetched."""


class WriteError(OrderServiceError):
    """An insert, update or delete was rejected."""


class OrderCollection:
    def __init__(self, store: OrderStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self.orders: List[Order] = []
        self.detail: Optional[Order] = None
        self.load_error: Optional[str] = None
        self.loading = False
        self.deleting = False

    def load_all(self, *, session: Optional[object] = None) -> List[Order]:
        self.loading = True
        try:
            records = self._store.select_all(session=session)
        except StoreError as exc:
            self.load_error = str(exc)
            logger.warning("Loading orders failed: %s", exc)
            raise LoadError(str(exc)) from exc
        finally:
            self.loading = False

        orders = [normalize_order(record) for record in records]
        with self._lock:
            self.orders = orders
            self.load_error = None
        logger.debug("Loaded %d orders", len(orders))
        return list(orders)

    def search(self, term: str = "", status_filter: str = status_workflow.STATUS_FILTER_ALL) -> List[Order]:
        needle = term or ""
        lowered = needle.lower()
        return [
            order
            for order in self.orders
            if (
                lowered in order.customer_name.lower()
                or needle in order.customer_afm
                or needle in order.customer_phone
            )
            and status_workflow.matches_status_filter(order.status, status_filter)
        ]

    def get(self, order_id: str) -> Optional[Order]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def create(self, draft: OrderDraft, *, session: Optional[object] = None) -> Order:
        record = serialize_draft(draft)
        record["status"] = status_workflow.initial_status()
        row = self._write("create", lambda: self._store.insert(record, session=session))

        created = normalize_order(row)
        with self._lock:
            self.orders = [created, *self.orders]
        logger.info("Created order %s", created.display_label)
        return created

    def update(self, order_id: str, draft: OrderDraft, *, session: Optional[object] = None) -> Order:
        changes = serialize_draft(draft)
        row = self._write("update", lambda: self._store.update(order_id, changes, session=session))

        updated = normalize_order(row)
        with self._lock:
            self._replace_cached(order_id, lambda _existing: updated)
        logger.info("Updated order %s", updated.display_label)
        return updated

    def set_status(
        self,
        order_id: str,
        new_status: str,
        *,
        session: Optional[object] = None,
    ) -> Optional[Order]:
        """Persist a new status tag; any tag may follow any other.

        ``completed`` is stored as ``shipped``. Other unknown tags raise
        ``ValueError`` before the store is called.
        """
        status = status_workflow.resolve_status_change(new_status)
        self._write(
            "status change",
            lambda: self._store.update(order_id, {"status": status}, session=session),
        )

        with self._lock:
            changed = self._replace_cached(order_id, lambda existing: replace(existing, status=status))
        logger.info("Order %s status set to %s", order_id, status)
        return changed

    def delete(self, order_id: str, *, session: Optional[object] = None) -> None:
        if self.deleting:
            raise WriteError("A delete is already in progress")

        self.deleting = True
        try:
            self._write("delete", lambda: self._store.delete(order_id, session=session))
        finally:
            self.deleting = False

        with self._lock:
            self.orders = [order for order in self.orders if order.id != order_id]
            if self.detail is not None and self.detail.id == order_id:
                self.detail = None
        logger.info("Deleted order %s", order_id)

    def open_detail(self, order_id: str) -> Optional[Order]:
        self.detail = self.get(order_id)
        return self.detail

    def close_detail(self) -> None:
        self.detail = None

    def _write(self, action: str, call: Callable[[], Any]) -> Any:
        try:
            return call()
        except StoreError as exc:
            logger.warning("Order %s failed: %s", action, exc)
            raise WriteError(str(exc)) from exc

    def _replace_cached(self, order_id: str, change: Callable[[Order], Order]) -> Optional[Order]:
        replaced: Optional[Order] = None
        refreshed: List[Order] = []
        for order in self.orders:
            if order.id == order_id:
                order = change(order)
                replaced = order
            refreshed.append(order)
        self.orders = refreshed

        if self.detail is not None and self.detail.id == order_id:
            self.detail = replaced if replaced is not None else change(self.detail)
        return replaced
