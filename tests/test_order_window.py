import os

import pytest

pytest.importorskip("PySide6.QtWidgets")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from ordernest.ui.order_window import OrderListWindow  # noqa: E402

from conftest import build_draft  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(qt_app, collection):
    collection.create(build_draft(name="Άννα Γεωργίου", items={"cookies": [("Βανίλια", "10")]}))
    collection.create(build_draft(name="Κώστας Νικολάου"))
    window = OrderListWindow(collection)
    yield window
    window.close()


def _select(window, row):
    window._table.setCurrentIndex(window._model.index(row, 0))


def test_lists_orders_newest_first(window):
    assert window._model.rowCount() == 2
    assert window._model.order_at(0).customer_name == "Κώστας Νικολάου"
    assert window.selected_order() is None


def test_search_and_status_filter(window):
    window._search_input.setText("άννα")
    assert window._model.rowCount() == 1

    window._search_input.setText("")
    window._status_filter.setCurrentIndex(window._status_filter.findData("shipped"))
    assert window._model.rowCount() == 0


def test_selection_shows_printable_detail(window):
    _select(window, 1)

    assert window.selected_order().customer_name == "Άννα Γεωργίου"
    assert "Βανίλια - 10 τεμάχια" in window._detail_view.toPlainText()
    assert window._delete_button.isEnabled()


def test_set_status_keeps_selection(window, collection):
    _select(window, 0)
    target = window.selected_order()

    window._status_choice.setCurrentIndex(window._status_choice.findData("payment"))
    window._handle_set_status()

    assert collection.get(target.id).status == "payment"
    assert window.selected_order().id == target.id
    assert window._model.data(window._model.index(0, 8)) == "Πληρωμή"


def test_delete_asks_first(window, collection, monkeypatch):
    _select(window, 0)
    target = window.selected_order()

    monkeypatch.setattr(window, "_confirm", lambda _question: False)
    window._handle_delete()
    assert collection.get(target.id) is not None

    monkeypatch.setattr(window, "_confirm", lambda _question: True)
    window._handle_delete()
    assert collection.get(target.id) is None
    assert window._model.rowCount() == 1
    assert window.selected_order() is None


def test_load_failure_is_reported(qt_app, recording_store, recording_collection):
    recording_store.failing.add("select_all")

    window = OrderListWindow(recording_collection)

    assert "select_all rejected by store" in window._message_label.text()
    assert window._model.rowCount() == 0
    window.close()
