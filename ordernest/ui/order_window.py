from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import QModelIndex
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTableView,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from .. import config
from ..data import settings_repository
from ..models.order_models import Order
from ..services import order_printer, status_workflow
from ..services.order_service import OrderCollection, OrderServiceError
from ..viewmodels.table_models import OrderTableModel


_TONE_COLORS: Dict[str, str] = {
    "caution": "#b26a00",
    "progress": "#1565c0",
    "success": "#2e7d32",
    "alert": "#d32f2f",
    "neutral": "#555555",
}


class OrderListWindow(QMainWindow):
    def __init__(self, collection: OrderCollection) -> None:
        super().__init__()
        self.setWindowTitle(f"{config.APP_NAME} {config.APP_VERSION}")
        self.resize(1180, 760)

        self._collection = collection

        central = QWidget()
        layout = QVBoxLayout()
        central.setLayout(layout)
        self.setCentralWidget(central)

        filters_layout = QHBoxLayout()
        layout.addLayout(filters_layout)

        self._search_input = QLineEdit()
        self._search_input.setPlaceholderText("Αναζήτηση ονόματος, ΑΦΜ ή τηλεφώνου")
        self._search_input.textChanged.connect(lambda _text: self._apply_filters())
        filters_layout.addWidget(self._search_input, stretch=3)

        self._status_filter = QComboBox()
        for option in status_workflow.list_status_filters():
            self._status_filter.addItem(option.label, option.tag)
        self._status_filter.currentIndexChanged.connect(lambda _index: self._apply_filters())
        filters_layout.addWidget(self._status_filter, stretch=1)

        refresh_button = QPushButton("Ανανέωση")
        refresh_button.clicked.connect(self.reload)
        filters_layout.addWidget(refresh_button)

        self._model = OrderTableModel()
        self._table = QTableView()
        self._table.setModel(self._model)
        self._configure_table(self._table)
        layout.addWidget(self._table, stretch=3)

        selection = self._table.selectionModel()
        if selection is not None:
            selection.currentChanged.connect(self._on_selection_changed)

        self._detail_view = QTextBrowser()
        layout.addWidget(self._detail_view, stretch=2)

        controls_layout = QHBoxLayout()
        layout.addLayout(controls_layout)

        self._status_choice = QComboBox()
        for option in status_workflow.list_statuses():
            self._status_choice.addItem(option.label, option.tag)
        controls_layout.addWidget(self._status_choice)

        self._set_status_button = QPushButton("Αλλαγή κατάστασης")
        self._set_status_button.clicked.connect(self._handle_set_status)
        controls_layout.addWidget(self._set_status_button)

        self._export_button = QPushButton("Εκτύπωση")
        self._export_button.clicked.connect(self._handle_export)
        controls_layout.addWidget(self._export_button)

        self._delete_button = QPushButton("Διαγραφή")
        self._delete_button.clicked.connect(self._handle_delete)
        controls_layout.addWidget(self._delete_button)

        controls_layout.addStretch(1)

        self._message_label = QLabel()
        controls_layout.addWidget(self._message_label)

        self._update_action_buttons()
        self.reload()

    def reload(self) -> None:
        try:
            self._collection.load_all()
        except OrderServiceError as exc:
            self._show_status(f"Σφάλμα φόρτωσης: {exc}", "alert")
        self._apply_filters()

    def selected_order(self) -> Optional[Order]:
        return self._collection.detail

    def _apply_filters(self) -> None:
        term = self._search_input.text().strip()
        status_filter = self._status_filter.currentData() or status_workflow.STATUS_FILTER_ALL
        self._model.update_rows(self._collection.search(term, status_filter))
        self._collection.close_detail()
        self._show_detail(None)

    def _on_selection_changed(self, current: QModelIndex, _previous: QModelIndex) -> None:
        order = self._model.order_at(current.row()) if current.isValid() else None
        if order is None:
            self._collection.close_detail()
        else:
            self._collection.open_detail(order.id)
        self._show_detail(self._collection.detail)

    def _show_detail(self, order: Optional[Order]) -> None:
        if order is None:
            self._detail_view.clear()
        else:
            self._detail_view.setHtml(order_printer.render_order_html(order, settings_repository.get_app_settings()))
            index = self._status_choice.findData(order.status)
            if index >= 0:
                self._status_choice.setCurrentIndex(index)
        self._update_action_buttons()

    def _handle_set_status(self) -> None:
        order = self.selected_order()
        if order is None:
            return
        tag = self._status_choice.currentData()
        try:
            self._collection.set_status(order.id, tag)
        except OrderServiceError as exc:
            self._show_status(f"Η αλλαγή απέτυχε: {exc}", "alert")
            return

        self._show_status(status_workflow.status_label(tag), status_workflow.status_tone(tag))
        self._refresh_rows(keep=order.id)

    def _handle_export(self) -> None:
        order = self.selected_order()
        if order is None:
            return

        suggested_path = str(Path.home() / f"order_{order.display_label}.pdf")
        filename, _ = QFileDialog.getSaveFileName(
            self,
            "Εκτύπωση παραγγελίας",
            suggested_path,
            "PDF (*.pdf);;HTML (*.html)",
        )
        if not filename:
            return

        settings = settings_repository.get_app_settings()
        try:
            if filename.lower().endswith(".html"):
                path = order_printer.export_order_html(order, filename, settings)
            else:
                path = order_printer.export_order_pdf(order, filename, settings)
        except Exception as exc:  # noqa: BLE001
            self._show_status(f"Η εκτύπωση απέτυχε: {exc}", "alert")
            return

        self._show_status(f"Αποθηκεύτηκε: {path}", "success")

    def _handle_delete(self) -> None:
        order = self.selected_order()
        if order is None or self._collection.deleting:
            return
        if not self._confirm(f"Διαγραφή της παραγγελίας #{order.display_label};"):
            return

        try:
            self._collection.delete(order.id)
        except OrderServiceError as exc:
            self._show_status(f"Η διαγραφή απέτυχε: {exc}", "alert")
            return

        self._show_status(f"Η παραγγελία #{order.display_label} διαγράφηκε", "success")
        self._refresh_rows()

    def _refresh_rows(self, *, keep: Optional[str] = None) -> None:
        term = self._search_input.text().strip()
        status_filter = self._status_filter.currentData() or status_workflow.STATUS_FILTER_ALL
        self._model.update_rows(self._collection.search(term, status_filter))
        if keep is None:
            self._show_detail(self._collection.detail)
            return
        for row in range(self._model.rowCount()):
            candidate = self._model.order_at(row)
            if candidate is not None and candidate.id == keep:
                self._table.setCurrentIndex(self._model.index(row, 0))
                break
        self._show_detail(self._collection.detail)

    def _update_action_buttons(self) -> None:
        has_selection = self.selected_order() is not None
        self._set_status_button.setEnabled(has_selection)
        self._export_button.setEnabled(has_selection)
        self._delete_button.setEnabled(has_selection)

    def _show_status(self, message: str, tone: str) -> None:
        self._message_label.setStyleSheet(f"color: {_TONE_COLORS.get(tone, _TONE_COLORS['neutral'])};")
        self._message_label.setText(message)

    def _confirm(self, question: str) -> bool:
        answer = QMessageBox.question(self, config.APP_NAME, question)
        return answer == QMessageBox.StandardButton.Yes

    def _configure_table(self, table: QTableView) -> None:
        header = table.horizontalHeader()
        header.setStretchLastSection(True)
        header.setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        table.setAlternatingRowColors(True)
        table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)


def launch(collection: OrderCollection) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(config.APP_NAME)
    app.setApplicationVersion(config.APP_VERSION)
    window = OrderListWindow(collection)
    window.show()
    return app.exec()
