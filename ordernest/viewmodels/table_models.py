from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ..models.order_models import Order
from ..services.order_metrics import product_summary, total_cookies
from ..services.order_printer import format_display_date
from ..services.status_workflow import status_label, status_tone


ColumnAccessor = Callable[[Order], object]

TONE_ROLE = int(Qt.ItemDataRole.UserRole) + 1

ORDER_COLUMNS: List[tuple[str, ColumnAccessor]] = [
    ("#", lambda order: order.display_label),
    ("Πελάτης", lambda order: order.customer_name),
    ("ΑΦΜ", lambda order: order.customer_afm),
    ("Τηλέφωνο", lambda order: order.customer_phone),
    ("Προϊόντα", product_summary),
    ("Σύνολο μπισκότα", lambda order: total_cookies(order) or ""),
    ("Ημερομηνία", lambda order: format_display_date(order.created_at)),
    ("Παράδοση", lambda order: format_display_date(order.delivery_date) if order.delivery_date else ""),
    ("Κατάσταση", lambda order: status_label(order.status)),
]


class OrderTableModel(QAbstractTableModel):
    def __init__(
        self,
        rows: Iterable[Order] | None = None,
        columns: Sequence[tuple[str, ColumnAccessor]] = ORDER_COLUMNS,
    ) -> None:
        super().__init__()
        self._columns: List[tuple[str, ColumnAccessor]] = list(columns)
        self._rows: List[Order] = list(rows or [])

    def rowCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802
        if parent and parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802
        return len(self._columns)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> object | None:  # noqa: N802
        if not index.isValid() or not (0 <= index.row() < len(self._rows)):
            return None

        order = self._rows[index.row()]
        if role in (Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.EditRole):
            _, accessor = self._columns[index.column()]
            value = accessor(order)
            return "" if value is None else value

        if role == TONE_ROLE:
            return status_tone(order.status)

        if role == Qt.ItemDataRole.TextAlignmentRole:
            return int(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)

        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> object | None:  # noqa: N802
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            title, _ = self._columns[section]
            return title
        return super().headerData(section, orientation, role)

    def order_at(self, row: int) -> Optional[Order]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    def update_rows(self, rows: Iterable[Order]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def clear(self) -> None:
        self.update_rows([])
