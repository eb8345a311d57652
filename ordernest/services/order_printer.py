from __future__ import annotations

import html
import logging
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from ..models.order_models import AppSettings, Order
from .order_metrics import selected_categories, total_cookies
from .status_workflow import status_label


logger = logging.getLogger(__name__)

_DEFAULT_SETTINGS = AppSettings(business_name="OrderNest")
_GUI_APPLICATION = None


def format_display_date(value: date) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.day}/{value.month}/{value.year}"


def format_discount(discount: str) -> str:
    if discount == "none":
        return "Χωρίς έκπτωση"
    return f"{discount}%"


def render_order_html(order: Order, settings: Optional[AppSettings] = None) -> str:
    settings = settings or _DEFAULT_SETTINGS
    accent = html.escape(settings.print_accent_color)
    font_family = html.escape(settings.print_font_family)

    customer_lines: List[str] = [
        _field("Όνομα", order.customer_name),
        _field("ΑΦΜ", order.customer_afm),
        _field("Τηλέφωνο", order.customer_phone),
    ]
    if order.delivery_date is not None:
        customer_lines.append(_field("Ημερομηνία Παράδοσης", format_display_date(order.delivery_date)))
    if order.has_contact:
        customer_lines.append(_field("Επικοινωνία", f"{order.contact_method}: {order.contact_value}"))

    product_sections: List[str] = []
    for _category, label, items in selected_categories(order):
        if not items:
            continue
        rows = "".join(
            f"<li>{html.escape(item.product_type)} - {int(item.quantity)} τεμάχια</li>"
            for item in items
        )
        product_sections.append(f"<h3>{html.escape(label)}:</h3><ul>{rows}</ul>")

    sections: List[str] = [
        f'<h1 style="text-align: center; color: {accent};">Παραγγελία #{html.escape(order.display_label)}</h1>',
        '<hr style="margin: 20px 0;">',
        "<h2>Στοιχεία Πελάτη:</h2>",
        "".join(customer_lines),
    ]

    if order.remarks.strip():
        remarks = html.escape(order.remarks.strip()).replace("\n", "<br>")
        sections.append(f"<h2>Παρατηρήσεις:</h2><p>{remarks}</p>")

    sections.append("<h2>Προϊόντα:</h2>")
    sections.append("".join(product_sections))

    cookies = total_cookies(order)
    if cookies > 0:
        sections.append(
            "<h2>Συνολικά Μπισκότα:</h2>"
            f'<p style="font-size: 18px; font-weight: bold; color: {accent};">{cookies} τεμάχια</p>'
        )

    sections.append(f"<h2>Έκπτωση:</h2><p>{html.escape(format_discount(order.discount))}</p>")
    sections.append(f"<h2>Ημερομηνία:</h2><p>{format_display_date(order.created_at)}</p>")
    sections.append(f"<h2>Κατάσταση:</h2><p>{html.escape(status_label(order.status))}</p>")

    return """<!DOCTYPE html>
<html lang="el">
<head>
    <meta charset="utf-8" />
    <title>{business} - Παραγγελία #{number}</title>
</head>
<body>
    <div style="font-family: {font_family}, sans-serif; padding: 20px;">
        {body}
    </div>
</body>
</html>
""".format(
        business=html.escape(settings.business_name),
        number=html.escape(order.display_label),
        font_family=font_family,
        body="\n        ".join(sections),
    )


def export_order_html(order: Order, destination: str, settings: Optional[AppSettings] = None) -> Path:
    path = _prepare_destination(destination, ".html")
    path.write_text(render_order_html(order, settings), encoding="utf-8")
    logger.info("Order %s printed to %s", order.display_label, path)
    return path


def export_order_pdf(order: Order, destination: str, settings: Optional[AppSettings] = None) -> Path:
    path = _prepare_destination(destination, ".pdf")
    _write_pdf_from_html(render_order_html(order, settings), path, settings or _DEFAULT_SETTINGS)
    logger.info("Order %s printed to %s", order.display_label, path)
    return path


def _field(label: str, value: str) -> str:
    return f"<p><strong>{html.escape(label)}:</strong> {html.escape(value)}</p>"


def _prepare_destination(destination: str, suffix: str) -> Path:
    path = Path(destination).expanduser()
    if path.suffix.lower() != suffix:
        path = path.with_suffix(suffix)
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _write_pdf_from_html(html_content: str, path: Path, settings: AppSettings) -> None:
    from PySide6.QtCore import QSizeF
    from PySide6.QtGui import QFont, QPageSize, QPdfWriter, QTextDocument

    _ensure_gui_application()

    pdf_writer = QPdfWriter(str(path))
    pdf_writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
    pdf_writer.setResolution(144)

    document = QTextDocument()
    document.setDocumentMargin(36)
    document.setDefaultFont(QFont(settings.print_font_family, 11))
    document.setHtml(html_content)
    document.setPageSize(QSizeF(pdf_writer.width(), pdf_writer.height()))

    document.print_(pdf_writer)


def _ensure_gui_application() -> None:
    # Font metrics for QTextDocument require a QGuiApplication.
    global _GUI_APPLICATION
    from PySide6.QtGui import QGuiApplication

    if QGuiApplication.instance() is None:
        _GUI_APPLICATION = QGuiApplication([])
