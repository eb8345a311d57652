"""OrderNest command line.

Usage:
    ordernest list [--search TEXT] [--status TAG]
    ordernest show ORDER_ID
    ordernest add --name NAME [--afm AFM] [--phone PHONE] [--item CATEGORY:TYPE:QTY ...]
    ordernest edit ORDER_ID [--name NAME] [--clear CATEGORY ...] [--item CATEGORY:TYPE:QTY ...]
    ordernest status ORDER_ID TAG
    ordernest print ORDER_ID OUTPUT.html|OUTPUT.pdf
    ordernest delete ORDER_ID
    ordernest statuses
    ordernest window
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import List, Optional, Sequence

from ordernest import config
from ordernest.data import settings_repository
from ordernest.data.order_store import SqliteOrderStore
from ordernest.models.order_models import DISCOUNT_OPTIONS, PRODUCT_CATEGORIES, Order, OrderDraft
from ordernest.services import order_drafts, order_printer, status_workflow
from ordernest.services.order_metrics import category_label, product_summary, total_cookies
from ordernest.services.order_service import OrderCollection, OrderServiceError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ordernest", description=f"{config.APP_NAME} order tracking")
    parser.add_argument("--log-level", default=None, help="Logging level (default: ORDERNEST_LOG_LEVEL or WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List orders, newest first")
    list_parser.add_argument("--search", default="", help="Match customer name, ΑΦΜ or phone")
    list_parser.add_argument(
        "--status",
        default=status_workflow.STATUS_FILTER_ALL,
        choices=[option.tag for option in status_workflow.list_status_filters()],
    )

    show_parser = subparsers.add_parser("show", help="Show one order")
    show_parser.add_argument("order_id")

    add_parser = subparsers.add_parser("add", help="Register a new order")
    add_parser.add_argument("--name", required=True)
    _add_order_fields(add_parser, keep_unset=False)

    edit_parser = subparsers.add_parser("edit", help="Change an order's details; status and date are kept")
    edit_parser.add_argument("order_id")
    edit_parser.add_argument("--name", default=None)
    _add_order_fields(edit_parser, keep_unset=True)
    edit_parser.add_argument(
        "--clear",
        action="append",
        default=[],
        metavar="CATEGORY",
        help="Deselect a category and drop its items",
    )

    status_parser = subparsers.add_parser("status", help="Change an order's status")
    status_parser.add_argument("order_id")
    status_parser.add_argument("status", choices=status_workflow.list_status_tags())

    print_parser = subparsers.add_parser("print", help="Write a printable order summary")
    print_parser.add_argument("order_id")
    print_parser.add_argument("output", help="Destination file (.html or .pdf)")

    delete_parser = subparsers.add_parser("delete", help="Delete an order")
    delete_parser.add_argument("order_id")

    subparsers.add_parser("statuses", help="List status tags")
    subparsers.add_parser("window", help="Open the order list window")
    return parser


def _add_order_fields(parser: argparse.ArgumentParser, *, keep_unset: bool) -> None:
    # With keep_unset, an omitted option leaves the stored value alone.
    blank = None if keep_unset else ""
    parser.add_argument("--afm", default=blank)
    parser.add_argument("--phone", default=blank)
    parser.add_argument("--delivery", default=None, help="Delivery date (YYYY-MM-DD)")
    parser.add_argument("--remarks", default=blank)
    parser.add_argument("--contact-method", default=blank)
    parser.add_argument("--contact-value", default=blank)
    parser.add_argument("--discount", default=None if keep_unset else "none", choices=DISCOUNT_OPTIONS)
    parser.add_argument(
        "--item",
        action="append",
        default=[],
        metavar="CATEGORY:TYPE:QTY",
        help=f"Line item; CATEGORY is one of {', '.join(PRODUCT_CATEGORIES)}",
    )


_DRAFT_FIELDS = {
    "name": "customer_name",
    "afm": "customer_afm",
    "phone": "customer_phone",
    "delivery": "delivery_date",
    "remarks": "remarks",
    "contact_method": "contact_method",
    "contact_value": "contact_value",
    "discount": "discount",
}


def build_draft(args: argparse.Namespace, base: Optional[OrderDraft] = None) -> OrderDraft:
    """Apply command line options to ``base`` (a blank draft when omitted)."""
    draft = base if base is not None else order_drafts.new_draft()
    changes = {
        field: getattr(args, option)
        for option, field in _DRAFT_FIELDS.items()
        if getattr(args, option, None) is not None
    }
    draft = replace(draft, **changes)

    for category in getattr(args, "clear", []):
        draft = order_drafts.toggle_category(draft, _check_category(category), False)

    for entry in args.item:
        category, _, rest = entry.partition(":")
        product_type, _, quantity = rest.rpartition(":")
        category = _check_category(category)
        if not draft.selection.get(category):
            draft = order_drafts.toggle_category(draft, category, True)
        draft = order_drafts.add_line_item(draft, category)
        item_id = draft.line_items[category][-1].id
        draft = order_drafts.update_line_item(draft, category, item_id, "product_type", product_type)
        draft = order_drafts.update_line_item(draft, category, item_id, "quantity", quantity)
    return draft


def _check_category(category: str) -> str:
    category = category.strip()
    if category not in PRODUCT_CATEGORIES:
        raise ValueError(f"Unknown product category: {category}")
    return category


def format_order_line(order: Order) -> str:
    cookies = total_cookies(order)
    parts = [
        f"#{order.display_label}",
        order_printer.format_display_date(order.created_at),
        order.customer_name or "-",
        f"ΑΦΜ {order.customer_afm}" if order.customer_afm else "",
        order.customer_phone,
        product_summary(order),
        f"μπισκότα {cookies}" if cookies else "",
        status_workflow.status_label(order.status),
    ]
    return " | ".join(part for part in parts if part)


def format_order_detail(order: Order) -> List[str]:
    lines = [
        f"Παραγγελία #{order.display_label} ({order.id})",
        f"Κατάσταση: {status_workflow.status_label(order.status)}",
        f"Πελάτης: {order.customer_name}",
        f"ΑΦΜ: {order.customer_afm}",
        f"Τηλέφωνο: {order.customer_phone}",
        f"Ημερομηνία: {order_printer.format_display_date(order.created_at)}",
    ]
    if order.delivery_date is not None:
        lines.append(f"Παράδοση: {order_printer.format_display_date(order.delivery_date)}")
    if order.has_contact:
        lines.append(f"Επικοινωνία: {order.contact_method}: {order.contact_value}")
    for category in PRODUCT_CATEGORIES:
        if not order.is_selected(category):
            continue
        lines.append(f"{category_label(category)}:")
        for item in order.items_for(category):
            lines.append(f"  - {item.product_type} x {item.quantity}")
    if order.remarks:
        lines.append(f"Παρατηρήσεις: {order.remarks}")
    lines.append(f"Έκπτωση: {order_printer.format_discount(order.discount)}")
    return lines


def find_order(collection: OrderCollection, reference: str) -> Optional[Order]:
    reference = reference.strip().lstrip("#")
    order = collection.get(reference)
    if order is not None:
        return order
    for candidate in collection.orders:
        if candidate.display_number == reference:
            return candidate
    return None


def run(args: argparse.Namespace, collection: OrderCollection) -> int:
    if args.command == "window":
        from ordernest.ui.order_window import launch

        return launch(collection)

    if args.command == "statuses":
        for option in status_workflow.list_statuses():
            print(f"{option.tag}\t{option.label}")
        return 0

    collection.load_all()

    if args.command == "list":
        for order in collection.search(args.search, args.status):
            print(format_order_line(order))
        return 0

    if args.command == "add":
        created = collection.create(build_draft(args))
        print(f"Created order #{created.display_label} ({created.id})")
        return 0

    order = find_order(collection, args.order_id)
    if order is None:
        print(f"Order {args.order_id} not found", file=sys.stderr)
        return 1
    collection.open_detail(order.id)

    if args.command == "show":
        print("\n".join(format_order_detail(order)))
    elif args.command == "edit":
        updated = collection.update(order.id, build_draft(args, order_drafts.draft_from_order(order)))
        print(f"Updated order #{updated.display_label}")
    elif args.command == "status":
        collection.set_status(order.id, args.status)
        print(f"#{order.display_label}: {status_workflow.status_label(args.status)}")
    elif args.command == "print":
        settings = settings_repository.get_app_settings()
        if args.output.lower().endswith(".pdf"):
            path = order_printer.export_order_pdf(order, args.output, settings)
        else:
            path = order_printer.export_order_html(order, args.output, settings)
        print(f"Order summary saved to {path}")
    elif args.command == "delete":
        collection.delete(order.id)
        print(f"Deleted order #{order.display_label}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config.configure_logging(args.log_level)

    collection = OrderCollection(SqliteOrderStore())
    try:
        return run(args, collection)
    except (OrderServiceError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
