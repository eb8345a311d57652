"""Conversion between persisted ``orders`` records and :class:`Order`.

Reading is permissive: any record shape produces a well-formed Order, with
defaults filled in and retired status tags migrated. Writing is strict:
quantities are integers and unselected categories carry no items.
"""
from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from ..models.order_models import (
    DISCOUNT_NONE,
    DISCOUNT_OPTIONS,
    PRODUCT_CATEGORIES,
    Order,
    OrderDraft,
    ProductLineItem,
    new_item_id,
)
from ..services.status_workflow import migrate_status


logger = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%d"
_FALSE_FLAGS = {"", "0", "false", "no", "off", "f", "n"}
_LEADING_INTEGER = re.compile(r"[+-]?[0-9]+")
_FRACTION = re.compile(r"\.([0-9]+)")


def selection_column(category: str) -> str:
    return f"has_{category}"


def normalize_order(raw: object, *, now: Optional[datetime] = None) -> Order:
    record: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    details = _coerce_details(record.get("product_details"))

    return Order(
        id=_coerce_text(record.get("id")),
        display_number=_coerce_optional_text(record.get("order_number")),
        customer_afm=_coerce_text(record.get("afm")),
        customer_name=_coerce_text(record.get("customer_name")),
        customer_phone=_coerce_text(record.get("phone")),
        delivery_date=parse_date(record.get("order_for")),
        remarks=_coerce_text(record.get("remarks")),
        contact_method=_coerce_text(record.get("communication_method")),
        contact_value=_coerce_text(record.get("communication_value")),
        selection={
            category: coerce_flag(record.get(selection_column(category)))
            for category in PRODUCT_CATEGORIES
        },
        line_items={
            category: _coerce_items(details.get(category))
            for category in PRODUCT_CATEGORIES
        },
        discount=coerce_discount(record.get("discount")),
        created_at=parse_timestamp(record.get("created_at"), now=now),
        status=migrate_status(record.get("status")),
    )


def serialize_draft(draft: OrderDraft) -> Dict[str, Any]:
    """Build the persisted field set for a create or update call.

    ``status``, ``id``, ``order_number`` and ``created_at`` are never part of
    the result; callers add ``status`` themselves when inserting.
    """
    record: Dict[str, Any] = {
        "afm": _none_if_blank(draft.customer_afm),
        "customer_name": _none_if_blank(draft.customer_name),
        "phone": _none_if_blank(draft.customer_phone),
        "order_for": format_date(draft.delivery_date),
        "remarks": _none_if_blank(draft.remarks),
        "communication_method": _none_if_blank(draft.contact_method),
        "communication_value": _none_if_blank(draft.contact_value),
        "discount": coerce_discount(draft.discount),
    }

    product_details: Dict[str, List[Dict[str, Any]]] = {}
    for category in PRODUCT_CATEGORIES:
        selected = bool(draft.selection.get(category, False))
        record[selection_column(category)] = selected
        if not selected:
            product_details[category] = []
            continue
        product_details[category] = [
            {
                "id": _coerce_text(item.id) or new_item_id(),
                "type": _coerce_text(item.product_type).strip(),
                "quantity": coerce_quantity(item.quantity),
            }
            for item in draft.line_items.get(category, [])
        ]
    record["product_details"] = product_details
    return record


def coerce_quantity(value: object) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(0, int(value))

    # Leading integer only: "10 τεμ." is 10, "7.9" is 7.
    match = _LEADING_INTEGER.match(str(value).strip())
    if match is None:
        return 0
    return max(0, int(match.group()))


def coerce_flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_FLAGS
    return bool(value)


def coerce_discount(value: object) -> str:
    if value is None or isinstance(value, bool):
        return DISCOUNT_NONE
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    candidate = str(value).strip().rstrip("%").strip().lower()
    if not candidate:
        return DISCOUNT_NONE
    if candidate in DISCOUNT_OPTIONS:
        return candidate
    logger.debug("Unknown discount value %r treated as no discount", value)
    return DISCOUNT_NONE


def parse_timestamp(value: object, *, now: Optional[datetime] = None) -> datetime:
    parsed: Optional[datetime] = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        # fromisoformat on 3.10 takes only 3 or 6 fractional digits.
        text = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None

    if parsed is None:
        return now or datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: object) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return datetime.strptime(text[:10], _DATE_FORMAT).date()
    except ValueError:
        return None


def format_date(value: object) -> Optional[str]:
    parsed = parse_date(value)
    return parsed.strftime(_DATE_FORMAT) if parsed else None


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _coerce_details(raw: object) -> Mapping[str, Any]:
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        if not text.strip():
            return {}
        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Discarding unreadable product_details payload")
            return {}
    return raw if isinstance(raw, Mapping) else {}


def _coerce_items(raw: object) -> List[ProductLineItem]:
    if not isinstance(raw, (list, tuple)):
        return []

    items: List[ProductLineItem] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        item_id = _coerce_text(entry.get("id")) or new_item_id()
        items.append(
            ProductLineItem(
                id=item_id,
                product_type=_coerce_text(entry.get("type")),
                quantity=coerce_quantity(entry.get("quantity")),
            )
        )
    return items


def _coerce_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _coerce_optional_text(value: object) -> Optional[str]:
    text = _coerce_text(value).strip()
    return text or None


def _none_if_blank(value: object) -> Optional[str]:
    text = _coerce_text(value).strip()
    return text or None
