from __future__ import annotations

from dataclasses import replace
from typing import Dict, List

from ..models.order_models import (
    PRODUCT_CATEGORIES,
    DraftLineItem,
    Order,
    OrderDraft,
    new_item_id,
)


_EDITABLE_ITEM_FIELDS = {"product_type", "quantity"}


def new_draft() -> OrderDraft:
    return OrderDraft()


def draft_from_order(order: Order) -> OrderDraft:
    return OrderDraft(
        customer_afm=order.customer_afm,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        delivery_date=order.delivery_date,
        remarks=order.remarks,
        contact_method=order.contact_method,
        contact_value=order.contact_value,
        selection={category: order.is_selected(category) for category in PRODUCT_CATEGORIES},
        line_items={
            category: [
                DraftLineItem(id=item.id, product_type=item.product_type, quantity=str(item.quantity))
                for item in order.items_for(category)
            ]
            for category in PRODUCT_CATEGORIES
        },
        discount=order.discount,
    )


def toggle_category(draft: OrderDraft, category: str, selected: bool) -> OrderDraft:
    _ensure_category(category)
    selection = dict(draft.selection)
    selection[category] = bool(selected)
    line_items = _copy_items(draft)
    # Re-selecting starts from an empty list rather than restoring cleared items.
    if not selected or not draft.selection.get(category, False):
        line_items[category] = []
    return replace(draft, selection=selection, line_items=line_items)


def add_line_item(draft: OrderDraft, category: str) -> OrderDraft:
    _ensure_category(category)
    line_items = _copy_items(draft)
    line_items[category].append(DraftLineItem(id=new_item_id()))
    return replace(draft, line_items=line_items)


def remove_line_item(draft: OrderDraft, category: str, item_id: str) -> OrderDraft:
    _ensure_category(category)
    line_items = _copy_items(draft)
    line_items[category] = [item for item in line_items[category] if item.id != item_id]
    return replace(draft, line_items=line_items)


def update_line_item(draft: OrderDraft, category: str, item_id: str, field: str, value: str) -> OrderDraft:
    _ensure_category(category)
    if field not in _EDITABLE_ITEM_FIELDS:
        raise ValueError(f"Unknown line item field: {field}")
    line_items = _copy_items(draft)
    line_items[category] = [
        replace(item, **{field: value}) if item.id == item_id else item
        for item in line_items[category]
    ]
    return replace(draft, line_items=line_items)


def _copy_items(draft: OrderDraft) -> Dict[str, List[DraftLineItem]]:
    return {category: list(draft.line_items.get(category, [])) for category in PRODUCT_CATEGORIES}


def _ensure_category(category: str) -> None:
    if category not in PRODUCT_CATEGORIES:
        raise ValueError(f"Unknown product category: {category}")
