from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from ..models.order_models import (
    CATEGORY_LABELS,
    PRODUCT_CATEGORIES,
    Order,
    OrderDraft,
    ProductLineItem,
)
from ..data.order_records import coerce_quantity


def category_total(order: Order, category: str) -> int:
    return sum(int(item.quantity) for item in order.line_items.get(category, []))


def total_units(order: Order, categories: Optional[Iterable[str]] = None) -> int:
    selected = PRODUCT_CATEGORIES if categories is None else categories
    return sum(category_total(order, category) for category in selected)


def total_cookies(order: Order) -> int:
    return category_total(order, "cookies")


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def selected_categories(order: Order) -> List[Tuple[str, str, List[ProductLineItem]]]:
    return [
        (category, category_label(category), order.items_for(category))
        for category in PRODUCT_CATEGORIES
        if order.is_selected(category)
    ]


def product_summary(order: Order) -> str:
    segments: List[str] = []
    for category in PRODUCT_CATEGORIES:
        if not order.is_selected(category):
            continue
        segments.append(f"{category_label(category)} ({category_total(order, category)})")
    return ", ".join(segments)


def draft_category_total(draft: OrderDraft, category: str) -> int:
    return sum(coerce_quantity(item.quantity) for item in draft.line_items.get(category, []))
