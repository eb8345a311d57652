from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Union
from uuid import uuid4


PRODUCT_CATEGORIES: List[str] = [
    "cookies",
    "figures",
    "sets",
    "toppers",
    "prints",
    "other",
]

CATEGORY_LABELS: Dict[str, str] = {
    "cookies": "Μπισκότα",
    "figures": "Φιγούρα",
    "sets": "Σετάκια",
    "toppers": "Τόπερς",
    "prints": "Εκτυπώσεις",
    "other": "Άλλο",
}

DISCOUNT_NONE = "none"
DISCOUNT_OPTIONS: List[str] = [DISCOUNT_NONE, "5", "10", "20"]


def new_item_id() -> str:
    return uuid4().hex


def empty_selection() -> Dict[str, bool]:
    return {category: False for category in PRODUCT_CATEGORIES}


def empty_line_items() -> Dict[str, list]:
    return {category: [] for category in PRODUCT_CATEGORIES}


@dataclass
class ProductLineItem:
    id: str
    product_type: str
    quantity: int = 0


@dataclass
class DraftLineItem:
    """Line item as typed into the order form; quantity stays text until saved."""

    id: str = field(default_factory=new_item_id)
    product_type: str = ""
    quantity: str = ""


@dataclass
class Order:
    id: str
    customer_afm: str
    customer_name: str
    customer_phone: str
    created_at: datetime
    status: str
    display_number: Optional[str] = None
    delivery_date: Optional[date] = None
    remarks: str = ""
    contact_method: str = ""
    contact_value: str = ""
    selection: Dict[str, bool] = field(default_factory=empty_selection)
    line_items: Dict[str, List[ProductLineItem]] = field(default_factory=empty_line_items)
    discount: str = DISCOUNT_NONE

    @property
    def display_label(self) -> str:
        return self.display_number or self.id

    @property
    def has_discount(self) -> bool:
        return self.discount != DISCOUNT_NONE

    @property
    def has_contact(self) -> bool:
        return bool(self.contact_method.strip()) and bool(self.contact_value.strip())

    def items_for(self, category: str) -> List[ProductLineItem]:
        return list(self.line_items.get(category, []))

    def is_selected(self, category: str) -> bool:
        return bool(self.selection.get(category, False))


@dataclass
class OrderDraft:
    customer_afm: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    delivery_date: Union[date, str, None] = None
    remarks: str = ""
    contact_method: str = ""
    contact_value: str = ""
    selection: Dict[str, bool] = field(default_factory=empty_selection)
    line_items: Dict[str, List[DraftLineItem]] = field(default_factory=empty_line_items)
    discount: str = DISCOUNT_NONE


@dataclass
class StatusOption:
    tag: str
    label: str
    tone: str


@dataclass
class AppSettings:
    business_name: str
    print_accent_color: str = "#d47f98"
    print_font_family: str = "Arial"
    order_number_next: int = 1
