"""Order status tags and their presentation.

Statuses describe a general forward progression but are advisory: any tag may
follow any other, so a mis-set status can always be corrected by hand.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from ..models.order_models import StatusOption


STATUS_PENDING = "pending"
STATUS_PROFORMA_SENT = "proforma_sent"
STATUS_PAYMENT = "payment"
STATUS_SHIPPED = "shipped"
STATUS_SHIPPED_UNPAID = "shipped_unpaid"

STATUS_FILTER_ALL = "all"

_ORDER_STATUSES: List[StatusOption] = [
    StatusOption(STATUS_PENDING, "Εκκρεμής", "caution"),
    StatusOption(STATUS_PROFORMA_SENT, "Αποστ. Προτιμολογίου", "progress"),
    StatusOption(STATUS_PAYMENT, "Πληρωμή", "progress"),
    StatusOption(STATUS_SHIPPED, "Αποστολή", "success"),
    StatusOption(STATUS_SHIPPED_UNPAID, "Αποστολή χωρίς εξόφληση", "alert"),
]

_STATUS_BY_TAG: Dict[str, StatusOption] = {option.tag: option for option in _ORDER_STATUSES}

_TERMINAL_STATUSES = {STATUS_SHIPPED, STATUS_SHIPPED_UNPAID}

# Tags written by earlier releases of the workflow.
_LEGACY_STATUS_ALIASES: Dict[str, str] = {
    "completed": STATUS_SHIPPED,
}

_FILTER_ALL_LABEL = "Όλες οι καταστάσεις"


def list_statuses() -> List[StatusOption]:
    return list(_ORDER_STATUSES)


def list_status_tags() -> List[str]:
    return [option.tag for option in _ORDER_STATUSES]


def is_known_status(tag: object) -> bool:
    return isinstance(tag, str) and tag in _STATUS_BY_TAG


def is_terminal(tag: str) -> bool:
    return tag in _TERMINAL_STATUSES


def status_label(tag: str) -> str:
    option = _STATUS_BY_TAG.get(tag)
    return option.label if option is not None else tag


def status_tone(tag: str) -> str:
    option = _STATUS_BY_TAG.get(tag)
    return option.tone if option is not None else "neutral"


def initial_status() -> str:
    return STATUS_PENDING


def migrate_status(raw: Optional[object]) -> str:
    """Map a persisted status value onto the current tag set.

    Current tags pass through, the retired ``completed`` tag becomes
    ``shipped`` and everything else falls back to ``pending``.
    """
    if is_known_status(raw):
        return str(raw)
    if isinstance(raw, str) and raw in _LEGACY_STATUS_ALIASES:
        return _LEGACY_STATUS_ALIASES[raw]
    return STATUS_PENDING


def resolve_status_change(tag: str) -> str:
    """Return the tag to store for a requested status change.

    Retired tags map forward like stored records do. Anything else unknown
    raises ``ValueError`` so a typo cannot reset an order to ``pending``.
    """
    if is_known_status(tag):
        return tag
    if isinstance(tag, str) and tag in _LEGACY_STATUS_ALIASES:
        return _LEGACY_STATUS_ALIASES[tag]
    raise ValueError(f"Unknown order status: {tag!r}")


def list_status_filters() -> List[StatusOption]:
    filters = [StatusOption(STATUS_FILTER_ALL, _FILTER_ALL_LABEL, "neutral")]
    filters.extend(_ORDER_STATUSES)
    return filters


def matches_status_filter(tag: str, status_filter: str) -> bool:
    return status_filter == STATUS_FILTER_ALL or tag == status_filter
