from __future__ import annotations

from typing import Dict

from ..models.order_models import AppSettings
from .database import create_connection

_DEFAULTS: Dict[str, str] = {
    "business_name": "OrderNest",
    "print_accent_color": "#d47f98",
    "print_font_family": "Arial",
    "order_number_next": "1",
}


def get_setting(key: str) -> str:
    key = key.strip()
    with create_connection() as connection:
        row = connection.execute(
            "SELECT value FROM settings WHERE key = ?",
            (key,),
        ).fetchone()

    if row is None:
        return _DEFAULTS.get(key, "")
    return row["value"]


def set_setting(key: str, value: str) -> None:
    key = key.strip()
    with create_connection() as connection:
        connection.execute(
            """
            INSERT INTO settings (key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        connection.commit()


def get_app_settings() -> AppSettings:
    business_name = get_setting("business_name") or _DEFAULTS["business_name"]
    accent = (get_setting("print_accent_color") or _DEFAULTS["print_accent_color"]).strip()
    if not accent.startswith("#"):
        accent = _DEFAULTS["print_accent_color"]
    font_family = (get_setting("print_font_family") or _DEFAULTS["print_font_family"]).strip()

    try:
        order_number_next = int(get_setting("order_number_next") or _DEFAULTS["order_number_next"])
    except ValueError:
        order_number_next = int(_DEFAULTS["order_number_next"])

    return AppSettings(
        business_name=business_name.strip(),
        print_accent_color=accent,
        print_font_family=font_family or _DEFAULTS["print_font_family"],
        order_number_next=max(1, order_number_next),
    )


def update_app_settings(settings: AppSettings) -> AppSettings:
    set_setting("business_name", settings.business_name.strip())
    set_setting("print_accent_color", settings.print_accent_color.strip())
    set_setting("print_font_family", settings.print_font_family.strip())
    set_setting("order_number_next", str(max(1, int(settings.order_number_next))))
    return get_app_settings()


def reserve_next_order_number() -> str:
    with create_connection() as connection:
        # Hold the write lock across the read so concurrent processes get distinct numbers.
        connection.execute("BEGIN IMMEDIATE")
        row = connection.execute(
            "SELECT value FROM settings WHERE key = 'order_number_next'"
        ).fetchone()
        try:
            next_value = int(row["value"]) if row is not None else int(_DEFAULTS["order_number_next"])
        except ValueError:
            next_value = int(_DEFAULTS["order_number_next"])
        next_value = max(1, next_value)
        connection.execute(
            """
            INSERT INTO settings (key, value)
            VALUES ('order_number_next', ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (str(next_value + 1),),
        )
        connection.commit()
    return str(next_value)
