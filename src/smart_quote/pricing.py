from __future__ import annotations

import math
import re
from typing import Any, Iterable

from .dictionaries import ITEM_NAME_MAX_LENGTH, PACKAGING_MAX_LENGTH, PIX_DISCOUNT_FACTOR
from .models.quote import PaymentMethod, QuoteItem

PRICE_FIELDS = ("unit_cost", "markup", "quantity")
TEXT_FIELDS = ("name", "ncm", "packaging")

_PACKAGING_STRIP = re.compile(r"[^A-Z0-9]")


def to_number(value: Any) -> float:
    """Coerce form input to a float; anything unparseable becomes 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def normalize_packaging(value: Any) -> str:
    return _PACKAGING_STRIP.sub("", str(value or "").upper())[:PACKAGING_MAX_LENGTH]


def unit_price(unit_cost: float, markup: float) -> float:
    return unit_cost * (1 + (markup / 100))


def recompute_line(item: QuoteItem, changed_field: str, new_value: Any) -> QuoteItem:
    """Return a copy of ``item`` with ``changed_field`` set and derived prices refreshed."""
    if changed_field in PRICE_FIELDS:
        values = {
            "unit_cost": item.unit_cost,
            "markup": item.markup,
            "quantity": item.quantity,
        }
        values[changed_field] = to_number(new_value)
        values["quantity"] = max(0.0, values["quantity"])
        price = unit_price(values["unit_cost"], values["markup"])
        return item.model_copy(
            update={
                **values,
                "unit_price": price,
                "total_price": price * values["quantity"],
            }
        )
    if changed_field == "packaging":
        return item.model_copy(update={"packaging": normalize_packaging(new_value)})
    if changed_field == "name":
        return item.model_copy(update={"name": str(new_value or "")[:ITEM_NAME_MAX_LENGTH]})
    if changed_field == "ncm":
        return item.model_copy(update={"ncm": str(new_value or "")})
    raise ValueError(f"Unsupported item field: {changed_field}")


def total_value(items: Iterable[QuoteItem]) -> float:
    # Exactly rounded: independent of item order.
    return math.fsum(item.total_price for item in items)


def discounted_total(items: Iterable[QuoteItem], freight: float, payment_method: PaymentMethod) -> float:
    total = total_value(items) + freight
    if payment_method == PaymentMethod.pix:
        return total * PIX_DISCOUNT_FACTOR
    return total


__all__ = [
    "PRICE_FIELDS",
    "TEXT_FIELDS",
    "discounted_total",
    "normalize_packaging",
    "recompute_line",
    "to_number",
    "total_value",
    "unit_price",
]
