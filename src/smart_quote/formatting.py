from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")


def format_brl(value: float) -> str:
    """Format a value the pt-BR way: ``R$ 1.234,56``."""
    formatted = f"{abs(value):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    sign = "-" if round(value, 2) < 0 else ""
    return f"{sign}R$ {formatted}"


def only_digits(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


__all__ = ["format_brl", "only_digits"]
