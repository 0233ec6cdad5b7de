from __future__ import annotations

from urllib.parse import quote

from ..dictionaries import SHARE_MESSAGE_TEMPLATE, WHATSAPP_URL_TEMPLATE
from ..formatting import format_brl, only_digits
from ..models.document import ShareSummary


def compose_message(*, number: int, client_name: str, formatted_total: str) -> str:
    return SHARE_MESSAGE_TEMPLATE.format(number=number, client_name=client_name, formatted_total=formatted_total)


def whatsapp_link(phone: str, text: str) -> str:
    return WHATSAPP_URL_TEMPLATE.format(phone=only_digits(phone), text=quote(text, safe=""))


def build_share_summary(
    *,
    number: int,
    client_name: str,
    whatsapp: str,
    total: float,
    discounted_total: float,
) -> ShareSummary:
    """Message and prefilled link for sending the quote; ``total`` is the item subtotal."""
    formatted_total = format_brl(total)
    message = compose_message(number=number, client_name=client_name, formatted_total=formatted_total)
    return ShareSummary(
        message=message,
        url=whatsapp_link(whatsapp, message),
        formatted_total=formatted_total,
        formatted_discounted_total=format_brl(discounted_total),
        total=total,
        discounted_total=discounted_total,
    )


__all__ = ["build_share_summary", "compose_message", "whatsapp_link"]
