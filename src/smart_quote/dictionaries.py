from __future__ import annotations

from typing import Mapping

from .models.party import DEFAULT_PRIMARY_COLOR
from .models.quote import DeliveryType, FreightType, PaymentMethod

FIRST_QUOTE_NUMBER = 1001

FREIGHT_RATE_PER_KM = 1.80
SAME_REGION_MIN_KM = 15.0
SAME_REGION_MAX_KM = 50.0
CROSS_REGION_MIN_KM = 50

PIX_DISCOUNT_FACTOR = 0.9

PACKAGING_MAX_LENGTH = 8
ITEM_NAME_MAX_LENGTH = 250

# Raw input lengths that trigger an automatic registry lookup.
COMPANY_LOOKUP_MIN_LENGTH = 14
CLIENT_LOOKUP_MIN_LENGTH = 11

RECENT_ITEMS_LIMIT = 20


FREIGHT_TYPE_LABELS: Mapping[FreightType, str] = {
    FreightType.cif: "CIF (Pago pelo Remetente)",
    FreightType.fob: "FOB (Pago pelo Destinatário)",
}


DELIVERY_TYPE_LABELS: Mapping[DeliveryType, str] = {
    DeliveryType.calendar: "Dias Corridos",
    DeliveryType.business: "Dias Úteis",
}


BOLETO_CONDITIONS = ("28ddl", "30/60/90ddl")


SHARE_MESSAGE_TEMPLATE = "Quote #{number} for {client_name}. Total: {formatted_total}"
WHATSAPP_URL_TEMPLATE = "https://wa.me/{phone}?text={text}"

PDF_FILENAME_TEMPLATE = "Cotacao_{number}_{client_name}.pdf"

DOCUMENT_FOOTER = "Gerado via SmartQuote - Documento conferido digitalmente."
CLIENT_PLACEHOLDER_NAME = "CLIENTE"


def payment_method_label(method: PaymentMethod) -> str:
    return method.value.replace("_", " ")


def freight_line_label(freight_type: FreightType) -> str:
    return f"FRETE ({freight_type.value})"


__all__ = [
    "BOLETO_CONDITIONS",
    "CLIENT_LOOKUP_MIN_LENGTH",
    "CLIENT_PLACEHOLDER_NAME",
    "COMPANY_LOOKUP_MIN_LENGTH",
    "CROSS_REGION_MIN_KM",
    "DEFAULT_PRIMARY_COLOR",
    "DELIVERY_TYPE_LABELS",
    "DOCUMENT_FOOTER",
    "FIRST_QUOTE_NUMBER",
    "FREIGHT_RATE_PER_KM",
    "FREIGHT_TYPE_LABELS",
    "ITEM_NAME_MAX_LENGTH",
    "PACKAGING_MAX_LENGTH",
    "PDF_FILENAME_TEMPLATE",
    "PIX_DISCOUNT_FACTOR",
    "RECENT_ITEMS_LIMIT",
    "SAME_REGION_MAX_KM",
    "SAME_REGION_MIN_KM",
    "SHARE_MESSAGE_TEMPLATE",
    "WHATSAPP_URL_TEMPLATE",
    "freight_line_label",
    "payment_method_label",
]
