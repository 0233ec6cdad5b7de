from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from .quote import DeliveryType, FreightType, PaymentMethod


class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)


class HeaderBlock(_Block):
    logo_url: str | None = None
    primary_color: str
    number: int
    company_name: str
    company_cnpj: str
    company_email: str
    company_phone: str | None = None
    company_whatsapp: str | None = None


class ClientBlock(_Block):
    name: str
    doc: str
    email: str
    address_line: str
    phone: str | None = None
    cell: str | None = None
    whatsapp: str | None = None


class ItemRow(_Block):
    name: str
    ncm: str
    packaging: str
    quantity: float
    unit_price: float
    total_price: float


class FreightLine(_Block):
    label: str
    amount: float


class TotalsBlock(_Block):
    subtotal: float
    freight: FreightLine | None = None
    grand_total: float


class TermsBlock(_Block):
    freight_type: FreightType
    delivery_days: int
    delivery_type: DeliveryType
    delivery_label: str
    validity_days: int


class PaymentBlock(_Block):
    method: PaymentMethod
    label: str
    boleto_condition: str | None = None
    pix_total: float | None = None


class SignatureBlock(_Block):
    signature_url: str | None = None
    company_name: str
    client_name: str


class ProposalDocument(_Block):
    header: HeaderBlock
    client: ClientBlock
    items: Sequence[ItemRow] = Field(default_factory=tuple)
    totals: TotalsBlock
    terms: TermsBlock
    payment: PaymentBlock
    signatures: SignatureBlock
    footer: str


class ShareSummary(_Block):
    message: str
    url: str
    formatted_total: str
    formatted_discounted_total: str
    total: float
    discounted_total: float


__all__ = [
    "ClientBlock",
    "FreightLine",
    "HeaderBlock",
    "ItemRow",
    "PaymentBlock",
    "ProposalDocument",
    "ShareSummary",
    "SignatureBlock",
    "TermsBlock",
    "TotalsBlock",
]
