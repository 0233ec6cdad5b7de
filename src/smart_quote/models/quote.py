from __future__ import annotations

import uuid
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class FreightType(str, Enum):
    cif = "CIF"
    fob = "FOB"


class PaymentMethod(str, Enum):
    pix = "PIX"
    boleto = "BOLETO"
    credit_card = "CREDIT_CARD"
    transfer = "TRANSFER"


class DeliveryType(str, Enum):
    calendar = "DC"
    business = "DU"


BoletoCondition = Literal["28ddl", "30/60/90ddl", ""]


class QuoteItem(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = ""
    ncm: str = ""
    packaging: str = ""
    quantity: float = 1.0
    unit_cost: float = Field(default=0.0, description="Internal, never shown to the client")
    markup: float = Field(default=0.0, description="Internal markup percent")
    unit_price: float = 0.0
    total_price: float = 0.0


class FreightEstimate(BaseModel):
    distance_km: float = 0.0
    cost: float = 0.0

    model_config = {"frozen": True}


class QuoteConfig(BaseModel):
    number: int = 1001
    freight_type: FreightType = FreightType.cif
    delivery_days: int = Field(default=5, ge=0)
    delivery_type: DeliveryType = DeliveryType.business
    payment_method: PaymentMethod = PaymentMethod.pix
    boleto_condition: BoletoCondition = ""
    sender_cep: str = ""
    receiver_cep: str = ""
    freight: FreightEstimate = Field(default_factory=FreightEstimate)

    @property
    def distance_km(self) -> float:
        return self.freight.distance_km

    @property
    def calculated_freight(self) -> float:
        return self.freight.cost


__all__ = [
    "BoletoCondition",
    "DeliveryType",
    "FreightEstimate",
    "FreightType",
    "PaymentMethod",
    "QuoteConfig",
    "QuoteItem",
]
