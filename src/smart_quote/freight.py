from __future__ import annotations

import logging
import math
import random
from typing import Protocol

from .dictionaries import (
    CROSS_REGION_MIN_KM,
    FREIGHT_RATE_PER_KM,
    SAME_REGION_MAX_KM,
    SAME_REGION_MIN_KM,
)
from .formatting import only_digits
from .models.quote import FreightEstimate

logger = logging.getLogger(__name__)


class DistanceEstimator(Protocol):
    def estimate(self, sender_cep: str, receiver_cep: str) -> FreightEstimate:
        ...


def parse_cep_prefix(cep: str) -> int | None:
    """Integer value of the first five digits of a CEP, or None when it has no digits."""
    digits = only_digits(cep)[:5]
    if not digits:
        return None
    return int(digits)


class FreightEstimator:
    """Heuristic CEP-to-CEP distance and freight cost.

    The numbers are not geographic truth. Codes sharing their first two
    characters are treated as the same region and get a random distance in
    [15, 50) km drawn from ``random_source``; pass a seeded ``random.Random``
    for reproducible output. Any other pair is placed at least 50 km apart.
    Malformed codes produce a zero estimate, which callers must read as
    "not computed" rather than free shipping.
    """

    def __init__(
        self,
        *,
        random_source: random.Random | None = None,
        rate_per_km: float = FREIGHT_RATE_PER_KM,
    ) -> None:
        self._random = random_source or random.Random()
        self._rate_per_km = rate_per_km

    def distance(self, sender_cep: str, receiver_cep: str) -> float:
        sender = parse_cep_prefix(sender_cep)
        receiver = parse_cep_prefix(receiver_cep)
        if sender is None or receiver is None:
            return 0.0

        if (sender_cep or "")[:2] == (receiver_cep or "")[:2]:
            return max(SAME_REGION_MIN_KM, self._random.random() * SAME_REGION_MAX_KM)

        return float(max(CROSS_REGION_MIN_KM, math.floor(abs(sender - receiver) / 100)))

    def estimate(self, sender_cep: str, receiver_cep: str) -> FreightEstimate:
        distance_km = self.distance(sender_cep, receiver_cep)
        estimate = FreightEstimate(distance_km=distance_km, cost=distance_km * self._rate_per_km)
        logger.debug(
            "Estimated freight",
            extra={
                "sender_cep": sender_cep,
                "receiver_cep": receiver_cep,
                "distance_km": estimate.distance_km,
                "cost": estimate.cost,
            },
        )
        return estimate


def estimate(sender_cep: str, receiver_cep: str) -> FreightEstimate:
    return FreightEstimator().estimate(sender_cep, receiver_cep)


__all__ = ["DistanceEstimator", "FreightEstimator", "estimate", "parse_cep_prefix"]
