from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from .dictionaries import CLIENT_LOOKUP_MIN_LENGTH, COMPANY_LOOKUP_MIN_LENGTH
from .freight import DistanceEstimator, FreightEstimator
from .models.party import Address, Client, Company, CompanyLookup
from .models.quote import QuoteConfig, QuoteItem
from .models.session import QuoteSession
from .pricing import discounted_total, recompute_line, to_number, total_value
from .session_store import RecentItemCache

logger = logging.getLogger(__name__)

# Derived by the freight estimator only.
_PROTECTED_CONFIG_FIELDS = frozenset({"freight", "distance_km", "calculated_freight"})


def should_lookup_company(cnpj: str) -> bool:
    return len(cnpj or "") >= COMPANY_LOOKUP_MIN_LENGTH


def should_lookup_client(doc: str) -> bool:
    return len(doc or "") >= CLIENT_LOOKUP_MIN_LENGTH


class QuoteEditor:
    """Field-level edits on a :class:`QuoteSession`.

    Every operation takes the session explicitly and mutates it in place;
    derived values (item prices, freight) are recomputed inside the operation
    that changes their inputs.
    """

    def __init__(
        self,
        *,
        freight_estimator: DistanceEstimator | None = None,
        recent_items: RecentItemCache | None = None,
    ) -> None:
        self._freight_estimator = freight_estimator or FreightEstimator()
        self._recent_items = recent_items

    def add_item(self, session: QuoteSession) -> QuoteItem:
        item = QuoteItem()
        with session.lock:
            session.items.append(item)
            self._touch(session)
        return item

    def update_item(self, session: QuoteSession, item_id: str, field: str, value: Any) -> QuoteItem:
        with session.lock:
            updated = recompute_line(session.find_item(item_id), field, value)
            session.replace_item(updated)
            self._touch(session)
        if field in {"name", "packaging"} and self._recent_items is not None:
            self._recent_items.remember(updated)
        return updated

    def set_item_name(self, session: QuoteSession, item_id: str, text: str) -> QuoteItem:
        return self.update_item(session, item_id, "name", text)

    def remove_item(self, session: QuoteSession, item_id: str) -> None:
        with session.lock:
            session.items.remove(session.find_item(item_id))
            self._touch(session)

    def update_company(self, session: QuoteSession, changes: Mapping[str, Any]) -> Company:
        with session.lock:
            session.company = Company.model_validate(_merge(session.company.model_dump(), changes))
            self._touch(session)
            return session.company

    def update_client(self, session: QuoteSession, changes: Mapping[str, Any]) -> Client:
        with session.lock:
            session.client = Client.model_validate(_merge(session.client.model_dump(), changes))
            self._touch(session)
            return session.client

    def update_config(self, session: QuoteSession, changes: Mapping[str, Any]) -> QuoteConfig:
        allowed = {key: value for key, value in changes.items() if key not in _PROTECTED_CONFIG_FIELDS}
        ignored = set(changes) - set(allowed)
        if ignored:
            logger.warning("Ignored edit of derived freight fields", extra={"fields": sorted(ignored)})
        if "number" in allowed:
            allowed["number"] = int(to_number(allowed["number"]))
        if "delivery_days" in allowed:
            allowed["delivery_days"] = max(0, int(to_number(allowed["delivery_days"])))
        with session.lock:
            session.config = QuoteConfig.model_validate({**session.config.model_dump(), **allowed})
            self._touch(session)
            return session.config

    def calculate_freight(self, session: QuoteSession) -> QuoteConfig:
        with session.lock:
            config = session.config
            estimate = self._freight_estimator.estimate(config.sender_cep, config.receiver_cep)
            session.config = config.model_copy(update={"freight": estimate})
            self._touch(session)
        logger.info(
            "Calculated freight",
            extra={
                "session_id": session.id,
                "distance_km": estimate.distance_km,
                "freight": estimate.cost,
            },
        )
        return session.config

    def apply_company_lookup(self, session: QuoteSession, data: CompanyLookup) -> None:
        with session.lock:
            session.company = session.company.model_copy(
                update={
                    "name": data.name,
                    "email": data.email,
                    "phone": data.phone,
                    "address": _merge_address(session.company.address, data.address),
                }
            )
            session.config = session.config.model_copy(update={"sender_cep": data.address.cep})
            self._touch(session)

    def apply_client_lookup(self, session: QuoteSession, data: CompanyLookup) -> None:
        with session.lock:
            session.client = session.client.model_copy(
                update={
                    "name": data.name,
                    "email": data.email,
                    "phone": data.phone,
                    "address": _merge_address(session.client.address, data.address),
                }
            )
            session.config = session.config.model_copy(update={"receiver_cep": data.address.cep})
            self._touch(session)

    def set_logo(self, session: QuoteSession, *, logo_url: str, primary_color: str) -> None:
        with session.lock:
            session.company = session.company.model_copy(
                update={"logo_url": logo_url, "primary_color": primary_color}
            )
            self._touch(session)

    def set_signature(self, session: QuoteSession, *, signature_url: str) -> None:
        with session.lock:
            session.company = session.company.model_copy(update={"signature_url": signature_url})
            self._touch(session)

    def total_value(self, session: QuoteSession) -> float:
        with session.lock:
            return total_value(session.items)

    def discounted_total(self, session: QuoteSession) -> float:
        with session.lock:
            return discounted_total(session.items, session.config.calculated_freight, session.config.payment_method)

    def _touch(self, session: QuoteSession) -> None:
        session.updated_at = datetime.utcnow()


def _merge(current: dict[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    merged = {**current, **changes}
    if isinstance(changes.get("address"), Mapping):
        merged["address"] = {**current.get("address", {}), **changes["address"]}
    return merged


def _merge_address(current: Address, found: Address) -> Address:
    return current.model_copy(update=found.model_dump())


__all__ = ["QuoteEditor", "should_lookup_client", "should_lookup_company"]
