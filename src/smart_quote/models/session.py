from __future__ import annotations

import threading
from datetime import datetime

from pydantic import BaseModel, Field, PrivateAttr

from .party import Client, Company
from .quote import QuoteConfig, QuoteItem


class QuoteSession(BaseModel):
    """Whole editing state of one quote, mutated in place by the editor.

    Request handlers and background tasks share sessions across threads;
    every read-modify-write must hold :attr:`lock`.
    """

    id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    company: Company = Field(default_factory=Company)
    client: Client = Field(default_factory=Client)
    items: list[QuoteItem] = Field(default_factory=list)
    config: QuoteConfig = Field(default_factory=QuoteConfig)

    _lock: threading.RLock = PrivateAttr(default_factory=threading.RLock)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def find_item(self, item_id: str) -> QuoteItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def replace_item(self, updated: QuoteItem) -> None:
        for index, item in enumerate(self.items):
            if item.id == updated.id:
                self.items[index] = updated
                return
        raise KeyError(updated.id)


__all__ = ["QuoteSession"]
