from __future__ import annotations

from threading import Event
from typing import Protocol

from app.domain.entities.loopring import Remove, Swap, Token
from app.domain.entities.pool_token import PoolTokenSeed


class PoolTokenSourcePort(Protocol):
    def enrich(
        self,
        seed: PoolTokenSeed,
        *,
        cancel_event: Event | None = None,
    ) -> Swap | None:
        ...

    def find_any_remove_by_token_id(
        self,
        token_id: str,
        *,
        cancel_event: Event | None = None,
    ) -> Remove | None:
        ...


class TokenLookupPort(Protocol):
    def get_token(self, token_id: str) -> Token | None:
        ...
