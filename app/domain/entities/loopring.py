from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Token:
    id: str
    name: str | None = None
    symbol: str | None = None
    decimals: int = 0

    @property
    def is_named(self) -> bool:
        return bool(self.name)


@dataclass(frozen=True)
class PoolBalance:
    token: Token | None
    balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class Pool:
    id: str
    balances: tuple[PoolBalance, ...] = ()


@dataclass(frozen=True)
class Pair:
    id: str | None
    token0: Token | None
    token1: Token | None

    @property
    def token_ids(self) -> tuple[str, str] | None:
        if self.token0 is None or self.token1 is None:
            return None
        return self.token0.id, self.token1.id


@dataclass(frozen=True)
class Swap:
    id: str | None
    pool: Pool | None = None
    pair: Pair | None = None


@dataclass(frozen=True)
class Remove:
    id: str
    pool: Pool | None = None
