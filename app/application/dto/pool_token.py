from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from app.domain.entities.loopring import Token
from app.domain.entities.pool_token import PoolToken


@dataclass(frozen=True)
class GetPoolTokenByPoolInput:
    pool_id: str


@dataclass(frozen=True)
class GetPoolTokenByPairInput:
    token0_id: str
    token1_id: str
    pair_id: str | None = None


@dataclass(frozen=True)
class GetPoolTokenBySwapInput:
    swap_id: str


@dataclass(frozen=True)
class GetPoolTokenByTokenInput:
    token_id: str


GetPoolTokenInput = Union[
    GetPoolTokenByPoolInput,
    GetPoolTokenByPairInput,
    GetPoolTokenBySwapInput,
    GetPoolTokenByTokenInput,
]


@dataclass(frozen=True)
class GetTokenViewInput:
    token_id: str


@dataclass(frozen=True)
class TokenViewOutput:
    token: Token
    pool_token: PoolToken | None
