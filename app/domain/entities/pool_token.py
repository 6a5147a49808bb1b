from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from app.domain.entities.loopring import Pair, Pool, Swap, Token


@dataclass(frozen=True)
class PoolToken:
    token: Token
    pool: Pool
    pair: Pair


PoolTokenSeed = Union[Pair, Pool, Swap, Token]
