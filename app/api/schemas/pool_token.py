from __future__ import annotations

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    id: str
    name: str | None = None
    symbol: str | None = None
    decimals: int


class PoolBalanceResponse(BaseModel):
    token: TokenResponse | None = None
    balance: str


class PoolResponse(BaseModel):
    id: str
    balances: list[PoolBalanceResponse]


class PairResponse(BaseModel):
    id: str | None = None
    token0: TokenResponse | None = None
    token1: TokenResponse | None = None


class PoolTokenResponse(BaseModel):
    token: TokenResponse = Field(..., description="LP token with synthesized name, symbol and decimals.")
    pool: PoolResponse
    pair: PairResponse


class TokenViewResponse(BaseModel):
    token: TokenResponse
    is_pool_token: bool
    pool_token: PoolTokenResponse | None = Field(
        None,
        description="Present when the token is the LP token of a known pool.",
    )
