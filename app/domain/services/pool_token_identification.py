from __future__ import annotations

from dataclasses import replace
import logging

from app.domain.entities.loopring import Pair, Pool, Token
from app.domain.entities.pool_token import PoolToken


# Loopring 3.6 PoolToken contract, not read per pool.
LP_TOKEN_DECIMALS = 8
LP_TOKEN_PREFIX = "LP"
logger = logging.getLogger(__name__)


def find_pool_token(pool: Pool, pair: Pair) -> Token | None:
    """Pick the LP token out of a pool's balances.

    Balances hold the two constituent tokens plus, once liquidity was minted,
    one token without a symbol. Both constituents must be present before that
    nameless entry is trusted. More than one nameless entry is ambiguous and
    yields None.
    """
    if not pool.balances:
        return None
    if pair.token0 is None or pair.token1 is None:
        return None
    if not pair.token0.symbol or not pair.token1.symbol:
        return None

    token0_found = False
    token1_found = False
    candidates: list[Token] = []
    for entry in pool.balances:
        token = entry.token
        if token is None:
            continue
        if token.id == pair.token0.id:
            token0_found = True
        elif token.id == pair.token1.id:
            token1_found = True
        elif not token.symbol:
            candidates.append(token)

    if not (token0_found and token1_found):
        return None
    if len(candidates) > 1:
        logger.warning(
            "pool_token_identification: ambiguous_candidates pool=%s candidates=%s",
            pool.id,
            ",".join(token.id for token in candidates),
        )
        return None
    return candidates[0] if candidates else None


def lp_token_symbol(pair: Pair) -> str:
    if pair.token0 is None or pair.token1 is None:
        raise ValueError("pair must carry token0 and token1.")
    symbol0 = (pair.token0.symbol or "").upper()
    symbol1 = (pair.token1.symbol or "").upper()
    return f"{LP_TOKEN_PREFIX}-{symbol0}-{symbol1}"


def build_pool_token(token: Token, pool: Pool, pair: Pair) -> PoolToken:
    symbol = lp_token_symbol(pair)
    return PoolToken(
        token=replace(token, name=symbol, symbol=symbol, decimals=LP_TOKEN_DECIMALS),
        pool=pool,
        pair=pair,
    )
