from __future__ import annotations

from decimal import Decimal
from threading import Event

import pytest

from app.application.dto.pool_token import (
    GetPoolTokenByPairInput,
    GetPoolTokenByPoolInput,
    GetPoolTokenBySwapInput,
    GetPoolTokenByTokenInput,
    GetTokenViewInput,
)
from app.application.use_cases.get_pool_token import GetPoolTokenUseCase
from app.application.use_cases.get_token_view import GetTokenViewUseCase
from app.application.use_cases.resolve_pool_token import PoolTokenCache
from app.domain.entities.loopring import Pair, Pool, PoolBalance, Remove, Swap, Token
from app.domain.exceptions import PoolTokenNotFoundError, TokenNotFoundError, UpstreamSourceError


ETH = Token(id="0", name="Ether", symbol="eth", decimals=18)
USDT = Token(id="2", name="Tether USD", symbol="usdt", decimals=6)
OBS = Token(id="7", symbol="obs", decimals=18)
LP = Token(id="105")
ENRICHED = Swap(
    id="swap-1",
    pool=Pool(
        id="pool-1",
        balances=(
            PoolBalance(token=ETH, balance=Decimal("5")),
            PoolBalance(token=USDT, balance=Decimal("9000")),
            PoolBalance(token=LP, balance=Decimal("100")),
        ),
    ),
    pair=Pair(id="pair-0-2", token0=ETH, token1=USDT),
)


class FakeLoopringSource:
    def __init__(self, *, swap: Swap | None = ENRICHED, tokens: dict | None = None, error: Exception | None = None):
        self._swap = swap
        self._tokens = tokens if tokens is not None else {"0": ETH, "2": USDT, "7": OBS, "105": LP}
        self._error = error
        self.enrich_calls: list[object] = []
        self.token_calls: list[str] = []

    def enrich(self, seed, *, cancel_event: Event | None = None) -> Swap | None:
        _ = cancel_event
        self.enrich_calls.append(seed)
        if self._error is not None:
            raise self._error
        return self._swap

    def find_any_remove_by_token_id(self, token_id: str, *, cancel_event: Event | None = None) -> Remove | None:
        _ = (token_id, cancel_event)
        if self._error is not None:
            raise self._error
        return Remove(id="remove-1", pool=Pool(id="pool-1"))

    def get_token(self, token_id: str) -> Token | None:
        self.token_calls.append(token_id)
        return self._tokens.get(token_id)


def _use_cases(source: FakeLoopringSource) -> tuple[GetPoolTokenUseCase, GetTokenViewUseCase]:
    cache = PoolTokenCache(source=source)
    return (
        GetPoolTokenUseCase(cache=cache, token_port=source),
        GetTokenViewUseCase(cache=cache, token_port=source),
    )


def test_get_pool_token_builds_seed_per_input():
    source = FakeLoopringSource()
    use_case, _ = _use_cases(source)

    by_pool = use_case.execute(GetPoolTokenByPoolInput(pool_id="pool-1"))

    assert use_case.execute(GetPoolTokenByPairInput(token0_id="2", token1_id="0")) is by_pool
    assert use_case.execute(GetPoolTokenBySwapInput(swap_id="swap-1")) is by_pool
    assert use_case.execute(GetPoolTokenByTokenInput(token_id="105")) is by_pool
    assert source.enrich_calls == [Pool(id="pool-1"), Swap(id="swap-1")]
    assert source.token_calls == []


def test_get_pool_token_by_token_fetches_token_on_miss():
    source = FakeLoopringSource()
    use_case, _ = _use_cases(source)

    pool_token = use_case.execute(GetPoolTokenByTokenInput(token_id="105"))

    assert pool_token.token.symbol == "LP-ETH-USDT"
    assert source.token_calls == ["105"]


def test_get_pool_token_for_named_token_is_not_found():
    use_case, _ = _use_cases(FakeLoopringSource())

    with pytest.raises(PoolTokenNotFoundError):
        use_case.execute(GetPoolTokenByTokenInput(token_id="0"))


def test_get_pool_token_for_unknown_token_raises_token_not_found():
    use_case, _ = _use_cases(FakeLoopringSource())

    with pytest.raises(TokenNotFoundError):
        use_case.execute(GetPoolTokenByTokenInput(token_id="999"))


def test_token_view_shows_lp_attributes_when_resolved():
    _, view = _use_cases(FakeLoopringSource())

    result = view.execute(GetTokenViewInput(token_id="105"))

    assert result.pool_token is not None
    assert result.token.name == "LP-ETH-USDT"
    assert result.token.decimals == 8


def test_token_view_degrades_to_raw_token_on_upstream_failure():
    _, view = _use_cases(FakeLoopringSource(error=UpstreamSourceError("subgraph down")))

    result = view.execute(GetTokenViewInput(token_id="105"))

    assert result.pool_token is None
    assert result.token == LP


def test_token_view_for_regular_token_has_no_pool_token():
    source = FakeLoopringSource()
    _, view = _use_cases(source)

    result = view.execute(GetTokenViewInput(token_id="2"))

    assert result.token == USDT
    assert result.pool_token is None
    assert source.enrich_calls == []


def test_token_view_for_nameless_constituent_token_shows_raw_token():
    source = FakeLoopringSource()
    _, view = _use_cases(source)

    result = view.execute(GetTokenViewInput(token_id="7"))

    assert result.token == OBS
    assert result.pool_token is None


def test_get_pool_token_for_nameless_constituent_token_is_not_found():
    use_case, _ = _use_cases(FakeLoopringSource())

    with pytest.raises(PoolTokenNotFoundError):
        use_case.execute(GetPoolTokenByTokenInput(token_id="7"))
