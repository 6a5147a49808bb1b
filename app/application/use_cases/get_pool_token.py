from __future__ import annotations

from app.application.dto.pool_token import (
    GetPoolTokenByPairInput,
    GetPoolTokenByPoolInput,
    GetPoolTokenBySwapInput,
    GetPoolTokenByTokenInput,
    GetPoolTokenInput,
)
from app.application.ports.pool_token_source_port import TokenLookupPort
from app.application.use_cases.resolve_pool_token import PoolTokenCache
from app.domain.entities.loopring import Pair, Pool, Swap, Token
from app.domain.entities.pool_token import PoolToken, PoolTokenSeed
from app.domain.exceptions import PoolTokenNotFoundError, TokenNotFoundError


class GetPoolTokenUseCase:
    def __init__(self, *, cache: PoolTokenCache, token_port: TokenLookupPort):
        self._cache = cache
        self._token_port = token_port

    def execute(self, command: GetPoolTokenInput) -> PoolToken:
        pool_token = self._cache.resolve(self._build_seed(command))
        if pool_token is None:
            raise PoolTokenNotFoundError("Pool token not found.")
        return pool_token

    def _build_seed(self, command: GetPoolTokenInput) -> PoolTokenSeed:
        if isinstance(command, GetPoolTokenByPoolInput):
            return Pool(id=command.pool_id)
        if isinstance(command, GetPoolTokenByPairInput):
            return Pair(
                id=command.pair_id,
                token0=Token(id=command.token0_id),
                token1=Token(id=command.token1_id),
            )
        if isinstance(command, GetPoolTokenBySwapInput):
            return Swap(id=command.swap_id)
        if isinstance(command, GetPoolTokenByTokenInput):
            # the pool token index is keyed by LP token id, so a cached entry
            # never needs the upstream token record
            token = Token(id=command.token_id)
            if self._cache.peek_existing(token) is not None:
                return token
            token = self._token_port.get_token(command.token_id)
            if token is None:
                raise TokenNotFoundError("Token not found.")
            return token
        raise TypeError(f"Unsupported pool token input: {type(command).__name__}")
