from __future__ import annotations

from functools import lru_cache

from app.application.use_cases.get_pool_token import GetPoolTokenUseCase
from app.application.use_cases.get_token_view import GetTokenViewUseCase
from app.application.use_cases.resolve_pool_token import PoolTokenCache
from app.infrastructure.clients.loopring_subgraph_client import (
    LoopringSubgraphClient,
    LoopringSubgraphClientSettings,
)
from app.shared.config import get_settings


@lru_cache(maxsize=1)
def _get_loopring_subgraph_client() -> LoopringSubgraphClient:
    settings = get_settings()
    return LoopringSubgraphClient(
        LoopringSubgraphClientSettings(
            subgraph_url=settings.loopring_subgraph_url,
            api_key=settings.graph_api_key,
            timeout_seconds=settings.graph_request_timeout_seconds,
            max_retries=settings.graph_max_retries,
            min_interval_ms=settings.graph_min_interval_ms,
        )
    )


@lru_cache(maxsize=1)
def get_pool_token_cache() -> PoolTokenCache:
    return PoolTokenCache(source=_get_loopring_subgraph_client())


def get_pool_token_use_case() -> GetPoolTokenUseCase:
    return GetPoolTokenUseCase(
        cache=get_pool_token_cache(),
        token_port=_get_loopring_subgraph_client(),
    )


def get_token_view_use_case() -> GetTokenViewUseCase:
    return GetTokenViewUseCase(
        cache=get_pool_token_cache(),
        token_port=_get_loopring_subgraph_client(),
    )
