from __future__ import annotations

from threading import Lock

from app.domain.entities.pool_token import PoolToken
from app.domain.exceptions import PoolTokenIndexConflictError


def pair_key(token0_id: str, token1_id: str) -> tuple[str, str]:
    if token0_id <= token1_id:
        return token0_id, token1_id
    return token1_id, token0_id


class PoolTokenIndex:
    """Pool tokens reachable by LP token id, unordered pair and pool id.

    `_entries` owns the values; the three dicts are lookup paths into it and
    are always written together.
    """

    def __init__(self):
        self._lock = Lock()
        self._entries: list[PoolToken] = []
        self._by_token_id: dict[str, PoolToken] = {}
        self._by_pair: dict[tuple[str, str], PoolToken] = {}
        self._by_pool_id: dict[str, PoolToken] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def entries(self) -> list[PoolToken]:
        with self._lock:
            return list(self._entries)

    def get_by_token_id(self, token_id: str) -> PoolToken | None:
        with self._lock:
            return self._by_token_id.get(token_id)

    def get_by_pair(self, token0_id: str, token1_id: str) -> PoolToken | None:
        with self._lock:
            return self._by_pair.get(pair_key(token0_id, token1_id))

    def get_by_pool_id(self, pool_id: str) -> PoolToken | None:
        with self._lock:
            return self._by_pool_id.get(pool_id)

    def insert(self, pool_token: PoolToken) -> None:
        token_ids = pool_token.pair.token_ids
        if token_ids is None:
            raise ValueError("pool token pair must carry token0 and token1.")
        token_id = pool_token.token.id
        key = pair_key(*token_ids)
        pool_id = pool_token.pool.id

        with self._lock:
            if token_id in self._by_token_id:
                raise PoolTokenIndexConflictError(f"LP token {token_id} is already indexed.")
            if key in self._by_pair:
                raise PoolTokenIndexConflictError(f"Pair {key[0]}/{key[1]} is already indexed.")
            if pool_id in self._by_pool_id:
                raise PoolTokenIndexConflictError(f"Pool {pool_id} is already indexed.")

            self._entries.append(pool_token)
            self._by_token_id[token_id] = pool_token
            self._by_pair[key] = pool_token
            self._by_pool_id[pool_id] = pool_token
