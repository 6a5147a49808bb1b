from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
import logging
from threading import Event, Lock

from app.application.ports.pool_token_source_port import PoolTokenSourcePort
from app.domain.entities.loopring import Pair, Pool, Swap, Token
from app.domain.entities.pool_token import PoolToken, PoolTokenSeed
from app.domain.exceptions import ResolutionCancelledError
from app.domain.services.pool_token_identification import build_pool_token, find_pool_token
from app.domain.services.pool_token_index import PoolTokenIndex, pair_key


SeedKey = tuple[str, object]
WAIT_POLL_SECONDS = 0.05
# seed kinds the index answers directly
INDEXED_SEED_KINDS = ("pool", "pair")
logger = logging.getLogger(__name__)


def _raise_if_cancelled(cancel_event: Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ResolutionCancelledError("Pool token resolution cancelled.")


class PoolTokenCache:
    """Resolve e memoriza os LP tokens das pools AMM do Loopring.

    Uma pool pode ser alcancada por par, pool, swap ou token. Todo caminho
    termina em `_resolve_seed`, que enriquece a semente no upstream, escolhe o
    LP token entre os saldos da pool e indexa o resultado. Resolucoes
    concorrentes da mesma semente compartilham uma unica chamada upstream.
    """

    def __init__(self, *, source: PoolTokenSourcePort, index: PoolTokenIndex | None = None):
        self._source = source
        self._index = index if index is not None else PoolTokenIndex()
        self._insert_lock = Lock()
        self._inflight_lock = Lock()
        self._inflight: dict[SeedKey, Future] = {}
        # seed key -> pool id, for seeds the index cannot answer (swap id, pair id, token id)
        self._resolved_seeds: dict[SeedKey, str] = {}

    @property
    def index(self) -> PoolTokenIndex:
        return self._index

    def peek_existing(self, token: Token) -> PoolToken | None:
        return self._index.get_by_token_id(token.id)

    def resolve(self, seed: PoolTokenSeed, *, cancel_event: Event | None = None) -> PoolToken | None:
        if isinstance(seed, Pair):
            return self.resolve_pair(seed, cancel_event=cancel_event)
        if isinstance(seed, Pool):
            return self.resolve_pool(seed, cancel_event=cancel_event)
        if isinstance(seed, Swap):
            return self.resolve_swap(seed, cancel_event=cancel_event)
        if isinstance(seed, Token):
            return self.resolve_token(seed, cancel_event=cancel_event)
        raise TypeError(f"Unsupported pool token seed: {type(seed).__name__}")

    def resolve_pair(self, pair: Pair, *, cancel_event: Event | None = None) -> PoolToken | None:
        token_ids = pair.token_ids
        if token_ids is not None:
            cached = self._index.get_by_pair(*token_ids)
            if cached is not None:
                logger.debug("pool_token_cache: hit by=pair tokens=%s/%s", *token_ids)
                return cached
            key = ("pair", pair_key(*token_ids))
        elif pair.id:
            key = ("pair_id", pair.id)
        else:
            return self._resolve_seed(pair, cancel_event)
        return self._resolve_keyed(key, lambda: self._resolve_seed(pair, cancel_event), cancel_event)

    def resolve_pool(self, pool: Pool, *, cancel_event: Event | None = None) -> PoolToken | None:
        cached = self._index.get_by_pool_id(pool.id)
        if cached is not None:
            logger.debug("pool_token_cache: hit by=pool pool=%s", pool.id)
            return cached
        return self._resolve_keyed(
            ("pool", pool.id),
            lambda: self._resolve_seed(pool, cancel_event),
            cancel_event,
        )

    def resolve_swap(self, swap: Swap, *, cancel_event: Event | None = None) -> PoolToken | None:
        if swap.pool is not None:
            return self.resolve_pool(swap.pool, cancel_event=cancel_event)
        if swap.pair is not None:
            return self.resolve_pair(swap.pair, cancel_event=cancel_event)
        if not swap.id:
            return self._resolve_seed(swap, cancel_event)
        return self._resolve_keyed(
            ("swap", swap.id),
            lambda: self._resolve_seed(swap, cancel_event),
            cancel_event,
        )

    def resolve_token(self, token: Token, *, cancel_event: Event | None = None) -> PoolToken | None:
        cached = self._index.get_by_token_id(token.id)
        if cached is not None:
            logger.debug("pool_token_cache: hit by=token token=%s", token.id)
            return cached
        # named tokens come from upstream classification and are never LP tokens
        if token.is_named:
            return None
        pool_token = self._resolve_keyed(
            ("token", token.id),
            lambda: self._resolve_from_remove(token, cancel_event),
            cancel_event,
        )
        if pool_token is None:
            return None
        if pool_token.token.id != token.id:
            # removal events also reference constituent tokens of the pool
            logger.debug(
                "pool_token_cache: not_lp_token token=%s pool=%s lp_token=%s",
                token.id,
                pool_token.pool.id,
                pool_token.token.id,
            )
            return None
        return pool_token

    def _resolve_from_remove(self, token: Token, cancel_event: Event | None) -> PoolToken | None:
        cached = self._index.get_by_token_id(token.id)
        if cached is not None:
            return cached
        _raise_if_cancelled(cancel_event)
        remove = self._source.find_any_remove_by_token_id(token.id, cancel_event=cancel_event)
        if remove is None or remove.pool is None:
            logger.info("pool_token_cache: not_found reason=no_remove token=%s", token.id)
            return None
        return self.resolve_pool(remove.pool, cancel_event=cancel_event)

    def _resolve_keyed(
        self,
        key: SeedKey,
        resolve: Callable[[], PoolToken | None],
        cancel_event: Event | None,
    ) -> PoolToken | None:
        cached = self._lookup_resolved_seed(key)
        if cached is not None:
            return cached

        def work() -> PoolToken | None:
            # a previous leader may have finished between the probe and now
            cached = self._lookup_resolved_seed(key)
            if cached is not None:
                return cached
            result = resolve()
            if result is not None and key[0] not in INDEXED_SEED_KINDS:
                with self._inflight_lock:
                    self._resolved_seeds[key] = result.pool.id
            return result

        return self._coalesce(key, work, cancel_event)

    def _lookup_resolved_seed(self, key: SeedKey) -> PoolToken | None:
        kind, value = key
        if kind == "pool":
            return self._index.get_by_pool_id(value)
        if kind == "pair":
            return self._index.get_by_pair(*value)
        with self._inflight_lock:
            pool_id = self._resolved_seeds.get(key)
        if pool_id is None:
            return None
        return self._index.get_by_pool_id(pool_id)

    def _resolve_seed(self, seed: PoolTokenSeed, cancel_event: Event | None) -> PoolToken | None:
        _raise_if_cancelled(cancel_event)
        swap = self._source.enrich(seed, cancel_event=cancel_event)
        if swap is None or swap.pool is None or swap.pair is None:
            logger.info("pool_token_cache: not_found reason=not_enriched seed=%s", _describe(seed))
            return None

        with self._insert_lock:
            existing = self._index.get_by_pool_id(swap.pool.id)
            if existing is not None:
                return existing
            _raise_if_cancelled(cancel_event)

            lp_token = find_pool_token(swap.pool, swap.pair)
            if lp_token is None:
                logger.info(
                    "pool_token_cache: not_found reason=no_lp_balance pool=%s",
                    swap.pool.id,
                )
                return None
            pool_token = build_pool_token(lp_token, swap.pool, swap.pair)
            self._index.insert(pool_token)

        logger.info(
            "pool_token_cache: inserted pool=%s token=%s symbol=%s size=%s",
            pool_token.pool.id,
            pool_token.token.id,
            pool_token.token.symbol,
            len(self._index),
        )
        return pool_token

    def _coalesce(
        self,
        key: SeedKey,
        work: Callable[[], PoolToken | None],
        cancel_event: Event | None,
    ) -> PoolToken | None:
        while True:
            with self._inflight_lock:
                future = self._inflight.get(key)
                is_leader = future is None
                if is_leader:
                    future = Future()
                    self._inflight[key] = future

            if is_leader:
                try:
                    result = work()
                except BaseException as exc:
                    self._finish(key, future, exc=exc)
                    raise
                self._finish(key, future, result=result)
                return result

            try:
                return self._wait(future, cancel_event)
            except ResolutionCancelledError:
                if cancel_event is not None and cancel_event.is_set():
                    raise
                logger.debug("pool_token_cache: leader_cancelled key=%s retrying", key)

    def _finish(
        self,
        key: SeedKey,
        future: Future,
        *,
        result: PoolToken | None = None,
        exc: BaseException | None = None,
    ) -> None:
        if exc is not None:
            future.set_exception(exc)
        else:
            future.set_result(result)
        with self._inflight_lock:
            self._inflight.pop(key, None)

    @staticmethod
    def _wait(future: Future, cancel_event: Event | None) -> PoolToken | None:
        if cancel_event is None:
            return future.result()
        while True:
            _raise_if_cancelled(cancel_event)
            try:
                return future.result(timeout=WAIT_POLL_SECONDS)
            except FutureTimeoutError:
                continue


def _describe(seed: PoolTokenSeed) -> str:
    return f"{type(seed).__name__.lower()}:{getattr(seed, 'id', None)}"
