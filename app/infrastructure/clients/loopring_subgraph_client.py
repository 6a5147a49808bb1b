from __future__ import annotations

from dataclasses import dataclass
import logging
from threading import Event, Lock
import time

import httpx

from app.domain.entities.loopring import Pair, Pool, Remove, Swap, Token
from app.domain.entities.pool_token import PoolTokenSeed
from app.domain.exceptions import ResolutionCancelledError, UpstreamSourceError
from app.infrastructure.mappers.subgraph_mapper import map_remove, map_swap, map_token


logger = logging.getLogger(__name__)


TOKEN_FRAGMENT = """
fragment TokenFragment on Token {
  id
  name
  symbol
  decimals
}
"""

SWAP_FIELDS = """
  id
  pool {
    id
    balances {
      balance
      token {
        ...TokenFragment
      }
    }
  }
  pair {
    id
    token0 {
      ...TokenFragment
    }
    token1 {
      ...TokenFragment
    }
  }
"""

SWAP_BY_ID_QUERY = (
    """
query swap($id: ID!) {
  swap(id: $id) {"""
    + SWAP_FIELDS
    + """  }
}
"""
    + TOKEN_FRAGMENT
)

LATEST_SWAP_BY_POOL_QUERY = (
    """
query latestSwapByPool($poolId: String!) {
  swaps(first: 1, orderBy: internalID, orderDirection: desc, where: { pool: $poolId }) {"""
    + SWAP_FIELDS
    + """  }
}
"""
    + TOKEN_FRAGMENT
)

LATEST_SWAP_BY_PAIR_QUERY = (
    """
query latestSwapByPair($pairId: String!) {
  swaps(first: 1, orderBy: internalID, orderDirection: desc, where: { pair: $pairId }) {"""
    + SWAP_FIELDS
    + """  }
}
"""
    + TOKEN_FRAGMENT
)

PAIR_BY_TOKENS_QUERY = """
query pairByTokens($tokenIds: [String!]!) {
  pairs(first: 1, where: { token0_in: $tokenIds, token1_in: $tokenIds }) {
    id
  }
}
"""

ANY_REMOVE_BY_TOKEN_QUERY = """
query anyRemoveByToken($tokenId: String!) {
  removes(first: 1, where: { token: $tokenId }) {
    id
    pool {
      id
    }
  }
}
"""

TOKEN_BY_ID_QUERY = (
    """
query token($id: ID!) {
  token(id: $id) {
    ...TokenFragment
  }
}
"""
    + TOKEN_FRAGMENT
)


class SubgraphRequestError(UpstreamSourceError):
    pass


@dataclass(frozen=True)
class LoopringSubgraphClientSettings:
    subgraph_url: str
    api_key: str
    timeout_seconds: float
    max_retries: int
    min_interval_ms: int


class LoopringSubgraphClient:
    def __init__(self, settings: LoopringSubgraphClientSettings):
        self._settings = settings
        self._lock = Lock()
        self._last_request_at = 0.0

    def enrich(
        self,
        seed: PoolTokenSeed,
        *,
        cancel_event: Event | None = None,
    ) -> Swap | None:
        if isinstance(seed, Swap):
            if not seed.id:
                return None
            payload = self._post_graphql(
                query=SWAP_BY_ID_QUERY,
                variables={"id": seed.id},
                cancel_event=cancel_event,
            )
            swap = map_swap(payload.get("data", {}).get("swap"))
        elif isinstance(seed, Pool):
            swap = self._latest_swap(
                query=LATEST_SWAP_BY_POOL_QUERY,
                variables={"poolId": seed.id},
                cancel_event=cancel_event,
            )
        elif isinstance(seed, Pair):
            pair_id = seed.id or self._find_pair_id(seed, cancel_event=cancel_event)
            if not pair_id:
                return None
            swap = self._latest_swap(
                query=LATEST_SWAP_BY_PAIR_QUERY,
                variables={"pairId": pair_id},
                cancel_event=cancel_event,
            )
        elif isinstance(seed, Token):
            remove = self.find_any_remove_by_token_id(seed.id, cancel_event=cancel_event)
            if remove is None or remove.pool is None:
                return None
            return self.enrich(remove.pool, cancel_event=cancel_event)
        else:
            raise TypeError(f"Unsupported pool token seed: {type(seed).__name__}")

        logger.info(
            "loopring_subgraph_client: enriched seed=%s found=%s",
            type(seed).__name__.lower(),
            swap is not None,
        )
        return swap

    def find_any_remove_by_token_id(
        self,
        token_id: str,
        *,
        cancel_event: Event | None = None,
    ) -> Remove | None:
        payload = self._post_graphql(
            query=ANY_REMOVE_BY_TOKEN_QUERY,
            variables={"tokenId": token_id},
            cancel_event=cancel_event,
        )
        rows = payload.get("data", {}).get("removes") or []
        if not rows:
            return None
        return map_remove(rows[0])

    def get_token(self, token_id: str) -> Token | None:
        payload = self._post_graphql(query=TOKEN_BY_ID_QUERY, variables={"id": token_id})
        return map_token(payload.get("data", {}).get("token"))

    def _latest_swap(
        self,
        *,
        query: str,
        variables: dict,
        cancel_event: Event | None,
    ) -> Swap | None:
        payload = self._post_graphql(query=query, variables=variables, cancel_event=cancel_event)
        rows = payload.get("data", {}).get("swaps") or []
        if not rows:
            return None
        return map_swap(rows[0])

    def _find_pair_id(self, pair: Pair, *, cancel_event: Event | None) -> str | None:
        token_ids = pair.token_ids
        if token_ids is None:
            return None
        payload = self._post_graphql(
            query=PAIR_BY_TOKENS_QUERY,
            variables={"tokenIds": list(token_ids)},
            cancel_event=cancel_event,
        )
        rows = payload.get("data", {}).get("pairs") or []
        if not rows or rows[0].get("id") is None:
            return None
        return str(rows[0]["id"])

    def _post_graphql(
        self,
        *,
        query: str,
        variables: dict,
        cancel_event: Event | None = None,
    ) -> dict:
        attempts = max(1, self._settings.max_retries)
        delay = 0.25
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise ResolutionCancelledError("Subgraph request cancelled.")
            self._respect_rate_limit()
            try:
                with httpx.Client(timeout=self._settings.timeout_seconds) as client:
                    response = client.post(
                        self._settings.subgraph_url,
                        json={"query": query, "variables": variables},
                        headers=self._headers(),
                    )
                    response.raise_for_status()
                    payload = response.json()

                errors = payload.get("errors") or []
                if errors:
                    message = " | ".join(str(err.get("message", err)) for err in errors)
                    raise SubgraphRequestError(message)

                return payload
            except (httpx.HTTPError, SubgraphRequestError, ValueError) as exc:
                last_exc = exc
                if attempt == attempts:
                    break
                logger.warning(
                    "loopring_subgraph_client: graphql_retry attempt=%s/%s error=%s",
                    attempt,
                    attempts,
                    exc,
                )
                if cancel_event is not None:
                    cancel_event.wait(delay)
                else:
                    time.sleep(delay)
                delay *= 2

        raise SubgraphRequestError(f"GraphQL request failed after retries: {last_exc}") from last_exc

    def _headers(self) -> dict:
        api_key = self._settings.api_key.strip()
        if not api_key:
            return {}
        return {"Authorization": f"Bearer {api_key}"}

    def _respect_rate_limit(self) -> None:
        min_interval = max(0, self._settings.min_interval_ms) / 1000.0
        if min_interval <= 0:
            return

        with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_at
            if elapsed < min_interval:
                time.sleep(min_interval - elapsed)
            self._last_request_at = time.monotonic()
