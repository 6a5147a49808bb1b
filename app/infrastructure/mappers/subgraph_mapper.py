from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from app.domain.entities.loopring import Pair, Pool, PoolBalance, Remove, Swap, Token


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid balance value: {value!r}") from exc


def map_token(row: Mapping[str, Any] | None) -> Token | None:
    if not row or row.get("id") is None:
        return None
    decimals = row.get("decimals")
    return Token(
        id=str(row["id"]),
        name=row.get("name") or None,
        symbol=row.get("symbol") or None,
        decimals=int(decimals) if decimals is not None else 0,
    )


def map_pool(row: Mapping[str, Any] | None) -> Pool | None:
    if not row or row.get("id") is None:
        return None
    balances = tuple(
        PoolBalance(token=map_token(entry.get("token")), balance=_decimal(entry.get("balance")))
        for entry in row.get("balances") or []
    )
    return Pool(id=str(row["id"]), balances=balances)


def map_pair(row: Mapping[str, Any] | None) -> Pair | None:
    if not row:
        return None
    pair_id = row.get("id")
    return Pair(
        id=str(pair_id) if pair_id is not None else None,
        token0=map_token(row.get("token0")),
        token1=map_token(row.get("token1")),
    )


def map_swap(row: Mapping[str, Any] | None) -> Swap | None:
    if not row:
        return None
    swap_id = row.get("id")
    return Swap(
        id=str(swap_id) if swap_id is not None else None,
        pool=map_pool(row.get("pool")),
        pair=map_pair(row.get("pair")),
    )


def map_remove(row: Mapping[str, Any] | None) -> Remove | None:
    if not row or row.get("id") is None:
        return None
    return Remove(id=str(row["id"]), pool=map_pool(row.get("pool")))
