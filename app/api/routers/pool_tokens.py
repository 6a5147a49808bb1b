from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_pool_token_use_case, get_token_view_use_case
from app.api.schemas.pool_token import (
    PairResponse,
    PoolBalanceResponse,
    PoolResponse,
    PoolTokenResponse,
    TokenResponse,
    TokenViewResponse,
)
from app.application.dto.pool_token import (
    GetPoolTokenByPairInput,
    GetPoolTokenByPoolInput,
    GetPoolTokenBySwapInput,
    GetPoolTokenByTokenInput,
    GetPoolTokenInput,
    GetTokenViewInput,
)
from app.application.use_cases.get_pool_token import GetPoolTokenUseCase
from app.application.use_cases.get_token_view import GetTokenViewUseCase
from app.domain.entities.loopring import Pair, Pool, Token
from app.domain.entities.pool_token import PoolToken
from app.domain.exceptions import (
    PoolTokenNotFoundError,
    ResolutionCancelledError,
    TokenNotFoundError,
    UpstreamSourceError,
)

router = APIRouter()


def _token_response(token: Token | None) -> TokenResponse | None:
    if token is None:
        return None
    return TokenResponse(
        id=token.id,
        name=token.name,
        symbol=token.symbol,
        decimals=token.decimals,
    )


def _pool_response(pool: Pool) -> PoolResponse:
    return PoolResponse(
        id=pool.id,
        balances=[
            PoolBalanceResponse(token=_token_response(entry.token), balance=str(entry.balance))
            for entry in pool.balances
        ],
    )


def _pair_response(pair: Pair) -> PairResponse:
    return PairResponse(
        id=pair.id,
        token0=_token_response(pair.token0),
        token1=_token_response(pair.token1),
    )


def _pool_token_response(pool_token: PoolToken) -> PoolTokenResponse:
    return PoolTokenResponse(
        token=_token_response(pool_token.token),
        pool=_pool_response(pool_token.pool),
        pair=_pair_response(pool_token.pair),
    )


def _execute(use_case: GetPoolTokenUseCase, command: GetPoolTokenInput) -> PoolTokenResponse:
    try:
        pool_token = use_case.execute(command)
    except (PoolTokenNotFoundError, TokenNotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except UpstreamSourceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ResolutionCancelledError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return _pool_token_response(pool_token)


@router.get("/v1/pool-tokens/by-pool/{pool_id}", response_model=PoolTokenResponse)
def get_pool_token_by_pool(
    pool_id: str,
    use_case: GetPoolTokenUseCase = Depends(get_pool_token_use_case),
):
    return _execute(use_case, GetPoolTokenByPoolInput(pool_id=pool_id))


@router.get("/v1/pool-tokens/by-pair", response_model=PoolTokenResponse)
def get_pool_token_by_pair(
    token0_id: str,
    token1_id: str,
    pair_id: str | None = None,
    use_case: GetPoolTokenUseCase = Depends(get_pool_token_use_case),
):
    return _execute(
        use_case,
        GetPoolTokenByPairInput(token0_id=token0_id, token1_id=token1_id, pair_id=pair_id),
    )


@router.get("/v1/pool-tokens/by-swap/{swap_id}", response_model=PoolTokenResponse)
def get_pool_token_by_swap(
    swap_id: str,
    use_case: GetPoolTokenUseCase = Depends(get_pool_token_use_case),
):
    return _execute(use_case, GetPoolTokenBySwapInput(swap_id=swap_id))


@router.get("/v1/pool-tokens/by-token/{token_id}", response_model=PoolTokenResponse)
def get_pool_token_by_token(
    token_id: str,
    use_case: GetPoolTokenUseCase = Depends(get_pool_token_use_case),
):
    return _execute(use_case, GetPoolTokenByTokenInput(token_id=token_id))


@router.get("/v1/tokens/{token_id}", response_model=TokenViewResponse)
def get_token_view(
    token_id: str,
    use_case: GetTokenViewUseCase = Depends(get_token_view_use_case),
):
    try:
        result = use_case.execute(GetTokenViewInput(token_id=token_id))
    except TokenNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except UpstreamSourceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return TokenViewResponse(
        token=_token_response(result.token),
        is_pool_token=result.pool_token is not None,
        pool_token=_pool_token_response(result.pool_token) if result.pool_token else None,
    )
