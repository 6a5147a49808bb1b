from __future__ import annotations

import logging

from app.application.dto.pool_token import GetTokenViewInput, TokenViewOutput
from app.application.ports.pool_token_source_port import TokenLookupPort
from app.application.use_cases.resolve_pool_token import PoolTokenCache
from app.domain.exceptions import TokenNotFoundError, UpstreamSourceError


logger = logging.getLogger(__name__)


class GetTokenViewUseCase:
    """Dados da pagina de token: a visao LP quando a pool do token e conhecida.

    Falhas na resolucao do pool token nunca derrubam a pagina; o token bruto
    e exibido no lugar.
    """

    def __init__(self, *, cache: PoolTokenCache, token_port: TokenLookupPort):
        self._cache = cache
        self._token_port = token_port

    def execute(self, command: GetTokenViewInput) -> TokenViewOutput:
        token = self._token_port.get_token(command.token_id)
        if token is None:
            raise TokenNotFoundError("Token not found.")

        try:
            pool_token = self._cache.resolve_token(token)
        except UpstreamSourceError as exc:
            logger.warning(
                "get_token_view: pool_token_unavailable token=%s error=%s",
                token.id,
                exc,
            )
            pool_token = None

        if pool_token is None:
            return TokenViewOutput(token=token, pool_token=None)
        return TokenViewOutput(token=pool_token.token, pool_token=pool_token)
