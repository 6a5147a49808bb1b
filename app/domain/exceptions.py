from __future__ import annotations


class DomainError(Exception):
    """Base para erros de dominio."""


class PoolTokenNotFoundError(DomainError):
    """Nao foi possivel resolver o pool token para a entidade solicitada."""


class TokenNotFoundError(DomainError):
    """Token solicitado nao existe no subgraph."""


class PoolTokenIndexConflictError(DomainError):
    """Pool token inserido duas vezes sob a mesma chave."""


class ResolutionCancelledError(DomainError):
    """Resolucao do pool token cancelada pelo chamador."""


class UpstreamSourceError(DomainError):
    """Fonte de dados upstream falhou ao responder."""
