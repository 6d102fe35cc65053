from __future__ import annotations


class DomainError(Exception):
    """Base para erros de dominio."""


class InvalidCredentialsError(DomainError):
    """Usuario inexistente ou senha incorreta."""


class MalformedTokenError(DomainError):
    """Token sem a estrutura header.payload.signature."""


class InvalidTokenTypeError(DomainError):
    """Tipo de principal do token ausente ou incompativel com a rota."""


class TokenSignatureInvalidError(DomainError):
    """Assinatura do token nao confere com o segredo do tipo declarado."""


class TokenExpiredError(DomainError):
    """Token com exp no passado."""


class SessionNotFoundError(DomainError):
    """Sessao solicitada nao existe."""


class SessionRevokedError(DomainError):
    """Sessao ja revogada."""


class SessionExpiredError(DomainError):
    """Refresh da sessao expirado."""


class InvalidRefreshTokenError(DomainError):
    """Refresh token nao confere; a sessao foi revogada."""


class ForbiddenError(DomainError):
    """Sessao pertence a outro cliente."""
