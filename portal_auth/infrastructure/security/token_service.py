from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

import jwt

from portal_auth.application.ports.credential_port import CredentialPort
from portal_auth.domain.entities.principal import (
    PRINCIPAL_TYPES,
    CredentialPayload,
    Customer,
    PrincipalType,
    User,
)
from portal_auth.domain.exceptions import (
    InvalidTokenTypeError,
    MalformedTokenError,
    TokenExpiredError,
    TokenSignatureInvalidError,
)


logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class JwtSecrets:
    user_secret: str
    customer_secret: str

    def for_type(self, principal_type: PrincipalType) -> str:
        if principal_type == "user":
            return self.user_secret
        return self.customer_secret


def peek_unverified_claims(token: str) -> dict:
    """Decode the claims segment without checking the signature.

    The result is only good for choosing a verification key.
    """
    if token.count(".") != 2:
        raise MalformedTokenError("Malformed token.")
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        raise MalformedTokenError("Malformed token.") from exc
    if not isinstance(claims, dict):
        raise MalformedTokenError("Malformed token.")
    return claims


def verify_signed_claims(token: str, *, secret: str) -> dict:
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "type", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired.") from exc
    except jwt.PyJWTError as exc:
        raise TokenSignatureInvalidError("Invalid token signature.") from exc


class JwtCredentialService(CredentialPort):
    def __init__(self, *, secrets: JwtSecrets, access_ttl_seconds: int):
        self._secrets = secrets
        self._access_ttl_seconds = access_ttl_seconds
        if secrets.user_secret == secrets.customer_secret:
            logger.warning("token_service: user and customer tokens share one secret")

    def sign(
        self,
        *,
        principal: User | Customer,
        session_id: str | None,
        now: datetime,
    ) -> tuple[str, datetime]:
        exp = now + timedelta(seconds=self._access_ttl_seconds)
        if isinstance(principal, User):
            principal_type: PrincipalType = "user"
            payload = {
                "sub": principal.id,
                "username": principal.username,
                "type": principal_type,
                "role_id": principal.role_id,
            }
        else:
            principal_type = "customer"
            payload = {
                "sub": principal.id,
                "username": principal.login_name,
                "type": principal_type,
            }
        if session_id is not None:
            payload["sid"] = session_id
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int(exp.timestamp())

        token = jwt.encode(payload, self._secrets.for_type(principal_type), algorithm=JWT_ALGORITHM)
        return token, exp

    def peek_principal_type(self, *, token: str) -> PrincipalType:
        claimed = peek_unverified_claims(token).get("type")
        if claimed not in PRINCIPAL_TYPES:
            raise InvalidTokenTypeError("Invalid token type.")
        return claimed

    def verify(self, *, token: str, expected_type: PrincipalType | None = None) -> CredentialPayload:
        principal_type = self.peek_principal_type(token=token)
        claims = verify_signed_claims(token, secret=self._secrets.for_type(principal_type))

        if claims.get("type") != principal_type:
            raise InvalidTokenTypeError("Invalid token type.")
        if expected_type is not None and principal_type != expected_type:
            raise InvalidTokenTypeError(f"Invalid token type for {expected_type} route.")

        role_id = claims.get("role_id")
        session_id = claims.get("sid")
        return CredentialPayload(
            subject_id=str(claims["sub"]),
            username=str(claims.get("username") or ""),
            principal_type=principal_type,
            role_id=str(role_id) if role_id is not None else None,
            session_id=str(session_id) if session_id is not None else None,
            issued_at=int(claims["iat"]),
            expires_at=int(claims["exp"]),
        )