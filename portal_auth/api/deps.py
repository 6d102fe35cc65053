from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from portal_auth.application.services.device_fingerprinter import DeviceFingerprinter
from portal_auth.application.services.session_store import SessionStore
from portal_auth.application.use_cases.list_sessions import ListSessionsUseCase
from portal_auth.application.use_cases.login_customer import LoginCustomerUseCase
from portal_auth.application.use_cases.login_user import LoginUserUseCase
from portal_auth.application.use_cases.refresh_customer_token import RefreshCustomerTokenUseCase
from portal_auth.application.use_cases.revoke_all_sessions import RevokeAllSessionsUseCase
from portal_auth.application.use_cases.revoke_other_sessions import RevokeOtherSessionsUseCase
from portal_auth.application.use_cases.revoke_session import RevokeSessionUseCase
from portal_auth.domain.entities.principal import CredentialPayload, PrincipalType
from portal_auth.domain.exceptions import DomainError, SessionNotFoundError
from portal_auth.infrastructure.clients.geoip_client import MaxMindGeoIpClient
from portal_auth.infrastructure.db.engine import get_engine
from portal_auth.infrastructure.db.repositories.principals_repository import SqlPrincipalRepository
from portal_auth.infrastructure.db.repositories.sessions_repository import SqlSessionRepository
from portal_auth.infrastructure.security.password_hasher import Argon2Params, PasswordHasher
from portal_auth.infrastructure.security.token_service import JwtCredentialService, JwtSecrets
from portal_auth.shared.config import get_settings


logger = logging.getLogger(__name__)


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def _get_principal_repository() -> SqlPrincipalRepository:
    return SqlPrincipalRepository(_get_db_engine())


def _get_session_repository() -> SqlSessionRepository:
    return SqlSessionRepository(_get_db_engine())


def _refresh_ttl() -> timedelta:
    return timedelta(days=get_settings().customer_refresh_ttl_days)


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    settings = get_settings()
    return PasswordHasher(
        params=Argon2Params(
            memory_cost=settings.argon2_memory_cost,
            time_cost=settings.argon2_time_cost,
            parallelism=settings.argon2_parallelism,
        )
    )


@lru_cache(maxsize=1)
def _get_credential_service() -> JwtCredentialService:
    settings = get_settings()
    if not settings.jwt_user_secret or not settings.jwt_customer_secret:
        raise HTTPException(status_code=500, detail="JWT_USER_SECRET and JWT_CUSTOMER_SECRET are required.")
    return JwtCredentialService(
        secrets=JwtSecrets(
            user_secret=settings.jwt_user_secret,
            customer_secret=settings.jwt_customer_secret,
        ),
        access_ttl_seconds=settings.jwt_access_ttl_seconds,
    )


@lru_cache(maxsize=1)
def _get_device_fingerprinter() -> DeviceFingerprinter:
    settings = get_settings()
    if not settings.geoip_database_path:
        logger.info("deps: GEOIP_DATABASE_PATH not set, geolocation disabled")
        return DeviceFingerprinter(geoip_port=None)

    try:
        geoip_port = MaxMindGeoIpClient(database_path=settings.geoip_database_path)
    except (OSError, ValueError) as exc:
        logger.warning("deps: geoip database unavailable path=%s error=%s", settings.geoip_database_path, exc)
        geoip_port = None
    return DeviceFingerprinter(geoip_port=geoip_port)


def get_session_store() -> SessionStore:
    return SessionStore(session_port=_get_session_repository())


def get_login_user_use_case() -> LoginUserUseCase:
    return LoginUserUseCase(
        principal_port=_get_principal_repository(),
        password_hasher=_get_password_hasher(),
        credential_port=_get_credential_service(),
    )


def get_login_customer_use_case() -> LoginCustomerUseCase:
    return LoginCustomerUseCase(
        principal_port=_get_principal_repository(),
        password_hasher=_get_password_hasher(),
        credential_port=_get_credential_service(),
        session_store=get_session_store(),
        device_fingerprinter=_get_device_fingerprinter(),
        refresh_ttl=_refresh_ttl(),
    )


def get_refresh_customer_token_use_case() -> RefreshCustomerTokenUseCase:
    return RefreshCustomerTokenUseCase(
        principal_port=_get_principal_repository(),
        credential_port=_get_credential_service(),
        session_store=get_session_store(),
        refresh_ttl=_refresh_ttl(),
    )


def get_list_sessions_use_case(
    session_store: SessionStore = Depends(get_session_store),
) -> ListSessionsUseCase:
    return ListSessionsUseCase(session_store=session_store)


def get_revoke_session_use_case(
    session_store: SessionStore = Depends(get_session_store),
) -> RevokeSessionUseCase:
    return RevokeSessionUseCase(session_store=session_store)


def get_revoke_other_sessions_use_case(
    session_store: SessionStore = Depends(get_session_store),
) -> RevokeOtherSessionsUseCase:
    return RevokeOtherSessionsUseCase(session_store=session_store)


def get_revoke_all_sessions_use_case(
    session_store: SessionStore = Depends(get_session_store),
) -> RevokeAllSessionsUseCase:
    return RevokeAllSessionsUseCase(session_store=session_store)


def get_credential_service() -> JwtCredentialService:
    return _get_credential_service()


def _bearer_token(authorization: str) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token.")
    return token


def _verify(credential_service, authorization: str, expected_type: PrincipalType) -> CredentialPayload:
    token = _bearer_token(authorization)
    try:
        return credential_service.verify(token=token, expected_type=expected_type)
    except DomainError as exc:
        raise HTTPException(
            status_code=401,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_current_user(
    authorization: str = Header(...),
    credential_service: JwtCredentialService = Depends(get_credential_service),
) -> CredentialPayload:
    return _verify(credential_service, authorization, "user")


def get_current_customer(
    authorization: str = Header(...),
    credential_service: JwtCredentialService = Depends(get_credential_service),
    session_store: SessionStore = Depends(get_session_store),
) -> CredentialPayload:
    payload = _verify(credential_service, authorization, "customer")
    if payload.session_id is None:
        raise HTTPException(status_code=401, detail="Token is not bound to a session.")

    try:
        session = session_store.get(payload.session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=401, detail="Session expired or revoked.") from exc
    if session.is_revoked or session.customer_id != payload.subject_id:
        raise HTTPException(status_code=401, detail="Session expired or revoked.")

    session_store.touch(session.id)
    return payload


def get_optional_customer(
    authorization: str | None = Header(default=None),
    credential_service: JwtCredentialService = Depends(get_credential_service),
    session_store: SessionStore = Depends(get_session_store),
) -> CredentialPayload | None:
    if not authorization:
        return None
    try:
        return get_current_customer(
            authorization=authorization,
            credential_service=credential_service,
            session_store=session_store,
        )
    except HTTPException:
        return None
