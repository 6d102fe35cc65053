from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from portal_auth.application.ports.session_port import SessionPort
from portal_auth.domain.entities.device import DeviceFingerprint
from portal_auth.domain.entities.session import (
    REVOKE_REASON_ALL,
    REVOKE_REASON_MANUAL,
    REVOKE_REASON_OTHERS,
    REVOKE_REASON_REUSE,
    CustomerSession,
)
from portal_auth.domain.exceptions import (
    ForbiddenError,
    InvalidRefreshTokenError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionRevokedError,
)


logger = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 48


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Per-device customer sessions with rotating refresh tokens.

    Only the SHA-256 digest of a refresh token is persisted. Presenting a
    token that does not match the stored digest revokes the session, so a
    stolen token that was already rotated, or a duplicate retry, ends it.
    """

    def __init__(self, *, session_port: SessionPort, clock=utcnow):
        self._session_port = session_port
        self._clock = clock

    def generate_refresh_token(self) -> str:
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)

    def hash_refresh_token(self, refresh_token: str) -> str:
        return hashlib.sha256(refresh_token.encode("utf-8")).hexdigest()

    def _matches(self, refresh_token: str, refresh_token_hash: str) -> bool:
        return hmac.compare_digest(self.hash_refresh_token(refresh_token), refresh_token_hash)

    def create(
        self,
        *,
        customer_id: str,
        fingerprint: DeviceFingerprint,
        ttl: timedelta,
    ) -> tuple[CustomerSession, str]:
        now = self._clock()
        raw_token = self.generate_refresh_token()
        location = fingerprint.location
        session = self._session_port.upsert_device_session(
            session_id=str(uuid4()),
            customer_id=customer_id,
            device_id=fingerprint.device_id,
            device_name=fingerprint.device_name,
            user_agent=fingerprint.user_agent,
            ip_address=fingerprint.ip_address,
            country=location.country,
            province=location.province,
            district=location.district,
            latitude=location.latitude,
            longitude=location.longitude,
            geo_location=location.geo,
            metadata=fingerprint.metadata,
            refresh_token_hash=self.hash_refresh_token(raw_token),
            refresh_expires_at=now + ttl,
            now=now,
        )
        logger.info(
            "session_store: session=%s customer=%s device=%s issued",
            session.id,
            customer_id,
            fingerprint.device_id,
        )
        return session, raw_token

    def get(self, session_id: str) -> CustomerSession:
        session = self._session_port.get_session(session_id=session_id)
        if session is None:
            raise SessionNotFoundError("Session not found.")
        return session

    def rotate(
        self,
        *,
        session_id: str,
        presented_token: str,
        ttl: timedelta,
    ) -> tuple[CustomerSession, str]:
        session = self.get(session_id)
        now = self._clock()
        if session.is_revoked:
            raise SessionRevokedError("Session revoked.")
        if session.is_expired(now):
            raise SessionExpiredError("Session expired.")

        if not self._matches(presented_token, session.refresh_token_hash):
            self._revoke_for_reuse(session_id=session.id, now=now)
            raise InvalidRefreshTokenError("Invalid refresh token.")

        new_token = self.generate_refresh_token()
        rotated = self._session_port.swap_refresh_token(
            session_id=session.id,
            expected_hash=session.refresh_token_hash,
            new_hash=self.hash_refresh_token(new_token),
            refresh_expires_at=now + ttl,
            now=now,
        )
        if rotated is None:
            # another rotation with the same token landed first
            self._revoke_for_reuse(session_id=session.id, now=now)
            raise InvalidRefreshTokenError("Invalid refresh token.")

        logger.info("session_store: session=%s rotated", session.id)
        return rotated, new_token

    def _revoke_for_reuse(self, *, session_id: str, now: datetime) -> None:
        self._session_port.revoke_session(
            session_id=session_id,
            revoked_at=now,
            reason=REVOKE_REASON_REUSE,
        )
        logger.warning("session_store: session=%s refresh token reuse detected, revoked", session_id)

    def revoke(
        self,
        *,
        session_id: str,
        requester_customer_id: str,
        reason: str = REVOKE_REASON_MANUAL,
    ) -> CustomerSession:
        session = self.get(session_id)
        if session.customer_id != requester_customer_id:
            raise ForbiddenError("Not allowed.")
        if session.is_revoked:
            return session

        self._session_port.revoke_session(session_id=session.id, revoked_at=self._clock(), reason=reason)
        logger.info("session_store: session=%s revoked reason=%s", session.id, reason)
        return self.get(session.id)

    def revoke_others(self, *, current_session_id: str, customer_id: str) -> int:
        count = self._session_port.revoke_customer_sessions(
            customer_id=customer_id,
            revoked_at=self._clock(),
            reason=REVOKE_REASON_OTHERS,
            exclude_session_id=current_session_id,
        )
        logger.info("session_store: customer=%s revoked %s other sessions", customer_id, count)
        return count

    def revoke_all(self, *, customer_id: str) -> int:
        count = self._session_port.revoke_customer_sessions(
            customer_id=customer_id,
            revoked_at=self._clock(),
            reason=REVOKE_REASON_ALL,
        )
        logger.info("session_store: customer=%s revoked %s sessions", customer_id, count)
        return count

    def list_by_customer(self, customer_id: str) -> list[CustomerSession]:
        return self._session_port.list_sessions_by_customer(customer_id=customer_id)

    def touch(self, session_id: str) -> None:
        self._session_port.touch_session(session_id=session_id, now=self._clock())
