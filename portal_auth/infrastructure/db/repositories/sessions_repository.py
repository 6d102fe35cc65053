from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import bindparam, text
from sqlalchemy.dialects.postgresql import JSONB

from portal_auth.application.ports.session_port import SessionPort
from portal_auth.infrastructure.db.mappers.sessions_mapper import (
    SESSION_COLUMNS,
    map_row_to_customer_session,
)


def _is_uuid(value: str) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


class SqlSessionRepository(SessionPort):
    def __init__(self, engine):
        self._engine = engine

    def upsert_device_session(
        self,
        *,
        session_id: str,
        customer_id: str,
        device_id: str,
        device_name: str | None,
        user_agent: str | None,
        ip_address: str | None,
        country: str | None,
        province: str | None,
        district: str | None,
        latitude: float | None,
        longitude: float | None,
        geo_location: dict[str, Any] | None,
        metadata: dict[str, Any],
        refresh_token_hash: str,
        refresh_expires_at: datetime,
        now: datetime,
    ):
        # single statement: concurrent logins from one device cannot both insert
        sql = f"""
            INSERT INTO public.customer_sessions (
                id, customer_id, device_id, device_name, user_agent, ip_address,
                country, province, district, latitude, longitude, geo_location,
                refresh_token_hash, refresh_expires_at, last_activity_at,
                revoked_at, revoked_reason, metadata, created_at, updated_at
            ) VALUES (
                :id, :customer_id, :device_id, :device_name, :user_agent, :ip_address,
                :country, :province, :district, :latitude, :longitude, :geo_location,
                :refresh_token_hash, :refresh_expires_at, :now,
                NULL, NULL, :metadata, :now, :now
            )
            ON CONFLICT (customer_id, device_id) WHERE revoked_at IS NULL
            DO UPDATE SET
                device_name = EXCLUDED.device_name,
                user_agent = EXCLUDED.user_agent,
                ip_address = EXCLUDED.ip_address,
                country = EXCLUDED.country,
                province = EXCLUDED.province,
                district = EXCLUDED.district,
                latitude = EXCLUDED.latitude,
                longitude = EXCLUDED.longitude,
                geo_location = EXCLUDED.geo_location,
                metadata = EXCLUDED.metadata,
                refresh_token_hash = EXCLUDED.refresh_token_hash,
                refresh_expires_at = EXCLUDED.refresh_expires_at,
                last_activity_at = EXCLUDED.last_activity_at,
                updated_at = EXCLUDED.updated_at
            RETURNING {SESSION_COLUMNS}
        """
        stmt = text(sql).bindparams(
            bindparam("geo_location", type_=JSONB),
            bindparam("metadata", type_=JSONB),
        )
        params = {
            "id": session_id,
            "customer_id": customer_id,
            "device_id": device_id,
            "device_name": device_name,
            "user_agent": user_agent,
            "ip_address": ip_address,
            "country": country,
            "province": province,
            "district": district,
            "latitude": latitude,
            "longitude": longitude,
            "geo_location": geo_location,
            "metadata": metadata,
            "refresh_token_hash": refresh_token_hash,
            "refresh_expires_at": refresh_expires_at,
            "now": now,
        }
        with self._engine.begin() as conn:
            row = conn.execute(stmt, params).mappings().one()
        return map_row_to_customer_session(row)

    def get_session(self, *, session_id: str):
        if not _is_uuid(session_id):
            return None
        sql = f"""
            SELECT {SESSION_COLUMNS}
            FROM public.customer_sessions
            WHERE id = :session_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"session_id": session_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_customer_session(row)

    def list_sessions_by_customer(self, *, customer_id: str):
        if not _is_uuid(customer_id):
            return []
        sql = f"""
            SELECT {SESSION_COLUMNS}
            FROM public.customer_sessions
            WHERE customer_id = :customer_id
            ORDER BY created_at DESC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"customer_id": customer_id}).mappings().all()
        return [map_row_to_customer_session(row) for row in rows]

    def swap_refresh_token(
        self,
        *,
        session_id: str,
        expected_hash: str,
        new_hash: str,
        refresh_expires_at: datetime,
        now: datetime,
    ):
        sql = f"""
            UPDATE public.customer_sessions
            SET refresh_token_hash = :new_hash,
                refresh_expires_at = :refresh_expires_at,
                last_activity_at = :now,
                updated_at = :now
            WHERE id = :session_id
              AND refresh_token_hash = :expected_hash
              AND revoked_at IS NULL
            RETURNING {SESSION_COLUMNS}
        """
        params = {
            "session_id": session_id,
            "expected_hash": expected_hash,
            "new_hash": new_hash,
            "refresh_expires_at": refresh_expires_at,
            "now": now,
        }
        with self._engine.begin() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_customer_session(row)

    def revoke_session(self, *, session_id: str, revoked_at: datetime, reason: str) -> bool:
        sql = """
            UPDATE public.customer_sessions
            SET revoked_at = :revoked_at,
                revoked_reason = :reason,
                updated_at = :revoked_at
            WHERE id = :session_id
              AND revoked_at IS NULL
        """
        with self._engine.begin() as conn:
            result = conn.execute(
                text(sql),
                {
                    "session_id": session_id,
                    "revoked_at": revoked_at,
                    "reason": reason,
                },
            )
        return result.rowcount > 0

    def revoke_customer_sessions(
        self,
        *,
        customer_id: str,
        revoked_at: datetime,
        reason: str,
        exclude_session_id: str | None = None,
    ) -> int:
        if not _is_uuid(customer_id):
            return 0
        sql = """
            UPDATE public.customer_sessions
            SET revoked_at = :revoked_at,
                revoked_reason = :reason,
                updated_at = :revoked_at
            WHERE customer_id = :customer_id
              AND revoked_at IS NULL
        """
        params = {
            "customer_id": customer_id,
            "revoked_at": revoked_at,
            "reason": reason,
        }
        if exclude_session_id is not None and _is_uuid(exclude_session_id):
            sql += "  AND id <> :exclude_session_id\n"
            params["exclude_session_id"] = exclude_session_id
        with self._engine.begin() as conn:
            result = conn.execute(text(sql), params)
        return result.rowcount

    def touch_session(self, *, session_id: str, now: datetime) -> None:
        sql = """
            UPDATE public.customer_sessions
            SET last_activity_at = :now
            WHERE id = :session_id
              AND revoked_at IS NULL
        """
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"session_id": session_id, "now": now})
