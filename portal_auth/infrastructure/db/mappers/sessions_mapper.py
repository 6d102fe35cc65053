from __future__ import annotations

from typing import Any, Mapping

from portal_auth.domain.entities.session import CustomerSession


SESSION_COLUMNS = """
    id, customer_id, device_id, device_name, user_agent, ip_address,
    country, province, district, latitude, longitude, geo_location,
    refresh_token_hash, refresh_expires_at, last_activity_at,
    revoked_at, revoked_reason, metadata, created_at, updated_at
"""


def _as_str(value: Any) -> str:
    return str(value)


def _as_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def map_row_to_customer_session(row: Mapping[str, Any]) -> CustomerSession:
    return CustomerSession(
        id=_as_str(row["id"]),
        customer_id=_as_str(row["customer_id"]),
        device_id=row.get("device_id"),
        device_name=row.get("device_name"),
        user_agent=row.get("user_agent"),
        ip_address=row.get("ip_address"),
        country=row.get("country"),
        province=row.get("province"),
        district=row.get("district"),
        latitude=_as_float(row.get("latitude")),
        longitude=_as_float(row.get("longitude")),
        geo_location=row.get("geo_location"),
        refresh_token_hash=row["refresh_token_hash"],
        refresh_expires_at=row["refresh_expires_at"],
        last_activity_at=row.get("last_activity_at"),
        revoked_at=row.get("revoked_at"),
        revoked_reason=row.get("revoked_reason"),
        metadata=row.get("metadata") or {},
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
