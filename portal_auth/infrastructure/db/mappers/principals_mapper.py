from __future__ import annotations

from typing import Any, Mapping

from portal_auth.domain.entities.principal import Customer, User


def _as_str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=str(row["id"]),
        username=row["username"],
        password_hash=row.get("password_hash"),
        role_id=_as_str_or_none(row.get("role_id")),
        role_name=row.get("role_name"),
    )


def map_row_to_customer(row: Mapping[str, Any]) -> Customer:
    return Customer(
        id=str(row["id"]),
        username=row.get("username"),
        email=row.get("email"),
        password_hash=row.get("password_hash"),
    )
