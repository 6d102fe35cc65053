from __future__ import annotations

from sqlalchemy import text

from portal_auth.application.ports.principal_port import PrincipalPort
from portal_auth.infrastructure.db.mappers.principals_mapper import (
    map_row_to_customer,
    map_row_to_user,
)


class SqlPrincipalRepository(PrincipalPort):
    """Read-only access to the staff and customer tables."""

    def __init__(self, engine):
        self._engine = engine

    def get_user_by_username(self, *, username: str):
        sql = """
            SELECT
                u.id,
                u.username,
                u.password AS password_hash,
                u.role_id,
                r.name AS role_name
            FROM public.users u
            LEFT JOIN public.roles r
              ON r.id = u.role_id
            WHERE u.username = :username
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"username": username}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_customer_by_login(self, *, username: str | None, email: str | None):
        if username:
            where, params = "username = :username", {"username": username}
        elif email:
            where, params = "lower(email) = :email", {"email": email.lower()}
        else:
            return None
        sql = f"""
            SELECT id, username, email, password AS password_hash
            FROM public.customers
            WHERE {where}
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_customer(row)

    def get_customer_by_id(self, *, customer_id: str):
        sql = """
            SELECT id, username, email, password AS password_hash
            FROM public.customers
            WHERE id = :customer_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"customer_id": customer_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_customer(row)
