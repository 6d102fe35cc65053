from __future__ import annotations

from typing import Protocol

from portal_auth.domain.entities.principal import Customer, User


class PrincipalPort(Protocol):
    def get_user_by_username(self, *, username: str) -> User | None:
        ...

    def get_customer_by_login(self, *, username: str | None, email: str | None) -> Customer | None:
        ...

    def get_customer_by_id(self, *, customer_id: str) -> Customer | None:
        ...
