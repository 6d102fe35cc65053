from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import bcrypt
from passlib.hash import argon2

from portal_auth.application.ports.password_hasher_port import PasswordHasherPort


@dataclass(frozen=True)
class Argon2Params:
    memory_cost: int = 2**16
    time_cost: int = 3
    parallelism: int = 1


class HashScheme(Protocol):
    name: str

    def identify(self, password_hash: str) -> bool:
        ...

    def verify(self, plain_password: str, password_hash: str) -> bool:
        ...


class Argon2Scheme:
    name = "argon2"

    def __init__(self, params: Argon2Params):
        # argon2id is passlib's default variant with argon2-cffi
        self._handler = argon2.using(
            memory_cost=params.memory_cost,
            rounds=params.time_cost,
            parallelism=params.parallelism,
        )

    def identify(self, password_hash: str) -> bool:
        return password_hash.startswith("$argon2")

    def hash(self, plain_password: str) -> str:
        return self._handler.hash(plain_password)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return self._handler.verify(plain_password, password_hash)


class BcryptScheme:
    """Legacy hashes; checked with bcrypt directly since passlib breaks on bcrypt>=4.1."""

    name = "bcrypt"
    _PREFIXES = ("$2a$", "$2b$", "$2y$")

    def identify(self, password_hash: str) -> bool:
        return password_hash.startswith(self._PREFIXES)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))


class PasswordHasher(PasswordHasherPort):
    def __init__(
        self,
        *,
        params: Argon2Params | None = None,
        legacy_schemes: Sequence[HashScheme] | None = None,
    ):
        self._current = Argon2Scheme(params or Argon2Params())
        legacy = list(legacy_schemes) if legacy_schemes is not None else [BcryptScheme()]
        # newest first; a new algorithm is prepended here
        self._schemes: list[HashScheme] = [self._current, *legacy]

    @property
    def scheme_names(self) -> list[str]:
        return [scheme.name for scheme in self._schemes]

    def hash(self, plain_password: str) -> str:
        return self._current.hash(plain_password)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        for scheme in self._schemes:
            if not scheme.identify(password_hash):
                continue
            try:
                return bool(scheme.verify(plain_password, password_hash))
            except Exception:
                return False
        return False
