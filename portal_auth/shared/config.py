from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str = "false") -> bool:
    return (_env(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


def _list(name: str, default: str = "") -> list[str]:
    value = _env(name, default) or ""
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    jwt_user_secret: str
    jwt_customer_secret: str
    jwt_access_ttl_seconds: int
    customer_refresh_ttl_days: int
    geoip_database_path: str
    argon2_memory_cost: int
    argon2_time_cost: int
    argon2_parallelism: int
    auto_create_schema: bool
    log_level: str
    cors_allow_origins: list[str]


def get_settings() -> Settings:
    shared_secret = _env("JWT_SECRET", "")
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        jwt_user_secret=_env("JWT_USER_SECRET") or shared_secret,
        jwt_customer_secret=_env("JWT_CUSTOMER_SECRET") or shared_secret,
        jwt_access_ttl_seconds=int(_env("JWT_ACCESS_TTL_SECONDS", "86400")),
        customer_refresh_ttl_days=int(_env("CUSTOMER_REFRESH_TTL_DAYS", "30")),
        geoip_database_path=_env("GEOIP_DATABASE_PATH", ""),
        argon2_memory_cost=int(_env("ARGON2_MEMORY_COST", "65536")),
        argon2_time_cost=int(_env("ARGON2_TIME_COST", "3")),
        argon2_parallelism=int(_env("ARGON2_PARALLELISM", "1")),
        auto_create_schema=_bool("AUTO_CREATE_SCHEMA"),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        cors_allow_origins=_list("CORS_ALLOW_ORIGINS", "*"),
    )
