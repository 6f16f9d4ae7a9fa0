from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db' (':memory:' allowed)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - JWT_SECRET: HS256 signing secret used to verify bearer tokens (required)
    - JWT_ISSUER / JWT_AUDIENCE: expected token issuer and audience
    - JWT_MAX_AGE_SECONDS: oldest accepted token age, measured from 'iat'. Default 25h
    - LOG_LEVEL: root log level. Default 'INFO'
    - APP_HOST / APP_PORT: bind address used by run()
    """

    sqlite_db_path: str
    cors_allow_origins: List[str]
    jwt_secret: Optional[str]
    jwt_issuer: str
    jwt_audience: str
    jwt_max_age_seconds: int
    log_level: str
    app_host: str
    app_port: int


MIN_JWT_SECRET_LENGTH = 32


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    secret = os.getenv("JWT_SECRET")
    return Settings(
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        jwt_secret=secret if secret else None,
        jwt_issuer=_get_env("JWT_ISSUER", "task-manager-api").strip(),
        jwt_audience=_get_env("JWT_AUDIENCE", "task-manager-api").strip(),
        jwt_max_age_seconds=_parse_int(_get_env("JWT_MAX_AGE_SECONDS", "90000"), 90000),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        app_host=_get_env("APP_HOST", "0.0.0.0").strip(),
        app_port=_parse_int(_get_env("APP_PORT", "3000"), 3000),
    )
