"""Configuration for the database layer and the web front end."""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)


def _get(env: Mapping[str, str], *names: str, default: str) -> str:
    """Return the first non-empty variable among ``names``."""
    for name in names:
        value = env.get(name)
        if value:
            return value
    return default


def _get_int(env: Mapping[str, str], *names: str, default: int) -> int:
    raw = _get(env, *names, default=str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{names[0]} must be an integer, got {raw!r}") from None


def _get_float(env: Mapping[str, str], *names: str, default: float) -> float:
    raw = _get(env, *names, default=str(default))
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{names[0]} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection settings."""

    host: str = "localhost"
    port: int = 5432
    dbname: str = "oss_directory"
    user: str = "postgres"
    password: str = "postgres"
    sslmode: str = "disable"
    min_connections: int = 1
    max_connections: int = 5
    connect_timeout: int = 10
    pool_timeout: float = 30.0

    @property
    def connection_string(self) -> str:
        """libpq keyword/value connection string."""
        return (
            f"host={self.host} port={self.port} dbname={self.dbname} "
            f"user={self.user} password={self.password} "
            f"sslmode={self.sslmode} connect_timeout={self.connect_timeout}"
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "DatabaseConfig":
        """
        Build database settings from environment variables.

        ``POSTGRES_*`` variables take precedence; ``DB_USER``, ``DB_PASSWORD``
        and ``DB_NAME`` are accepted as fallbacks.

        Args:
            env: Variable mapping. If None, uses os.environ.
        """
        if env is None:
            env = os.environ

        config = cls(
            host=_get(env, "POSTGRES_HOST", default=cls.host),
            port=_get_int(env, "POSTGRES_PORT", default=cls.port),
            dbname=_get(env, "POSTGRES_DB", "DB_NAME", default=cls.dbname),
            user=_get(env, "POSTGRES_USER", "DB_USER", default=cls.user),
            password=_get(env, "POSTGRES_PASSWORD", "DB_PASSWORD", default=cls.password),
            sslmode=_get(env, "POSTGRES_SSLMODE", default=cls.sslmode),
            min_connections=_get_int(env, "POSTGRES_MIN_CONNECTIONS", default=cls.min_connections),
            max_connections=_get_int(env, "POSTGRES_MAX_CONNECTIONS", default=cls.max_connections),
            connect_timeout=_get_int(env, "POSTGRES_CONNECT_TIMEOUT", default=cls.connect_timeout),
            pool_timeout=_get_float(env, "POSTGRES_POOL_TIMEOUT", default=cls.pool_timeout),
        )
        if config.pool_timeout <= 0:
            raise ValueError(f"POSTGRES_POOL_TIMEOUT must be positive, got {config.pool_timeout}")
        if config.min_connections < 1 or config.max_connections < config.min_connections:
            raise ValueError(
                f"Invalid pool bounds: min={config.min_connections}, max={config.max_connections}"
            )
        return config


@dataclass(frozen=True)
class AppConfig:
    """Settings for the web service."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    host: str = "0.0.0.0"
    port: int = 8080
    default_locale: str = "en"
    static_url: str = "/static"
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None,
    ) -> "AppConfig":
        """
        Build application settings from the environment.

        When ``env`` is None, a ``.env`` file is loaded first (if present)
        without overriding variables already set in the process.

        Args:
            env: Variable mapping. If None, uses os.environ after loading .env.
            dotenv_path: Explicit .env location. If None, searches upwards from the working directory.
        """
        if env is None:
            if load_dotenv(dotenv_path or find_dotenv(usecwd=True)):
                logger.info("Loaded settings from .env file")
            env = os.environ

        return cls(
            database=DatabaseConfig.from_env(env),
            host=_get(env, "OSS_DIRECTORY_HOST", default=cls.host),
            port=_get_int(env, "OSS_DIRECTORY_PORT", default=cls.port),
            default_locale=_get(env, "OSS_DIRECTORY_DEFAULT_LOCALE", default=cls.default_locale),
            static_url=_get(env, "OSS_DIRECTORY_STATIC_URL", default=cls.static_url).rstrip("/"),
            log_level=_get(env, "OSS_DIRECTORY_LOG_LEVEL", default=cls.log_level).upper(),
        )
