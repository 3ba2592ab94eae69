"""
MongoDB plugin settings using pydantic and pydantic-settings.

MongoConfig is the immutable connection record consumed by the client.
MongoSettings loads the same fields from environment variables (MONGO_*)
with the documented defaults applied.
"""

from collections.abc import Mapping
from datetime import timedelta
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from mongo_plugin.validators.custom_types import Duration

DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 27017
DEFAULT_DATABASE = "gin_admin"
DEFAULT_AUTH_SOURCE = "admin"
DEFAULT_MAX_POOL_SIZE = 100
DEFAULT_MIN_POOL_SIZE = 10
DEFAULT_MAX_CONN_IDLE = timedelta(minutes=5)
DEFAULT_CONNECT_TIMEOUT = timedelta(seconds=10)
DEFAULT_SERVER_TIMEOUT = timedelta(seconds=30)
DEFAULT_TIMEOUT = timedelta(seconds=30)
DEFAULT_COMPRESS_LEVEL = 6


class MongoConfig(BaseModel):
    """
    MongoDB connection settings record.

    Unset fields hold zero values (empty string, 0, zero duration), so a
    record built from a handful of keys only carries what was given. Use
    default_config() for the baseline configuration.

    Keys are matched case-insensitively and may be given either as field
    names (auth_source) or as configuration keys (authSource).

    Usage:
        cfg = MongoConfig.model_validate({"host": "db", "port": 27017, "authSource": "admin"})
        cfg.get_uri()  # "mongodb://db:27017/admin"
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    uri: str = Field(default="", description="Full connection string")
    host: str = Field(default="", description="MongoDB host")
    port: int = Field(default=0, ge=0, le=65535, description="MongoDB port")
    database: str = Field(default="", description="Database name")
    username: str = Field(default="", description="Username")
    password: SecretStr = Field(default=SecretStr(""), description="Password")
    auth_source: str = Field(default="", description="Authentication database")

    # Connection pool settings
    max_pool_size: int = Field(default=0, ge=0, description="Maximum connection pool size")
    min_pool_size: int = Field(default=0, ge=0, description="Minimum connection pool size")
    max_conn_idle: Duration = Field(default=timedelta(0), description="Max connection idle time")

    # Timeouts
    connect_timeout: Duration = Field(default=timedelta(0), description="Connection timeout")
    server_timeout: Duration = Field(default=timedelta(0), description="Server selection timeout")
    timeout: Duration = Field(default=timedelta(0), description="Lifecycle operation timeout")

    # Reserved: accepted for configuration compatibility, no compressor is configured.
    compress_level: int = Field(default=0, description="Wire compression level (reserved)")

    replica_set: str = Field(default="", description="Replica set name")

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        """Map case-insensitive configuration keys onto field names."""
        if not isinstance(data, Mapping):
            return data
        lookup = _config_key_lookup()
        return {lookup.get(str(key).lower(), key): value for key, value in data.items()}

    @property
    def has_explicit_uri(self) -> bool:
        """True when uri is set to something other than the default placeholder."""
        return bool(self.uri) and self.uri != DEFAULT_URI

    def get_uri(self) -> str:
        """
        Resolve the connection URI.

        An explicit uri wins. Otherwise the URI is built from host, port,
        credentials and auth source. Credentials are embedded only when
        both username and password are set, and are not escaped.
        """
        if self.has_explicit_uri:
            return self.uri

        host = self.host or DEFAULT_HOST
        port = self.port or DEFAULT_PORT

        uri = "mongodb://"

        password = self.password.get_secret_value()
        if self.username and password:
            uri += f"{self.username}:{password}@"

        uri += f"{host}:{port}"

        if self.auth_source:
            uri += f"/{self.auth_source}"

        return uri


@lru_cache
def _config_key_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for name, field in MongoConfig.model_fields.items():
        lookup[name.lower()] = name
        if field.alias:
            lookup[field.alias.lower()] = name
    return lookup


def default_config() -> MongoConfig:
    """Return the baseline configuration used when none is supplied."""
    return MongoConfig(
        uri=DEFAULT_URI,
        host=DEFAULT_HOST,
        port=DEFAULT_PORT,
        database=DEFAULT_DATABASE,
        username="",
        password=SecretStr(""),
        auth_source=DEFAULT_AUTH_SOURCE,
        max_pool_size=DEFAULT_MAX_POOL_SIZE,
        min_pool_size=DEFAULT_MIN_POOL_SIZE,
        max_conn_idle=DEFAULT_MAX_CONN_IDLE,
        connect_timeout=DEFAULT_CONNECT_TIMEOUT,
        server_timeout=DEFAULT_SERVER_TIMEOUT,
        timeout=DEFAULT_TIMEOUT,
        compress_level=DEFAULT_COMPRESS_LEVEL,
        replica_set="",
    )


class MongoSettings(BaseSettings):
    """MongoDB connection settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    uri: str = Field(default=DEFAULT_URI, description="Full connection string")
    host: str = Field(default=DEFAULT_HOST, description="MongoDB host")
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535, description="MongoDB port")
    database: str = Field(default=DEFAULT_DATABASE, description="Database name")
    username: str = Field(default="", description="Username")
    password: SecretStr = Field(default=SecretStr(""), description="Password")
    auth_source: str = Field(default=DEFAULT_AUTH_SOURCE, description="Authentication database")

    max_pool_size: int = Field(default=DEFAULT_MAX_POOL_SIZE, ge=0)
    min_pool_size: int = Field(default=DEFAULT_MIN_POOL_SIZE, ge=0)
    max_conn_idle: Duration = Field(default=DEFAULT_MAX_CONN_IDLE)

    connect_timeout: Duration = Field(default=DEFAULT_CONNECT_TIMEOUT)
    server_timeout: Duration = Field(default=DEFAULT_SERVER_TIMEOUT)
    timeout: Duration = Field(default=DEFAULT_TIMEOUT)

    compress_level: int = Field(default=DEFAULT_COMPRESS_LEVEL)
    replica_set: str = Field(default="")

    def to_config(self, **overrides: Any) -> MongoConfig:
        """Build a MongoConfig from these settings, with optional field overrides."""
        return MongoConfig.model_validate({**self.model_dump(), **overrides})


class AppSettings(BaseSettings):
    """Application-level settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name: str = Field(default="mongo-plugin", description="Application name")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


class Settings(BaseSettings):
    """Main settings container."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    mongo: MongoSettings = Field(default_factory=MongoSettings)
    app: AppSettings = Field(default_factory=AppSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()
