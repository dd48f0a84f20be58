import os
from enum import Enum

from pydantic_settings import BaseSettings
from starlette.config import Config

current_file_dir = os.path.dirname(os.path.realpath(__file__))
env_path = os.path.join(current_file_dir, "..", "..", ".env")
config = Config(env_path)


class AppSettings(BaseSettings):
    APP_NAME: str = config("APP_NAME", default="OrthoIQ")
    APP_DESCRIPTION: str | None = config(
        "APP_DESCRIPTION", default="Rate limiting and MD review tiers for OrthoIQ consultations"
    )
    APP_VERSION: str | None = config("APP_VERSION", default="0.1.0")


class PostgresSettings(BaseSettings):
    POSTGRES_USER: str = config("POSTGRES_USER", default="postgres")
    POSTGRES_PASSWORD: str = config("POSTGRES_PASSWORD", default="postgres")
    POSTGRES_SERVER: str = config("POSTGRES_SERVER", default="localhost")
    POSTGRES_PORT: int = config("POSTGRES_PORT", cast=int, default=5432)
    POSTGRES_DB: str = config("POSTGRES_DB", default="orthoiq")
    POSTGRES_ASYNC_PREFIX: str = config("POSTGRES_ASYNC_PREFIX", default="postgresql+asyncpg://")
    # Neon hands out a single connection string; it wins over the discrete fields.
    DATABASE_URL: str | None = config("DATABASE_URL", default=None)
    POSTGRES_URI: str = (
        DATABASE_URL.split("://", 1)[-1].split("?", 1)[0]
        if DATABASE_URL
        else f"{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_SERVER}:{POSTGRES_PORT}/{POSTGRES_DB}"
    )
    POSTGRES_SSL: bool = config("POSTGRES_SSL", cast=bool, default=False)
    POSTGRES_CONNECT_TIMEOUT: float = config("POSTGRES_CONNECT_TIMEOUT", cast=float, default=5.0)
    POSTGRES_COMMAND_TIMEOUT: float = config("POSTGRES_COMMAND_TIMEOUT", cast=float, default=5.0)


class RedisCacheSettings(BaseSettings):
    REDIS_CACHE_HOST: str = config("REDIS_CACHE_HOST", default="localhost")
    REDIS_CACHE_PORT: int = config("REDIS_CACHE_PORT", cast=int, default=6379)
    REDIS_CACHE_URL: str = config("REDIS_CACHE_URL", default=f"redis://{REDIS_CACHE_HOST}:{REDIS_CACHE_PORT}")
    REDIS_SOCKET_TIMEOUT: float = config("REDIS_SOCKET_TIMEOUT", cast=float, default=2.0)


class ClientSideCacheSettings(BaseSettings):
    CLIENT_CACHE_MAX_AGE: int = config("CLIENT_CACHE_MAX_AGE", cast=int, default=60)


class RateLimitSettings(BaseSettings):
    RATE_LIMIT_BASIC_DAILY: int = config("RATE_LIMIT_BASIC_DAILY", cast=int, default=1)
    RATE_LIMIT_AUTHENTICATED_DAILY: int = config("RATE_LIMIT_AUTHENTICATED_DAILY", cast=int, default=3)
    RATE_LIMIT_MEDICAL_DAILY: int = config("RATE_LIMIT_MEDICAL_DAILY", cast=int, default=10)


class TierPromotionSettings(BaseSettings):
    TIER_SPECIALIST_THRESHOLD: int = config("TIER_SPECIALIST_THRESHOLD", cast=int, default=4)
    TIER_CONSENSUS_THRESHOLD: float = config("TIER_CONSENSUS_THRESHOLD", cast=float, default=0.80)
    TIER_ACCURACY_THRESHOLD: int = config("TIER_ACCURACY_THRESHOLD", cast=int, default=4)


class AgentsServiceSettings(BaseSettings):
    ORTHOIQ_AGENTS_URL: str = config("ORTHOIQ_AGENTS_URL", default="http://localhost:3000")
    ORTHOIQ_AGENTS_TIMEOUT: float = config("ORTHOIQ_AGENTS_TIMEOUT", cast=float, default=10.0)


class AdminSettings(BaseSettings):
    ADMIN_API_KEY: str | None = config("ADMIN_API_KEY", default=None)


class LoggingSettings(BaseSettings):
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")
    LOG_FILE: str | None = config("LOG_FILE", default=None)


class EnvironmentOption(Enum):
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


class EnvironmentSettings(BaseSettings):
    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", cast=EnvironmentOption, default="local")


class Settings(
    AppSettings,
    PostgresSettings,
    RedisCacheSettings,
    ClientSideCacheSettings,
    RateLimitSettings,
    TierPromotionSettings,
    AgentsServiceSettings,
    AdminSettings,
    LoggingSettings,
    EnvironmentSettings,
):
    pass


settings = Settings()
