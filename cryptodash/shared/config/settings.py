# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes", "on")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///cryptodash.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(10.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class SessionConfig(BaseSettings):
    cookie_name: str = Field("__session", alias="SESSION_COOKIE_NAME")
    remember_days: int = Field(7, ge=1, alias="SESSION_REMEMBER_DAYS")
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")

    model_config = _SECTION_CONFIG

    @field_validator("cookie_secure", mode="before")
    @classmethod
    def _parse_secure(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class OAuthConfig(BaseSettings):
    client_id: str = Field("", alias="GOOGLE_CLIENT_ID")
    client_secret: str = Field("", alias="GOOGLE_CLIENT_SECRET")
    auth_url: str = Field(
        "https://accounts.google.com/o/oauth2/v2/auth", alias="GOOGLE_AUTH_URL"
    )
    token_url: str = Field("https://oauth2.googleapis.com/token", alias="GOOGLE_TOKEN_URL")
    userinfo_url: str = Field(
        "https://openidconnect.googleapis.com/v1/userinfo", alias="GOOGLE_USERINFO_URL"
    )
    # Absolute callback URL; derived from the request host when empty
    callback_url: str = Field("", alias="OAUTH_CALLBACK_URL")

    model_config = _SECTION_CONFIG


class MarketConfig(BaseSettings):
    base_url: str = Field("https://api.coingecko.com/api/v3", alias="MARKET_API_URL")
    api_key: str = Field("", alias="MARKET_API_KEY")
    vs_currency: str = Field("usd", alias="MARKET_VS_CURRENCY")
    per_page: int = Field(10, ge=1, le=250, alias="MARKET_PER_PAGE")
    cache_ttl: int = Field(60, ge=0, alias="MARKET_CACHE_TTL")

    model_config = _SECTION_CONFIG


class ResilienceConfig(BaseSettings):
    default_timeout: float = Field(10.0, ge=0.1, alias="RESILIENCE_TIMEOUT")
    max_retries: int = Field(2, ge=0, alias="RESILIENCE_RETRIES")
    backoff_base: float = Field(0.5, ge=0.0, alias="RESILIENCE_BACKOFF_BASE")
    backoff_cap: float = Field(4.0, ge=0.0, alias="RESILIENCE_BACKOFF_CAP")
    circuit_fail_threshold: int = Field(5, ge=1, alias="RESILIENCE_CIRCUIT_THRESHOLD")
    circuit_reset_timeout: float = Field(60.0, ge=1.0, alias="RESILIENCE_CIRCUIT_RESET")

    model_config = _SECTION_CONFIG


class SecurityConfig(BaseSettings):
    # CORS for the JSON api
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Rate limiting of credential endpoints
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, ge=1, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, ge=0.1, alias="RL_WINDOW")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_flags(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    oauth: OAuthConfig = Field(default_factory=OAuthConfig)
    market: MarketConfig = Field(default_factory=MarketConfig)
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_by_name=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY signs the session cookie and must be a strong random value.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.session.cookie_secure:
            warnings.append("⚠️  Cookie Secure flag is DISABLED (use HTTPS!)")
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if not self.security.enable_hsts:
            warnings.append("⚠️  HSTS is DISABLED (recommended for HTTPS)")
        if not self.oauth.client_id:
            warnings.append("⚠️  GOOGLE_CLIENT_ID is empty, Google login will fail")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)
            print(
                "   Consider enabling these security features in production.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "MarketConfig",
    "OAuthConfig",
    "ResilienceConfig",
    "SecurityConfig",
    "SessionConfig",
    "load_config",
]
