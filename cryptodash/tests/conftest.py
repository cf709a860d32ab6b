from __future__ import annotations

from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from cryptodash.app import create_app
from cryptodash.infrastructure.container import Container
from cryptodash.shared.config import (
    AppConfig,
    DatabaseConfig,
    MarketConfig,
    ResilienceConfig,
    SecurityConfig,
)
from cryptodash.tests.fakes import (
    CountingHasher,
    InMemoryUserRepository,
    StubMarketData,
    StubOAuthProvider,
)


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        SECRET_KEY="test-secret",
        database=DatabaseConfig(DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}"),
        market=MarketConfig(MARKET_CACHE_TTL=0),
        resilience=ResilienceConfig(RESILIENCE_BACKOFF_BASE=0, RESILIENCE_RETRIES=2),
        security=SecurityConfig(ENABLE_RATE_LIMIT=False),
    )


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def hasher() -> CountingHasher:
    return CountingHasher()


@pytest.fixture()
def oauth_provider() -> StubOAuthProvider:
    return StubOAuthProvider()


@pytest.fixture()
def market() -> StubMarketData:
    return StubMarketData()


@pytest.fixture()
def container(
    config: AppConfig,
    users: InMemoryUserRepository,
    hasher: CountingHasher,
    oauth_provider: StubOAuthProvider,
    market: StubMarketData,
) -> Container:
    container = Container(config)
    container.user_repository = users
    container.password_hasher = hasher
    container.oauth_provider = oauth_provider
    container.market_data = market
    return container


@pytest.fixture()
def app(config: AppConfig, container: Container) -> Flask:
    app = create_app(config, container)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()

