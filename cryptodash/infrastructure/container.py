# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from cryptodash.application.services.password_hashing import WerkzeugPasswordHasher
from cryptodash.application.use_cases.markets.list_tokens import ListTopTokensUseCase
from cryptodash.application.use_cases.markets.price_history import GetPriceHistoryUseCase
from cryptodash.application.use_cases.users.login_user import LoginUserUseCase
from cryptodash.application.use_cases.users.oauth_login import CompleteOAuthLoginUseCase
from cryptodash.application.use_cases.users.register_user import RegisterUserUseCase
from cryptodash.application.use_cases.users.verify_credentials import CredentialVerifier
from cryptodash.domain.markets.repositories import MarketDataPort
from cryptodash.domain.users.repositories import OAuthProvider, UserRepository
from cryptodash.infrastructure.db import Database
from cryptodash.infrastructure.markets import CoinGeckoMarketData
from cryptodash.infrastructure.oauth import GoogleOAuthProvider
from cryptodash.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)
from cryptodash.interfaces.http.controllers.auth_controller import AuthController
from cryptodash.interfaces.http.controllers.dashboard_controller import DashboardController
from cryptodash.interfaces.http.controllers.misc_controller import MiscController
from cryptodash.interfaces.http.controllers.oauth_controller import OAuthController
from cryptodash.interfaces.http.session import SessionManager
from cryptodash.shared.config import AppConfig
from cryptodash.shared.logging import logger


class Container:
    """Wires adapters, use cases and controllers for one application instance.

    Tests replace adapters by assigning the cached attributes before first use,
    e.g. ``container.market_data = FakeMarket()``.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def open(self) -> Container:
        self.database.open()
        return self

    def close(self) -> None:
        for name in ("market_data", "oauth_provider"):
            adapter = self.__dict__.get(name)
            close = getattr(adapter, "close", None)
            if close is not None:
                close()
        self.database.close()
        logger.info("container: closed")

    # Adapters

    @cached_property
    def database(self) -> Database:
        return Database(self.config.database)

    @cached_property
    def user_repository(self) -> UserRepository:
        return SqlAlchemyUserRepository(self.database)

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def oauth_provider(self) -> OAuthProvider:
        return GoogleOAuthProvider(
            self.config.oauth, timeout=self.config.resilience.default_timeout
        )

    @cached_property
    def market_data(self) -> MarketDataPort:
        return CoinGeckoMarketData(self.config.market, self.config.resilience)

    # Use cases

    @cached_property
    def credential_verifier(self) -> CredentialVerifier:
        return CredentialVerifier(users=self.user_repository, password_hasher=self.password_hasher)

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(verifier=self.credential_verifier)

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def complete_oauth_login_use_case(self) -> CompleteOAuthLoginUseCase:
        return CompleteOAuthLoginUseCase(users=self.user_repository, provider=self.oauth_provider)

    @cached_property
    def list_tokens_use_case(self) -> ListTopTokensUseCase:
        return ListTopTokensUseCase(
            market=self.market_data,
            vs_currency=self.config.market.vs_currency,
            per_page=self.config.market.per_page,
        )

    @cached_property
    def price_history_use_case(self) -> GetPriceHistoryUseCase:
        return GetPriceHistoryUseCase(
            market=self.market_data,
            vs_currency=self.config.market.vs_currency,
        )

    # HTTP

    @cached_property
    def session_manager(self) -> SessionManager:
        return SessionManager(users=self.user_repository)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            login_use_case=self.login_user_use_case,
            register_use_case=self.register_user_use_case,
            sessions=self.session_manager,
        )

    @cached_property
    def oauth_controller(self) -> OAuthController:
        return OAuthController(
            provider=self.oauth_provider,
            complete_use_case=self.complete_oauth_login_use_case,
            sessions=self.session_manager,
            callback_url=self.config.oauth.callback_url,
        )

    @cached_property
    def dashboard_controller(self) -> DashboardController:
        return DashboardController(
            list_tokens_use_case=self.list_tokens_use_case,
            price_history_use_case=self.price_history_use_case,
            sessions=self.session_manager,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(database=self.database)


__all__ = ["Container"]
