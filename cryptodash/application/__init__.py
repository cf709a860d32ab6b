# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .use_cases.markets.list_tokens import ListTopTokensUseCase
from .use_cases.markets.price_history import GetPriceHistoryUseCase
from .use_cases.users.login_user import LoginUserUseCase
from .use_cases.users.oauth_login import CompleteOAuthLoginUseCase
from .use_cases.users.register_user import RegisterUserUseCase
from .use_cases.users.verify_credentials import CredentialVerifier

__all__ = [
    "CompleteOAuthLoginUseCase",
    "CredentialVerifier",
    "GetPriceHistoryUseCase",
    "ListTopTokensUseCase",
    "LoginUserUseCase",
    "RegisterUserUseCase",
]
