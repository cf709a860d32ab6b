# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, jsonify, request

from cryptodash.application.use_cases.markets.list_tokens import ListTopTokensUseCase
from cryptodash.application.use_cases.markets.price_history import GetPriceHistoryUseCase
from cryptodash.domain.markets.exceptions import (
    MARKET_FAILURE_MESSAGE,
    MarketDataUnavailableError,
)
from cryptodash.interfaces.http.dto.auth import UserDTO
from cryptodash.interfaces.http.dto.markets import (
    HistoryQuery,
    PriceHistoryDTO,
    TokenPriceDTO,
)
from cryptodash.interfaces.http.session import SessionManager
from cryptodash.shared.errors import validate_form
from cryptodash.shared.logging import logger


class DashboardController:
    def __init__(
        self,
        *,
        list_tokens_use_case: ListTopTokensUseCase,
        price_history_use_case: GetPriceHistoryUseCase,
        sessions: SessionManager,
    ) -> None:
        self._list_tokens_use_case = list_tokens_use_case
        self._price_history_use_case = price_history_use_case
        self._sessions = sessions

    def dashboard(self):
        user = self._sessions.get_user()
        if user is None:
            return jsonify({"user": None, "tokens": [], "error": None})

        tokens: list[dict] = []
        error = None
        try:
            tokens = [
                TokenPriceDTO.from_entity(token).model_dump()
                for token in self._list_tokens_use_case.execute()
            ]
        except MarketDataUnavailableError as exc:
            logger.warning(f"dashboard: market data unavailable context={dict(exc.context or {})}")
            error = MARKET_FAILURE_MESSAGE

        return jsonify(
            {
                "user": UserDTO.from_entity(user).model_dump(mode="json"),
                "tokens": tokens,
                "error": error,
            }
        )

    def tokens(self):
        tokens = self._list_tokens_use_case.execute()
        return jsonify({"tokens": [TokenPriceDTO.from_entity(t).model_dump() for t in tokens]})

    def history(self, token_id: str):
        query = validate_form(HistoryQuery, request.args.to_dict())
        if not query.ok:
            raise query.to_error()

        history = self._price_history_use_case.execute(token_id, query.value.days)
        return jsonify(PriceHistoryDTO.from_entity(history).model_dump())

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("dashboard", __name__)
        bp.add_url_rule("/", view_func=self.dashboard, methods=["GET"])
        bp.add_url_rule(
            "/api/tokens",
            view_func=self._sessions.login_required(self.tokens),
            methods=["GET"],
        )
        bp.add_url_rule(
            "/api/tokens/<string:token_id>/history",
            view_func=self._sessions.login_required(self.history),
            methods=["GET"],
        )
        return bp
