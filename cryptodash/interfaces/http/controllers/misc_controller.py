# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, jsonify

from cryptodash.infrastructure.db import Database
from cryptodash.infrastructure.health import check_database


class MiscController:
    def __init__(self, *, database: Database) -> None:
        self._database = database

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        return bp

    def health(self):
        database_ok = check_database(self._database)
        status = {"ok": database_ok, "database": "ok" if database_ok else "error"}
        return jsonify(status), 200 if database_ok else 503
