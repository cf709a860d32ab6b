# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from flask import request


def form_payload() -> dict[str, Any]:
    """Raw fields of a form-encoded, multipart or JSON request body."""
    if request.is_json:
        payload = request.get_json(silent=True)
        return dict(payload) if isinstance(payload, dict) else {}
    return request.form.to_dict()


def client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address
