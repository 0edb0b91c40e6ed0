from __future__ import annotations

from typing import Any, Mapping

from flask import request


def request_payload() -> Mapping[str, Any]:
    """JSON body when sent as JSON, otherwise the (multipart) form."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


def is_method_override(expected: str = "PUT") -> bool:
    """``POST ...?_method=PUT``: multipart forms cannot be sent with PUT."""
    override = request.form.get("_method") or request.args.get("_method") or ""
    return override.upper() == expected
