from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence


class ApiError(Exception):
    """A failed call to the HR service.

    ``status`` is None for transport failures (connection refused, timeout).
    """

    def __init__(self, status: Optional[int], message: str = "", payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""

    def message_or(self, fallback: str) -> str:
        return self.message or fallback


class ApiValidationError(ApiError):
    """HTTP 422: ``errors`` maps each field to its messages."""

    def __init__(self, errors: Mapping[str, Sequence[str]], message: str = "The given data was invalid.", payload: Any = None):
        super().__init__(422, message, payload)
        self.errors: dict[str, list[str]] = {
            k: [v] if isinstance(v, str) else list(v) for k, v in (errors or {}).items()
        }
