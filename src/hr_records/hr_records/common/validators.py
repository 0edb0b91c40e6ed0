from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError.for_field(field_name, f"The {field_name} field is required.")
    return value.strip()


TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M")

TRUE_VALUES = frozenset({"true", "1", "yes", "on", "checked"})
FALSE_VALUES = frozenset({"false", "0", "no", "off", "unchecked", ""})


def to_bool(value: Any) -> bool:
    """Loose boolean conversion for form and JSON payloads."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        v = value.strip().lower()
        if v in TRUE_VALUES:
            return True
        if v in FALSE_VALUES:
            return False
        try:
            return bool(int(v))
        except ValueError:
            return bool(v)
    return bool(value)


class FieldErrors:
    """Collects per-field messages, then raises one ValidationError.

    Usage::

        v = FieldErrors(payload)
        name = v.string("award_name", required=True, max_length=255)
        v.raise_if_any()
    """

    def __init__(self, data: Mapping[str, Any]):
        self._data = data
        self.errors: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def raw(self, field: str) -> Any:
        value = self._data.get(field)
        if isinstance(value, str):
            value = value.strip()
        return value

    def _missing(self, field: str, required: bool) -> bool:
        value = self.raw(field)
        if value is None or value == "":
            if required:
                self.add(field, f"The {field} field is required.")
            return True
        return False

    def string(self, field: str, *, required: bool = False, max_length: Optional[int] = None) -> Optional[str]:
        if self._missing(field, required):
            return None
        value = str(self.raw(field))
        if max_length is not None and len(value) > max_length:
            self.add(field, f"The {field} may not be greater than {max_length} characters.")
            return None
        return value

    def integer(self, field: str, *, required: bool = False, min_value: Optional[int] = None) -> Optional[int]:
        if self._missing(field, required):
            return None
        try:
            value = int(self.raw(field))
        except (TypeError, ValueError):
            self.add(field, f"The {field} must be an integer.")
            return None
        if min_value is not None and value < min_value:
            self.add(field, f"The {field} must be at least {min_value}.")
            return None
        return value

    def decimal(self, field: str, *, required: bool = False, min_value: Optional[Decimal] = None) -> Optional[Decimal]:
        if self._missing(field, required):
            return None
        try:
            value = Decimal(str(self.raw(field)))
        except (InvalidOperation, ValueError):
            self.add(field, f"The {field} must be a number.")
            return None
        if not value.is_finite():
            self.add(field, f"The {field} must be a number.")
            return None
        if min_value is not None and value < min_value:
            self.add(field, f"The {field} must be at least {min_value}.")
            return None
        return value.quantize(Decimal("0.01"))

    def date(self, field: str, *, required: bool = False) -> Optional[date]:
        if self._missing(field, required):
            return None
        value = self.raw(field)
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
        except ValueError:
            self.add(field, f"The {field} is not a valid date.")
            return None

    def time(self, field: str, *, required: bool = False) -> Optional[time]:
        if self._missing(field, required):
            return None
        value = self.raw(field)
        if isinstance(value, datetime):
            return value.time()
        if isinstance(value, time):
            return value
        # the API returns stored times as full timestamps
        for fmt in TIME_FORMATS:
            try:
                return datetime.strptime(str(value), fmt).time()
            except ValueError:
                continue
        self.add(field, f"The {field} does not match the format H:i.")
        return None

    def boolean(self, field: str) -> bool:
        return to_bool(self._data.get(field))

    def choice(self, field: str, choices: Iterable[str], *, required: bool = False) -> Optional[str]:
        if self._missing(field, required):
            return None
        value = str(self.raw(field)).lower()
        if value not in set(choices):
            self.add(field, f"The selected {field} is invalid.")
            return None
        return value

    def string_list(self, field: str, *, required: bool = False) -> list[str]:
        value = self._data.get(field)
        getlist = getattr(self._data, "getlist", None)
        if getlist is not None:
            # werkzeug MultiDict: repeated keys, or "field[]" from html forms
            value = getlist(field) or getlist(f"{field}[]") or value
        if isinstance(value, str):
            value = value.split(",")
        elif value is not None and not isinstance(value, (list, tuple)):
            value = [value]
        items = [str(v).strip() for v in (value or []) if str(v).strip()]
        if required and not items:
            self.add(field, f"The {field} field is required.")
        return items

    def after_or_equal(self, field: str, value: Optional[date], other_field: str, other: Optional[date]) -> None:
        if value is not None and other is not None and value < other:
            self.add(field, f"The {field} must be a date after or equal to {other_field}.")

    def after(self, field: str, value, other_field: str, other) -> None:
        if value is not None and other is not None and value <= other:
            self.add(field, f"The {field} must be after {other_field}.")

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationError("The given data was invalid.", self.errors)
