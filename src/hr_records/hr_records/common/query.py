from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Tuple

from ..core.constants import DEFAULT_PER_PAGE, MAX_PER_PAGE


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def page_args(args: Mapping[str, Any]) -> Tuple[int, int]:
    """``page``/``per_page`` from query args, clamped to sane bounds."""
    page = max(_int(args.get("page"), 1), 1)
    per_page = min(max(_int(args.get("per_page"), DEFAULT_PER_PAGE), 1), MAX_PER_PAGE)
    return page, per_page


def sort_args(args: Mapping[str, Any], allowed: Iterable[str], default: str = "created_at") -> Tuple[str, str]:
    sort = str(args.get("sort") or default)
    if sort not in set(allowed):
        sort = default
    direction = str(args.get("direction") or "desc").lower()
    return sort, "asc" if direction == "asc" else "desc"


def optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
