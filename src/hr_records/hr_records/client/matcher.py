"""Employee search-and-select used by every record form.

``match`` is pure: ``(query, roster, current_selection_id)`` gives the
filtered roster and the selection to use. :class:`EmployeeMatcher` adds the
selection callback, fired at most once per distinct ``(query, roster)``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, List, Mapping, Optional, Sequence, Tuple


def _text(employee: Mapping[str, Any], key: str) -> str:
    value = employee.get(key)
    return "" if value is None else str(value).strip()


def derived_keys(employee: Mapping[str, Any]) -> Tuple[str, ...]:
    """first, last, id-number, "first last", "last first" (lower-cased)."""
    first = _text(employee, "Fname").lower()
    last = _text(employee, "Lname").lower()
    idno = _text(employee, "idno").lower()
    return first, last, idno, f"{first} {last}", f"{last} {first}"


def exact_keys(employee: Mapping[str, Any]) -> Tuple[str, ...]:
    first = _text(employee, "Fname").lower()
    last = _text(employee, "Lname").lower()
    idno = _text(employee, "idno").lower()
    return derived_keys(employee) + (f"{last}, {first} ({idno})",)


def display_name(employee: Mapping[str, Any]) -> str:
    """``"Doe, Jane (E100)"``: typing this back selects the employee."""
    return f"{_text(employee, 'Lname')}, {_text(employee, 'Fname')} ({_text(employee, 'idno')})"


def as_roster(roster: Any) -> List[Mapping[str, Any]]:
    if not isinstance(roster, (list, tuple)):
        return []
    return [e for e in roster if isinstance(e, Mapping)]


def _matches(q: str, employee: Mapping[str, Any]) -> bool:
    # the display form only ever matches whole, as picked from the list
    return any(q in key for key in derived_keys(employee)) or q == exact_keys(employee)[-1]


def filter_roster(query: Optional[str], roster: Any) -> List[Mapping[str, Any]]:
    employees = as_roster(roster)
    q = (query or "").strip().lower()
    if not q:
        return employees
    return [e for e in employees if _matches(q, e)]


def find_exact(query: Optional[str], roster: Any) -> Optional[Mapping[str, Any]]:
    """The single employee equal to ``query`` on some key; None if zero or several."""
    q = (query or "").strip().lower()
    if not q:
        return None
    hits = [e for e in as_roster(roster) if q in exact_keys(e)]
    return hits[0] if len(hits) == 1 else None


@dataclass(frozen=True)
class MatchResult:
    filtered: List[Mapping[str, Any]]
    selection_id: Any = None
    auto_selected: bool = False

    @property
    def no_matches(self) -> bool:
        return not self.filtered


def match(query: Optional[str], roster: Any, current_selection_id: Any = None) -> MatchResult:
    """Filter ``roster`` by ``query``; auto-select a unique exact match.

    The selection only changes when the exact match differs from
    ``current_selection_id``; otherwise it is returned unchanged.
    """
    filtered = filter_roster(query, roster)
    exact = find_exact(query, filtered)
    if exact is not None and exact.get("id") != current_selection_id:
        return MatchResult(filtered, exact.get("id"), True)
    return MatchResult(filtered, current_selection_id, False)


def roster_signature(roster: Any) -> Tuple[Hashable, ...]:
    return tuple((e.get("id"),) + exact_keys(e) for e in as_roster(roster))


@dataclass
class EmployeeMatcher:
    """Stateful wrapper around :func:`match` for a form.

    ``on_select`` receives the selected employee mapping. Re-running with the
    same query and roster never fires it again, even if the caller did not
    store the selection.
    """

    on_select: Optional[Callable[[Mapping[str, Any]], None]] = None
    _last_fired: Optional[Tuple[str, Tuple[Hashable, ...]]] = field(default=None, init=False, repr=False)

    def update(self, query: Optional[str], roster: Any, current_selection_id: Any = None) -> MatchResult:
        result = match(query, roster, current_selection_id)
        if not result.auto_selected:
            return result

        key = ((query or "").strip().lower(), roster_signature(roster))
        if key == self._last_fired:
            return MatchResult(result.filtered, current_selection_id, False)

        self._last_fired = key
        if self.on_select is not None:
            selected = next(e for e in result.filtered if e.get("id") == result.selection_id)
            self.on_select(selected)
        return result

    def reset(self) -> None:
        self._last_fired = None


def options(employees: Sequence[Mapping[str, Any]]) -> List[Tuple[Any, str]]:
    """``(id, label)`` pairs for a select box."""
    return [(e.get("id"), display_name(e)) for e in employees]
