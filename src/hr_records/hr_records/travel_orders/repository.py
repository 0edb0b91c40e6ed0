from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import TravelOrder, TravelOrderFilter


class TravelOrderRepository(Protocol):
    def list_orders(self, flt: TravelOrderFilter) -> Sequence[TravelOrder]:
        raise NotImplementedError

    def get(self, order_id: int) -> Optional[TravelOrder]:
        raise NotImplementedError

    def find_overlap(
        self, employee_id: int, start: date, end: date, *, exclude_id: Optional[int] = None
    ) -> Optional[TravelOrder]:
        """A non-rejected order of ``employee_id`` sharing at least one day with ``[start, end]``."""
        raise NotImplementedError

    def create(self, values: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def update(self, order_id: int, values: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def transition(self, order_id: int, from_status: str, values: Mapping[str, Any]) -> bool:
        """Apply ``values`` only while the order is still ``from_status``."""
        raise NotImplementedError

    def delete(self, order_id: int) -> None:
        raise NotImplementedError
