"""What the client knows about each record page."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core import workflow


@dataclass(frozen=True)
class Lookup:
    name: str
    label: str
    essential: bool = True


@dataclass(frozen=True)
class ResourcePage:
    resource: str
    label: str
    workflow_kind: Optional[str] = None
    upload_fields: Tuple[str, ...] = ()
    lookups: Tuple[Lookup, ...] = ()


DEPARTMENTS = Lookup("departments", "departments")
LINES = Lookup("lines", "Production line", essential=False)

PAGES = {
    p.resource: p
    for p in (
        ResourcePage("awards", "award", upload_fields=("photo",)),
        ResourcePage("warnings", "warning", upload_fields=("document",)),
        ResourcePage("promotions", "promotion", workflow.STANDARD),
        ResourcePage("resignations", "resignation", workflow.STANDARD, ("document",)),
        ResourcePage("terminations", "termination", workflow.STANDARD, ("document",)),
        ResourcePage("transfers", "transfer", workflow.STANDARD, lookups=(DEPARTMENTS, LINES)),
        ResourcePage("travel-orders", "travel order", workflow.TRAVEL_ORDER, ("documents",), (DEPARTMENTS,)),
        ResourcePage("employee-schedules", "schedule", lookups=(DEPARTMENTS,)),
    )
}


def page_for(resource: str) -> ResourcePage:
    try:
        return PAGES[resource]
    except KeyError:
        raise ValueError(f"Unknown resource: {resource}")
