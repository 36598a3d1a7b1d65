"""
QuarterPick Selection Modes

The selection mode is a closed tagged variant:

- QuarterlyOnly: every selection is COARSE.
- QuarterlyPlusMonthly(active=...): COARSE and FINE selections coexist;
  `active` picks which kind the next selection produces.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, ClassVar, Union

from .enums import SelectionKind


@dataclass(frozen=True)
class QuarterlyOnly:
    """One coarse selection per quarter; fine selections are not offered."""
    name: ClassVar[str] = "quarterly"

    @property
    def produces(self) -> SelectionKind:
        return SelectionKind.COARSE

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class QuarterlyPlusMonthly:
    """Coarse anchors per quarter plus fine selections per month."""
    active: SelectionKind = SelectionKind.COARSE
    name: ClassVar[str] = "quarterly_monthly"

    @property
    def produces(self) -> SelectionKind:
        return self.active

    def with_active(self, kind: SelectionKind) -> QuarterlyPlusMonthly:
        return replace(self, active=kind)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "active": self.active.value}


Mode = Union[QuarterlyOnly, QuarterlyPlusMonthly]


def mode_from_dict(data: dict[str, Any]) -> Mode:
    """
    Rebuild a mode from its to_dict() form.

    Raises:
        ValueError: If the mode name or active kind is unknown
    """
    name = data.get("name")
    if name == QuarterlyOnly.name:
        return QuarterlyOnly()
    if name == QuarterlyPlusMonthly.name:
        return QuarterlyPlusMonthly(
            active=SelectionKind(data.get("active", SelectionKind.COARSE.value))
        )
    raise ValueError(f"Unknown selection mode: {name!r}")
