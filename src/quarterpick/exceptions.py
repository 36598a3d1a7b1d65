"""
QuarterPick Exception Hierarchy

Exceptions for caller errors and fatal states. Expected rule rejections
(blocked, weekend, quota met, pattern run...) are never raised; they are
returned by value as a Decision.

Exception codes follow the pattern: QP_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class QuarterPickError(Exception):
    """
    Base exception for all QuarterPick errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (QP_*)
        details: Additional context about the error
        selection_date: ISO date the error concerns, if any
    """
    message: str
    code: str = "QP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    selection_date: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.selection_date:
            parts.append(f"(date: {self.selection_date})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/CLI output."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.selection_date:
            result["selection_date"] = self.selection_date
        return result


# =============================================================================
# Rule Pack Errors
# =============================================================================

@dataclass
class RulePackLoadError(QuarterPickError):
    """Failed to read or parse a rule pack file."""
    code: str = "QP_RULE_PACK_LOAD_ERROR"


@dataclass
class RulePackValidationError(QuarterPickError):
    """Rule pack schema validation failed."""
    code: str = "QP_RULE_PACK_VALIDATION_ERROR"


@dataclass
class RulePackVersionMismatch(QuarterPickError):
    """Rule pack schema version is not compatible."""
    code: str = "QP_RULE_PACK_VERSION_MISMATCH"


# =============================================================================
# State Errors
# =============================================================================

@dataclass
class StateValidationError(QuarterPickError):
    """Imported selection state does not have the expected structure."""
    code: str = "QP_STATE_VALIDATION_ERROR"


@dataclass
class StoreInvariantError(QuarterPickError):
    """
    A selection store invariant does not hold.

    Never produced by normal interaction; indicates the store was mutated
    behind the engine's back or loaded without reconciliation.
    """
    code: str = "QP_STORE_INVARIANT_VIOLATION"


# =============================================================================
# Removal Errors
# =============================================================================

@dataclass
class SelectionNotFoundError(QuarterPickError):
    """The date to remove is not selected."""
    code: str = "QP_SELECTION_NOT_FOUND"


@dataclass
class StaleRemovalPlanError(QuarterPickError):
    """The store changed after the removal plan was computed."""
    code: str = "QP_STALE_REMOVAL_PLAN"
