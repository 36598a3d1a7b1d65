"""
QuarterPick Schemas

Pydantic models for validating rule pack YAML/JSON files and exported
selection state.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check the major version for compatibility
"""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

CalendarValue = Literal["us_federal", "none"]

PatternAttributeValue = Literal["month_of_quarter", "day_period", "day_of_week"]

ModeNameValue = Literal["quarterly", "quarterly_monthly"]

SelectionKindValue = Literal["coarse", "fine"]


# =============================================================================
# Rule Pack
# =============================================================================

class RulePackSchema(BaseModel):
    """Root schema for a rule pack file."""
    schema_version: str = Field(SCHEMA_VERSION, description="Pack schema version")

    id: str = Field(..., description="Unique rule pack identifier")
    name: str = Field(..., description="Display name")
    version: str = Field("1.0", description="Pack content version")
    description: Optional[str] = Field(None, description="Free-form notes")

    calendar: CalendarValue = Field("us_federal", description="Holiday calendar")
    avoid_holidays: bool = Field(True, description="Default holiday avoidance")
    weekend_days: list[int] = Field(
        default_factory=lambda: [0, 6],
        description="Excluded weekdays, 0=Sunday .. 6=Saturday",
    )

    max_run_length: int = Field(2, ge=1, description="Longest allowed equal-value run")
    window_quarters: int = Field(2, ge=0, description="Preceding quarters in the pattern window")
    coarse_attributes: list[PatternAttributeValue] = Field(
        default_factory=lambda: ["month_of_quarter", "day_period", "day_of_week"],
        description="Pattern attributes for coarse candidates, in check order",
    )
    fine_attributes: list[PatternAttributeValue] = Field(
        default_factory=lambda: ["day_period", "day_of_week", "month_of_quarter"],
        description="Pattern attributes for fine candidates, in check order",
    )

    quarter_overflow_threshold: int = Field(3, ge=1)
    valid_days_months: int = Field(6, ge=1, description="Default valid-day scan span")

    @field_validator("weekend_days")
    @classmethod
    def validate_weekend_days(cls, v: list[int]) -> list[int]:
        """Weekdays must be 0..6; duplicates are collapsed."""
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"weekend day {day} is not in 0..6 (0=Sunday)")
        if len(set(v)) == 7:
            raise ValueError("weekend_days may not exclude every weekday")
        return sorted(set(v))

    @field_validator("coarse_attributes", "fine_attributes")
    @classmethod
    def validate_attributes(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("pattern attributes must not repeat")
        return v

    model_config = {
        "extra": "forbid",  # Reject unknown fields
    }


# =============================================================================
# Selection State
# =============================================================================

class ModeSchema(BaseModel):
    """Schema for a serialized selection mode."""
    name: ModeNameValue
    active: Optional[SelectionKindValue] = None

    @model_validator(mode="after")
    def validate_active(self) -> "ModeSchema":
        if self.name == "quarterly" and self.active not in (None, "coarse"):
            raise ValueError("quarterly mode only produces coarse selections")
        return self

    model_config = {
        "extra": "forbid",
    }


class SelectionStateSchema(BaseModel):
    """
    Structure of exported selection state.

    Only the structure is checked here. Date values stay untyped so that a
    malformed entry is dropped by reconciliation instead of failing the
    whole import.
    """
    schema_version: str = Field(SCHEMA_VERSION)
    coarse_selections: list[Any] = Field(default_factory=list)
    fine_selections: list[Any] = Field(default_factory=list)
    dependency: dict[Any, Any] = Field(default_factory=dict)
    blocked_dates: list[Any] = Field(default_factory=list)
    mode: ModeSchema = Field(default_factory=lambda: ModeSchema(name="quarterly"))
    # Missing: the rule pack decides
    avoid_holidays: Optional[bool] = None

    model_config = {
        "extra": "forbid",
    }


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_rule_pack(data: dict[str, Any]) -> RulePackSchema:
    """
    Validate a rule pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return RulePackSchema.model_validate(data)


def validate_selection_state(data: dict[str, Any]) -> SelectionStateSchema:
    """
    Validate exported selection state against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return SelectionStateSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """
    Check if a document's schema version is compatible.

    Only the major version has to match.
    """
    version = str(data.get("schema_version", SCHEMA_VERSION))
    return version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
