"""
QuarterPick Rule Packs

Rule packs are YAML/JSON files that tune the selection rules (calendar,
weekend days, pattern window and attributes) without code changes.
"""
from __future__ import annotations

from .loader import (
    DEFAULT_PACK_PATH,
    RulePackLoader,
    load_default_rule_pack,
    load_rule_pack,
    load_rule_pack_from_string,
)
from .schema import (
    SCHEMA_VERSION,
    ModeSchema,
    RulePackSchema,
    SelectionStateSchema,
    check_schema_version,
    validate_rule_pack,
    validate_selection_state,
)

__all__ = [
    # Loader
    "DEFAULT_PACK_PATH",
    "RulePackLoader",
    "load_default_rule_pack",
    "load_rule_pack",
    "load_rule_pack_from_string",
    # Schema
    "SCHEMA_VERSION",
    "ModeSchema",
    "RulePackSchema",
    "SelectionStateSchema",
    "check_schema_version",
    "validate_rule_pack",
    "validate_selection_state",
]
