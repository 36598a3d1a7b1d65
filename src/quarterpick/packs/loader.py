"""
QuarterPick Rule Pack Loader

Loads and validates rule packs from YAML or JSON files.

Converts Pydantic schema models to the frozen RuleConfig used by the
rule engine.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import RulePackLoadError, RulePackValidationError, RulePackVersionMismatch
from ..models import PatternAttribute, RuleConfig
from .schema import (
    SCHEMA_VERSION,
    RulePackSchema,
    check_schema_version,
    validate_rule_pack,
)

logger = logging.getLogger(__name__)

DEFAULT_PACK_PATH = Path(__file__).parent / "us_quarterly.yaml"


# =============================================================================
# Schema to Model Converter
# =============================================================================

def _convert_rule_pack(schema: RulePackSchema) -> RuleConfig:
    """Convert RulePackSchema to RuleConfig."""
    return RuleConfig(
        id=schema.id,
        name=schema.name,
        version=schema.version,
        calendar=schema.calendar,
        avoid_holidays=schema.avoid_holidays,
        weekend_days=frozenset(schema.weekend_days),
        max_run_length=schema.max_run_length,
        window_quarters=schema.window_quarters,
        coarse_attributes=tuple(PatternAttribute(a) for a in schema.coarse_attributes),
        fine_attributes=tuple(PatternAttribute(a) for a in schema.fine_attributes),
        quarter_overflow_threshold=schema.quarter_overflow_threshold,
        valid_days_months=schema.valid_days_months,
    )


# =============================================================================
# Rule Pack Loader
# =============================================================================

class RulePackLoader:
    """
    Loads rule packs from YAML or JSON files.

    Usage:
        loader = RulePackLoader()
        rules = loader.load("path/to/pack.yaml")
    """

    def __init__(self, strict_version: bool = True):
        """
        Initialize the loader.

        Args:
            strict_version: If True, reject packs with incompatible schema versions
        """
        self.strict_version = strict_version
        self._packs: dict[str, RuleConfig] = {}

    def load(self, path: Union[str, Path]) -> RuleConfig:
        """
        Load a rule pack from a file.

        Args:
            path: Path to YAML or JSON file

        Returns:
            Loaded RuleConfig

        Raises:
            RulePackLoadError: If file cannot be read or parsed
            RulePackValidationError: If validation fails
            RulePackVersionMismatch: If schema version incompatible
        """
        path = Path(path)

        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise RulePackLoadError(
                message=f"Failed to load rule pack: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e

        rules = self.load_data(data, source=str(path))
        logger.info("Loaded rule pack %s v%s from %s", rules.id, rules.version, path)
        return rules

    def load_data(self, data: Any, source: str = "<data>") -> RuleConfig:
        """
        Validate already-parsed pack data and convert it.

        Raises:
            RulePackLoadError: If the document is not a mapping
            RulePackValidationError: If validation fails
            RulePackVersionMismatch: If schema version incompatible
        """
        if not isinstance(data, dict):
            raise RulePackLoadError(
                message="Rule pack must be a mapping at the top level",
                details={"path": source, "type": type(data).__name__},
            )

        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise RulePackVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={
                    "pack_version": pack_version,
                    "expected_version": SCHEMA_VERSION,
                },
            )

        try:
            schema = validate_rule_pack(data)
        except ValidationError as e:
            raise RulePackValidationError(
                message=f"Rule pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False), "path": source},
            ) from e

        rules = _convert_rule_pack(schema)
        self._packs[rules.id] = rules
        return rules

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                return yaml.safe_load(f)
            elif path.suffix.lower() == ".json":
                return json.load(f)
            else:
                # YAML is a superset of JSON
                return yaml.safe_load(f)

    def get_rule_pack(self, pack_id: str) -> Optional[RuleConfig]:
        """Get a cached rule pack by ID."""
        return self._packs.get(pack_id)

    def list_rule_packs(self) -> list[str]:
        """List IDs of all loaded rule packs."""
        return list(self._packs.keys())


# =============================================================================
# Convenience Functions
# =============================================================================

def load_rule_pack(path: Union[str, Path]) -> RuleConfig:
    """Load a rule pack from a file with a temporary loader."""
    return RulePackLoader().load(path)


def load_rule_pack_from_string(content: str, format: str = "yaml") -> RuleConfig:
    """
    Load a rule pack from a string.

    Args:
        content: YAML or JSON string
        format: "yaml" or "json"

    Raises:
        RulePackLoadError: If the content cannot be parsed
        RulePackValidationError: If validation fails
    """
    try:
        if format.lower() == "json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise RulePackLoadError(
            message=f"Failed to parse rule pack: {e}",
            details={"format": format, "error": str(e)},
        ) from e

    return RulePackLoader().load_data(data, source=f"<{format} string>")


def load_default_rule_pack() -> RuleConfig:
    """Load the bundled US quarterly rule pack."""
    return load_rule_pack(DEFAULT_PACK_PATH)
