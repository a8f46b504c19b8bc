"""
Policy loader (``fpa_config.loader``).

Responsibility
--------------
Loads a policy YAML file and parses its sections into the frozen policy
dataclasses.  The single public entry point for runtime policy is
``fpa_config.get_active_policy()``; this module is its tooling.

Architecture position
---------------------
**Config layer**.  Depends on ``fpa_engines`` for the engine-owned policy
dataclasses and on PyYAML for parsing.

Invariants enforced
-------------------
* Unknown keys are rejected; a typo never silently falls back to a default.
* Omitted keys take the dataclass default.
* ``compute_checksum`` produces a deterministic SHA-256 hash for policy
  identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section or key, or a section that is not a mapping  ->
  ``ValueError``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from fpa_config.schema import EstimateDefaults, EstimationPolicy
from fpa_engines.risk import QualityPolicy, RiskPolicy
from fpa_engines.team_size import TeamSizingPolicy
from fpa_engines.trend import TrendPolicy

_TOP_LEVEL_KEYS = frozenset({
    "name", "version", "description",
    "defaults", "team_sizing", "risk", "quality", "trend",
})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_section(cls: type, data: Any, section: str) -> Any:
    """Build a policy dataclass from a mapping, rejecting unknown keys."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValueError(f"Section '{section}' must be a mapping, got {type(data).__name__}")

    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in section '{section}': {', '.join(unknown)}")

    values = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in data.items()
    }
    return cls(**values)


def parse_defaults(data: Any) -> EstimateDefaults:
    return _parse_section(EstimateDefaults, data, "defaults")


def parse_team_sizing(data: Any) -> TeamSizingPolicy:
    return _parse_section(TeamSizingPolicy, data, "team_sizing")


def parse_risk(data: Any) -> RiskPolicy:
    return _parse_section(RiskPolicy, data, "risk")


def parse_quality(data: Any) -> QualityPolicy:
    return _parse_section(QualityPolicy, data, "quality")


def parse_trend(data: Any) -> TrendPolicy:
    return _parse_section(TrendPolicy, data, "trend")


def parse_policy(data: dict[str, Any]) -> EstimationPolicy:
    """
    Parse a complete ``EstimationPolicy`` from a YAML mapping.

    Postconditions:
        - The returned policy carries the checksum of ``data``.
    Raises:
        ValueError: on unknown sections or keys.
    """
    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ValueError(f"Unknown policy sections: {', '.join(unknown)}")

    return EstimationPolicy(
        name=data.get("name", "default"),
        version=data.get("version", 1),
        description=data.get("description", ""),
        defaults=parse_defaults(data.get("defaults")),
        team_sizing=parse_team_sizing(data.get("team_sizing")),
        risk=parse_risk(data.get("risk")),
        quality=parse_quality(data.get("quality")),
        trend=parse_trend(data.get("trend")),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
