"""
Policy schema (``fpa_config.schema``).

Frozen dataclasses describing a complete estimation policy set.  The
engine-owned policy values (TeamSizingPolicy, RiskPolicy, QualityPolicy,
TrendPolicy) are reused as-is; this module adds the estimate defaults and
the EstimationPolicy container that ties a set together with its
identity and checksum.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fpa_engines.risk import QualityPolicy, RiskPolicy
from fpa_engines.team_size import TeamSizingPolicy
from fpa_engines.trend import TrendPolicy


@dataclass(frozen=True)
class EstimateDefaults:
    """Configuration values applied when an estimate omits them."""

    average_daily_working_hours: float = 8.0
    productivity_factor: float = 10.0


@dataclass(frozen=True)
class EstimationPolicy:
    """
    A loaded, validated policy set.

    ``checksum`` is the SHA-256 of the canonical JSON of the source YAML;
    it is empty for policies built in code.
    """

    name: str = "default"
    version: int = 1
    description: str = ""
    defaults: EstimateDefaults = field(default_factory=EstimateDefaults)
    team_sizing: TeamSizingPolicy = field(default_factory=TeamSizingPolicy)
    risk: RiskPolicy = field(default_factory=RiskPolicy)
    quality: QualityPolicy = field(default_factory=QualityPolicy)
    trend: TrendPolicy = field(default_factory=TrendPolicy)
    checksum: str = ""
