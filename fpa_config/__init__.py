"""
fpa_config -- single public entrypoint for estimation policy.

Responsibility:
    Provides the ONLY way to obtain policy at runtime through
    ``get_active_policy()``.  Returns an ``EstimationPolicy`` whose
    sections are handed straight to the engines.  YAML loading is
    internal tooling and never exposed to callers.

Architecture position:
    Configuration -- YAML-driven policy, load-time validation.
    This package sits above ``fpa_kernel`` and ``fpa_engines`` and below
    ``fpa_services``.  Engines MUST NEVER import from ``fpa_config``.

Invariants enforced:
    - Single entrypoint: all runtime policy flows through
      ``get_active_policy()``.
    - Load-time validation: a policy with validation errors is never
      returned.
    - Deterministic identity: the same YAML always produces the same
      checksum.

Failure modes:
    - ``FileNotFoundError`` -- no policy set with the requested name.
    - ``ValueError`` -- unknown sections or keys in the YAML.
    - ``PolicyConfigError`` -- the parsed policy failed validation.

Audit relevance:
    Every successful ``get_active_policy()`` call emits an
    ``FPA_CONFIG_TRACE`` log entry with the policy name, version and
    checksum, tying each estimate back to the thresholds that produced it.
"""

from __future__ import annotations

from pathlib import Path

from fpa_config.loader import load_yaml_file, parse_policy
from fpa_config.schema import EstimateDefaults, EstimationPolicy
from fpa_config.validator import PolicyValidationResult, validate_policy
from fpa_kernel.exceptions import PolicyConfigError
from fpa_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default policy sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

POLICY_FILENAME = "policy.yaml"


def get_active_policy(
    name: str = "default",
    config_dir: Path | None = None,
) -> EstimationPolicy:
    """The ONLY public policy entrypoint.

    Args:
        name: Policy set name (subdirectory of the sets directory).
        config_dir: Override path to the policy sets directory.
            Defaults to fpa_config/sets/.

    Returns:
        EstimationPolicy -- validated, with its source checksum.

    Raises:
        FileNotFoundError: If the policy set does not exist.
        ValueError: If the YAML has unknown sections or keys.
        PolicyConfigError: If the policy fails validation.
    """
    sets_dir = Path(config_dir) if config_dir is not None else _DEFAULT_CONFIG_DIR
    policy_file = sets_dir / name / POLICY_FILENAME
    if not policy_file.is_file():
        raise FileNotFoundError(f"Policy set not found: {policy_file}")

    policy = parse_policy(load_yaml_file(policy_file))

    validation = validate_policy(policy)
    for warning in validation.warnings:
        _logger.warning("policy_validation_warning", extra={
            "policy_name": policy.name,
            "warning": warning,
        })
    if not validation.is_valid:
        _logger.error("policy_invalid", extra={
            "policy_name": policy.name,
            "source": str(policy_file),
            "errors": validation.errors,
        })
        raise PolicyConfigError(str(policy_file), validation.errors)

    _logger.info(
        "FPA_CONFIG_TRACE",
        extra={
            "trace_type": "FPA_CONFIG_TRACE",
            "policy_name": policy.name,
            "policy_version": policy.version,
            "checksum": policy.checksum,
            "warning_count": len(validation.warnings),
        },
    )
    return policy


__all__ = [
    "EstimateDefaults",
    "EstimationPolicy",
    "PolicyValidationResult",
    "get_active_policy",
    "validate_policy",
]
