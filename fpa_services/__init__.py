"""
fpa_services -- Package init and public API.

Responsibility:
    Orchestration services that compose the pure estimation engines
    (fpa_engines/) with a loaded policy (fpa_config/).

Architecture position:
    Services -- orchestration over engines + kernel + config.

    Dependency direction:
        fpa_services/ -> fpa_engines/  (allowed)
        fpa_services/ -> fpa_config/   (allowed)
        fpa_services/ -> fpa_kernel/   (allowed)
        fpa_engines/  -> fpa_services/ (FORBIDDEN)
        fpa_kernel/   -> fpa_services/ (FORBIDDEN)

Invariants enforced:
    - Layer isolation: fpa_kernel and fpa_engines must never import from
      this package.
"""

from fpa_kernel.logging_config import get_logger

logger = get_logger("services")

from fpa_services.estimation_service import (
    EstimateInputs,
    EstimateOutcome,
    EstimationService,
    build_estimate,
)

__all__ = [
    "EstimateInputs",
    "EstimateOutcome",
    "EstimationService",
    "build_estimate",
]
