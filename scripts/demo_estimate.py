#!/usr/bin/env python3
"""
Sample Function Point estimate through the REAL pipeline.

Loads the YAML policy set, builds a small order-management estimate,
runs every engine through EstimationService and prints the headline
metrics, team sizing, risk, phase/cost breakdowns and a two-version
comparison.

Usage:
    python3 scripts/demo_estimate.py
    python3 scripts/demo_estimate.py --team-size 12 --hourly-rate 95
    python3 scripts/demo_estimate.py --no-gsc --log-level DEBUG
"""

import argparse
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from fpa_config import get_active_policy
from fpa_kernel.domain.values import ComponentKind, ComponentMeasurement, GSCVector, QuerySide
from fpa_kernel.exceptions import FpaKernelError
from fpa_kernel.logging_config import configure_logging
from fpa_services import EstimationService, build_estimate

SAMPLE_GSC = (3, 2, 4, 3, 4, 5, 4, 3, 3, 2, 2, 3, 1, 3)


def sample_components() -> list[ComponentMeasurement]:
    data = ComponentMeasurement.data_function
    txn = ComponentMeasurement.transaction
    return [
        data(ComponentKind.DATA_INTERNAL, 2, 20, name="Customer"),
        data(ComponentKind.DATA_INTERNAL, 3, 35, name="Order"),
        data(ComponentKind.DATA_EXTERNAL, 1, 12, name="Tax rates"),
        txn(ComponentKind.INPUT, 2, 12, name="Create order"),
        txn(ComponentKind.INPUT, 1, 6, name="Update customer"),
        txn(ComponentKind.OUTPUT, 3, 22, name="Monthly sales report"),
        txn(ComponentKind.QUERY, 1, 5, name="Order status"),
        ComponentMeasurement.dual_query(
            QuerySide(file_types_referenced=1, data_elements=5),
            QuerySide(file_types_referenced=3, data_elements=25),
            name="Order history search",
        ),
    ]


def _line(label: str, value: object) -> None:
    print(f"  {label:<32} {value}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Function Point estimate demo")
    parser.add_argument("--policy", default="default", help="Policy set name")
    parser.add_argument("--team-size", type=int, default=5)
    parser.add_argument("--hourly-rate", type=float, default=150.0)
    parser.add_argument("--productivity-factor", type=float, default=None)
    parser.add_argument("--no-gsc", action="store_true", help="Skip the GSC adjustment")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    configure_logging(level=args.log_level)

    try:
        policy = get_active_policy(args.policy)
        service = EstimationService(policy)
        configuration = service.configuration(
            team_size=args.team_size,
            hourly_rate=args.hourly_rate,
            productivity_factor=args.productivity_factor,
        )
        gsc = GSCVector.empty() if args.no_gsc else GSCVector(SAMPLE_GSC)
        inputs = build_estimate(sample_components(), configuration, gsc, name="Order management")
        outcome = service.calculate(inputs, estimate_id="DEMO-001")

        # Second version: one more report, for the comparison
        extra = ComponentMeasurement.transaction(
            ComponentKind.OUTPUT, 2, 10, name="Inventory report",
        )
        revised = build_estimate(
            sample_components() + [extra], configuration, gsc, name="Order management",
        )
        revised_outcome = service.calculate(revised, estimate_id="DEMO-002")
        comparison = service.compare([
            service.snapshot(outcome, 1, "initial"),
            service.snapshot(revised_outcome, 2, "with inventory report"),
        ], name="Order management")
    except FpaKernelError as exc:
        print(f"[{exc.code}] {exc}", file=sys.stderr)
        return 1

    m = outcome.metrics
    print(outcome.summary.title)
    print(f"Policy: {policy.name} v{policy.version} ({policy.checksum[:12]})")
    _line("Unadjusted function points", m.pfna)
    _line("Adjustment factor", f"{m.fa:.2f}")
    _line("Adjusted function points", f"{m.pfa:.2f}")
    _line("Effort (hours)", f"{m.effort_hours:.2f}")
    _line("Duration (days / months)", f"{m.duration_days:.2f} / {m.duration_months:.2f}")
    _line("Total cost", f"{m.total_cost:,.2f}")
    _line("Cost per function point", f"{m.cost_per_function_point:,.2f}")

    if outcome.team_size is not None:
        t = outcome.team_size
        print("\nTeam sizing")
        _line("Recommended team", f"{t.recommended} ({t.min}-{t.max})")
        _line("Recommended duration (months)", f"{t.recommended_duration_months:.2f}")
        _line("Duration range (months)", f"{t.min_duration_months:.2f}-{t.max_duration_months:.2f}")

    r = outcome.risk
    print("\nRisk")
    _line("Overall", f"{r.overall_risk.value} (score {r.risk_score})")
    for name, factor in r.factors.items():
        _line(name, f"{factor.risk.value}: {factor.reason}")
    _line("Quality score", r.quality.quality_score)
    for advice in r.recommendations:
        print(f"  - {advice}")

    print("\nPhases")
    for phase in outcome.detailed.phase_breakdown:
        _line(phase.phase, f"{phase.hours:.1f} h ({phase.percentage:g}%)")

    print("\nComparison")
    for change in comparison.function_point_changes:
        _line("Function points change", f"{change:+.2f}%")
    _line("Trend", f"{comparison.trend.trend.value} ({comparison.trend.percentage_change:+.2f}%)")
    _line(
        "Next version forecast",
        f"{comparison.trend.forecasted_value:.2f} FP "
        f"({comparison.trend.confidence_level:.0f}% confidence)",
    )

    for warning in inputs.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
