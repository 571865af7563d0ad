"""
Validation Against Closed-Form & Reference Solutions
====================================================
Checks the solver three ways:

  1. Reference cases — textbook results for drag-free flight
     (range = v0² sin 2θ / g, apex = (v0 sin θ)² / 2g, level impact speed = v0).
  2. Method agreement — the numerical integrator at a small step must
     reproduce the analytical flight time, range and apex.
  3. Drag reference — with air resistance the Euler integrator is compared
     against scipy's adaptive RK45 (`solve_ivp`) with exact ground and apex
     events at tight tolerance.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy.integrate import solve_ivp

from .drag_model import drag_constant
from .projectile import PhysicsParameters
from .integrator import simulate_analytical, simulate_numerical


# ══════════════════════════════════════════════════════════════════════════
#  Reference cases — drag-free flights with known closed-form answers
# ══════════════════════════════════════════════════════════════════════════

# expected values derived by hand from the kinematic formulas
REFERENCE_CASES = [
    {
        'name': '45° drive, level ground',
        'params': PhysicsParameters(angle=45.0, initial_velocity=40.0, gravity=9.80665,
                                    air_resistance=False, start_height=0.0),
        'horizontal_distance': 40.0 ** 2 / 9.80665,
        'max_height': (40.0 * math.sin(math.radians(45.0))) ** 2 / (2 * 9.80665),
        'impact_speed': 40.0,
    },
    {
        'name': 'Flat shot from 10 m ledge',
        'params': PhysicsParameters(angle=0.0, initial_velocity=40.0, gravity=9.8,
                                    air_resistance=False, start_height=10.0),
        'horizontal_distance': 40.0 * math.sqrt(2 * 10.0 / 9.8),
        'max_height': 10.0,
        'impact_speed': math.sqrt(40.0 ** 2 + 2 * 9.8 * 10.0),
    },
    {
        'name': '30° chip on the Moon',
        'params': PhysicsParameters(angle=30.0, initial_velocity=20.0, gravity=1.62,
                                    air_resistance=False, start_height=0.0),
        'horizontal_distance': 20.0 ** 2 * math.sin(math.radians(60.0)) / 1.62,
        'max_height': (20.0 * 0.5) ** 2 / (2 * 1.62),
        'impact_speed': 20.0,
    },
]

# Drag-enabled shots checked against the adaptive reference integrator
DRAG_CASES = [
    PhysicsParameters(angle=45.0, initial_velocity=40.0, drag_coefficient=0.4),
    PhysicsParameters(angle=15.0, initial_velocity=60.0, drag_coefficient=0.25),
    PhysicsParameters(angle=60.0, initial_velocity=30.0, drag_coefficient=0.5,
                      start_height=5.0),
]


@dataclass
class ValidationResult:
    """Result of one validation comparison."""
    name: str
    ref_range: float        # reference range (m)
    sim_range: float        # simulated range (m)
    range_error_pct: float  # % error
    ref_max_alt: float
    sim_max_alt: float
    alt_error_pct: float
    ref_tof: Optional[float] = None
    sim_tof: Optional[float] = None
    tof_error_pct: Optional[float] = None

    @property
    def worst_error_pct(self) -> float:
        errs = [self.range_error_pct, self.alt_error_pct, self.tof_error_pct]
        return max(abs(e) for e in errs if e is not None)


def _pct(sim, ref):
    if ref == 0:
        return 0.0 if sim == 0 else math.inf
    return 100.0 * (sim - ref) / ref


@dataclass
class ReferenceFlight:
    """Flight summary from the adaptive reference integrator."""
    flight_time: float
    horizontal_distance: float
    max_height: float
    impact_speed: float


def reference_drag_flight(params: PhysicsParameters,
                          rtol: float = 1e-10, atol: float = 1e-10,
                          max_time: float = 600.0) -> ReferenceFlight:
    """
    Integrate the drag equations with scipy's RK45 and exact events.

    State vector: [x, y, vx, vy].
    """
    k = drag_constant(params.drag_coefficient) if params.air_resistance else 0.0
    g = params.gravity
    m = params.mass

    def rhs(t, s):
        vx, vy = s[2], s[3]
        v = math.hypot(vx, vy)
        return [vx, vy, -k * vx * v / m, -g - k * vy * v / m]

    def ground(t, s):
        return s[1]
    ground.terminal = True
    ground.direction = -1

    def apex(t, s):
        return s[3]
    apex.direction = -1

    vx0, vy0 = params.initial_velocity_vector()
    sol = solve_ivp(rhs, (0.0, max_time), [0.0, params.start_height, vx0, vy0],
                    events=[ground, apex], rtol=rtol, atol=atol)

    if sol.t_events[0].size == 0:
        raise RuntimeError(f"reference flight did not land within {max_time} s")

    landing = sol.y_events[0][0]
    max_height = params.start_height
    if sol.t_events[1].size:
        max_height = max(max_height, float(sol.y_events[1][0][1]))

    return ReferenceFlight(
        flight_time=float(sol.t_events[0][0]),
        horizontal_distance=float(landing[0]),
        max_height=max_height,
        impact_speed=float(np.hypot(landing[2], landing[3])),
    )


def validate_reference_cases(cases: Sequence[dict] = REFERENCE_CASES,
                             verbose: bool = True) -> List[ValidationResult]:
    """Analytical solver vs the hand-derived textbook values."""
    results = []

    if verbose:
        print(f"\n{'='*75}")
        print(f"  VALIDATION: closed-form reference cases")
        print(f"{'='*75}")
        print(f"{'Case':<28} {'Ref R':>8} {'Sim R':>8} {'Err %':>8} "
              f"{'Ref H':>7} {'Sim H':>7} {'Err %':>8}")
        print("-" * 75)

    for case in cases:
        traj = simulate_analytical(case['params'])
        s = traj.final_stats
        vr = ValidationResult(
            name=case['name'],
            ref_range=case['horizontal_distance'],
            sim_range=s.horizontal_distance,
            range_error_pct=_pct(s.horizontal_distance, case['horizontal_distance']),
            ref_max_alt=case['max_height'],
            sim_max_alt=s.max_height,
            alt_error_pct=_pct(s.max_height, case['max_height']),
        )
        results.append(vr)

        if verbose:
            print(f"{vr.name:<28} {vr.ref_range:>8.2f} {vr.sim_range:>8.2f} "
                  f"{vr.range_error_pct:>+8.4f} {vr.ref_max_alt:>7.2f} "
                  f"{vr.sim_max_alt:>7.2f} {vr.alt_error_pct:>+8.4f}")

    return results


def validate_method_agreement(params_list: Optional[Sequence[PhysicsParameters]] = None,
                              dt: float = 1e-4,
                              verbose: bool = True) -> List[ValidationResult]:
    """Numerical integration (drag off) vs the analytical solution."""
    if params_list is None:
        params_list = [c['params'] for c in REFERENCE_CASES]

    results = []
    if verbose:
        print(f"\n{'='*75}")
        print(f"  VALIDATION: numerical vs analytical (dt = {dt} s)")
        print(f"{'='*75}")

    for params in params_list:
        params = params.without_drag()
        exact = simulate_analytical(params).final_stats
        approx = simulate_numerical(params, dt=dt).final_stats

        vr = ValidationResult(
            name=f"{params.angle:.0f}° @ {params.initial_velocity:.0f} m/s",
            ref_range=exact.horizontal_distance,
            sim_range=approx.horizontal_distance,
            range_error_pct=_pct(approx.horizontal_distance, exact.horizontal_distance),
            ref_max_alt=exact.max_height,
            sim_max_alt=approx.max_height,
            alt_error_pct=_pct(approx.max_height, exact.max_height),
            ref_tof=exact.flight_time,
            sim_tof=approx.flight_time,
            tof_error_pct=_pct(approx.flight_time, exact.flight_time),
        )
        results.append(vr)

        if verbose:
            print(f"  {vr.name:<22} range Δ={vr.sim_range - vr.ref_range:+.5f} m  "
                  f"apex Δ={vr.sim_max_alt - vr.ref_max_alt:+.5f} m  "
                  f"ToF Δ={vr.sim_tof - vr.ref_tof:+.5f} s")

    return results


def validate_drag_integrator(params_list: Sequence[PhysicsParameters] = DRAG_CASES,
                             dt: float = 1e-3,
                             verbose: bool = True) -> List[ValidationResult]:
    """Euler integrator with drag vs the adaptive RK45 reference."""
    results = []
    if verbose:
        print(f"\n{'='*75}")
        print(f"  VALIDATION: Euler drag integrator vs RK45 reference (dt = {dt} s)")
        print(f"{'='*75}")

    for params in params_list:
        ref = reference_drag_flight(params)
        sim = simulate_numerical(params, dt=dt).final_stats

        vr = ValidationResult(
            name=f"{params.angle:.0f}° @ {params.initial_velocity:.0f} m/s Cd={params.drag_coefficient}",
            ref_range=ref.horizontal_distance,
            sim_range=sim.horizontal_distance,
            range_error_pct=_pct(sim.horizontal_distance, ref.horizontal_distance),
            ref_max_alt=ref.max_height,
            sim_max_alt=sim.max_height,
            alt_error_pct=_pct(sim.max_height, ref.max_height),
            ref_tof=ref.flight_time,
            sim_tof=sim.flight_time,
            tof_error_pct=_pct(sim.flight_time, ref.flight_time),
        )
        results.append(vr)

        if verbose:
            print(f"  {vr.name:<30} R {vr.sim_range:>7.2f}/{vr.ref_range:>7.2f} m "
                  f"({vr.range_error_pct:+.3f}%)  H {vr.sim_max_alt:>6.2f}/"
                  f"{vr.ref_max_alt:>6.2f} m ({vr.alt_error_pct:+.3f}%)")

    return results


def run_all_validations(verbose: bool = True) -> Dict[str, List[ValidationResult]]:
    """Run every validation suite and print an overall verdict."""
    all_results = {
        'reference': validate_reference_cases(verbose=verbose),
        'agreement': validate_method_agreement(verbose=verbose),
        'drag': validate_drag_integrator(verbose=verbose),
    }

    if verbose:
        worst = max(r.worst_error_pct for rs in all_results.values() for r in rs)
        status = "✓ PASS" if worst < 1.0 else "✗ NEEDS TUNING"
        print("-" * 75)
        print(f"  Worst relative error: {worst:.4f}%  —  {status}")
        print(f"{'='*75}\n")

    return all_results


if __name__ == "__main__":
    run_all_validations(verbose=True)
