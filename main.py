#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  GOLF SHOT TRAJECTORY ENGINE — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete demonstration pipeline:
    1. Default shot (drag on) with aiming arc
    2. Drag comparison (Cd = 0, 0.25, 0.4, 0.5)
    3. Analytical vs numerical integration
    4. Obstacles: tree barrier and sand trap
    5. Validation against closed-form and RK45 references
    6. Full dashboard
    7. Playback replay with pause/resume and slow motion
    8. Animated playback GIF

  All outputs saved to outputs/ directory.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip animation (faster)
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import sys
import os
import time

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from golf_trajectory.projectile import PhysicsParameters, Barrier, Depression
from golf_trajectory.integrator import (
    solve, simulate_analytical, simulate_numerical, aiming_preview,
)
from golf_trajectory.playback import PlaybackController, PlaybackStatus
from golf_trajectory.validation import (
    validate_reference_cases, validate_method_agreement, validate_drag_integrator,
)
from golf_trajectory.visualization import (
    plot_trajectory, plot_drag_comparison, plot_method_comparison,
    plot_dashboard, plot_validation, create_trajectory_animation,
    ensure_output_dir,
)


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     GOLF SHOT TRAJECTORY ENGINE                                       ║
║     ─────────────────────────────────────────────────────             ║
║     Physics: Gravity · Quadratic drag · Barriers · Sand traps         ║
║     Methods: Analytical · Euler │ Playback: pause · slow motion       ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv
    logging.basicConfig(level=logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    banner()
    out = ensure_output_dir('outputs')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Default Shot
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Default Shot (45°, 40 m/s, drag on)")

    params = PhysicsParameters()
    result = solve(params)
    print(result.summary())

    fig = plot_trajectory(result, aiming_arc=aiming_preview(params),
                          save_path=f'{out}/01_default_shot.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/01_default_shot.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Drag Comparison
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Drag Comparison (Same Launch Conditions)")

    drag_results = {'No drag': solve(params.without_drag())}
    for cd in (0.25, 0.4, 0.5):
        drag_results[f'Cd = {cd}'] = solve(PhysicsParameters(drag_coefficient=cd))

    for label, r in drag_results.items():
        s = r.final_stats
        print(f"  {label:<10s}  Distance: {s.horizontal_distance:>7.2f} m  "
              f"Max Height: {s.max_height:>6.2f} m  "
              f"ToF: {s.flight_time:>5.2f} s  Impact: {s.impact_speed:>6.2f} m/s")

    fig = plot_drag_comparison(drag_results, save_path=f'{out}/02_drag_comparison.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/02_drag_comparison.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Analytical vs Numerical
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Analytical vs Numerical Integration")

    ideal = params.without_drag()
    dt_test = 0.05  # Large timestep to show differences
    analytical = simulate_analytical(ideal)
    numerical = simulate_numerical(ideal, dt=dt_test)
    a, n = analytical.final_stats, numerical.final_stats

    print(f"  Timestep: {dt_test} s")
    print(f"  Analytical — Distance: {a.horizontal_distance:.3f} m  |  "
          f"Max Height: {a.max_height:.3f} m")
    print(f"  Numerical  — Distance: {n.horizontal_distance:.3f} m  |  "
          f"Max Height: {n.max_height:.3f} m")
    print(f"  Δ Distance: {n.horizontal_distance - a.horizontal_distance:+.3f} m")

    fig = plot_method_comparison(analytical, numerical,
                                 save_path=f'{out}/03_method_comparison.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/03_method_comparison.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Obstacles
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Obstacles")

    tree = Barrier(x=55.0, width=3.0, height=12.0)
    bunker = Depression(x=60.0, width=12.0)
    cases = [
        ("Tree at 55 m", [tree]),
        ("Bunker at 60 m", [bunker]),
    ]
    obstacle_results = {}
    for label, obstacles in cases:
        r = solve(params, obstacles)
        obstacle_results[label] = r
        s = r.final_stats
        ending = s.collision_kind.value if s.collision_kind else 'ground'
        print(f"  {label:<16s}  Stopped by: {ending:<10s}  "
              f"Distance: {s.horizontal_distance:>6.2f} m  "
              f"Impact: {s.impact_speed:>6.2f} m/s")

    fig = plot_trajectory(obstacle_results["Tree at 55 m"],
                          save_path=f'{out}/04_barrier.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/04_barrier.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Validation")
    ref_results = validate_reference_cases()
    agreement = validate_method_agreement()
    drag_check = validate_drag_integrator()

    fig = plot_validation(agreement + drag_check,
                          title='Numerical Solver Error vs References',
                          save_path=f'{out}/05_validation.png')
    plt.close(fig)
    worst = max(r.worst_error_pct for r in ref_results + agreement + drag_check)
    print(f"\n  Worst relative error: {worst:.4f}%")
    print(f"  ✓ Saved: {out}/05_validation.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Dashboard
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Full Dashboard")
    fig = plot_dashboard(result, save_path=f'{out}/06_dashboard.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/06_dashboard.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Playback Replay
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 7: Playback (synthetic 60 Hz clock)")

    clock = [0.0]
    controller = PlaybackController(clock=lambda: clock[0])
    controller.launch(params)
    frame = 1.0 / 60
    n_frames = 0
    while controller.status is not PlaybackStatus.FINISHED:
        clock[0] += frame
        n_frames += 1
        if n_frames == 30:
            controller.pause()
            clock[0] += 2.0  # two seconds on pause
            controller.resume()
            print(f"  Paused and resumed at t_sim={controller.state.elapsed_sim_time:.3f} s")
        elif n_frames == 60:
            controller.set_slow_motion(True)
            print(f"  Slow motion on at t_sim={controller.state.elapsed_sim_time:.3f} s")
        controller.tick()

    state = controller.state
    print(f"  Finished after {n_frames} frames ({clock[0]:.2f} s wall time)")
    print(f"  Final position: x={state.current_position.x:.2f} m, "
          f"y={state.current_position.y:.2f} m  |  "
          f"{len(state.visible_prefix)} points drawn")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 8: Playback Animation
    # ══════════════════════════════════════════════════════════════════════
    if not quick:
        section("PHASE 8: Playback Animation (GIF)")
        create_trajectory_animation(result,
                                    save_path=f'{out}/08_playback.gif')
        print(f"  ✓ Saved: {out}/08_playback.gif")
    else:
        section("PHASE 8: Animation SKIPPED (--quick mode)")

    # ══════════════════════════════════════════════════════════════════════
    #  SUMMARY
    # ══════════════════════════════════════════════════════════════════════
    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"""
  All outputs saved to: {os.path.abspath(out)}/

  Generated files:
    01_default_shot.png          — Default shot with aiming arc
    02_drag_comparison.png       — Trajectories for several Cd values
    03_method_comparison.png     — Analytical vs numerical
    04_barrier.png               — Shot stopped by a tree
    05_validation.png            — Solver error vs references
    06_dashboard.png             — Full flight data dashboard
    {'08_playback.gif             — Animated playback' if not quick else '(animation skipped)'}

  Total runtime: {elapsed:.1f} seconds
""")


if __name__ == "__main__":
    main()
