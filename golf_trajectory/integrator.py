"""
Trajectory Solver
=================
Computes the complete flight of one shot, from tee to landing, in a
single synchronous call. Two methods are used:

1. **Analytical** — closed-form constant-gravity kinematics. Exact, used
   when there is no air resistance and no obstacle to test against.
2. **Numerical** — fixed-step semi-implicit Euler integration of

       dx/dt = v
       dv/dt = g + F_drag(v) / m

   used whenever drag is enabled or obstacles must be checked per step.
   The landing instant is recovered by linear interpolation between the
   last two steps.

Output: TrajectoryResult — time-stamped samples plus final statistics.
Results are immutable; the solver keeps no state between calls.
"""

import logging
import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .drag_model import drag_constant, acceleration
from .projectile import PhysicsParameters, Obstacle, Barrier, Depression, CollisionKind

logger = logging.getLogger(__name__)


DEFAULT_SAMPLE_INTERVAL = 0.016   # s  (one 60 Hz frame)
PREVIEW_SAMPLE_INTERVAL = 0.1     # s
MAX_FLIGHT_TIME         = 600.0   # s  simulated-time safety cap


class SolverDivergenceError(RuntimeError):
    """Numerical integration failed to reach the ground within the time cap."""


@dataclass(frozen=True)
class SamplePoint:
    """Position of the ball at one instant."""
    x: float
    y: float
    t: float


@dataclass(frozen=True)
class FinalStats:
    """Summary statistics of a finished flight."""
    flight_time: float
    horizontal_distance: float
    max_height: float
    max_height_point: SamplePoint
    time_to_max_height: float
    horizontal_distance_to_max_height: float
    launch_speed: float
    impact_speed: float
    collision_kind: Optional[CollisionKind] = None

    def to_dict(self) -> dict:
        return {
            'flight_time': self.flight_time,
            'horizontal_distance': self.horizontal_distance,
            'max_height': self.max_height,
            'max_height_point': {'x': self.max_height_point.x,
                                 'y': self.max_height_point.y,
                                 't': self.max_height_point.t},
            'time_to_max_height': self.time_to_max_height,
            'horizontal_distance_to_max_height': self.horizontal_distance_to_max_height,
            'launch_speed': self.launch_speed,
            'impact_speed': self.impact_speed,
            'collision_kind': self.collision_kind.value if self.collision_kind else None,
        }


@dataclass(frozen=True)
class TrajectoryResult:
    """Complete trajectory output."""
    params: PhysicsParameters
    method: str                        # 'analytical' or 'numerical'
    samples: Tuple[SamplePoint, ...]
    final_stats: FinalStats
    obstacles: Tuple[Obstacle, ...] = field(default=())

    @property
    def x(self) -> np.ndarray:
        return np.array([p.x for p in self.samples])

    @property
    def y(self) -> np.ndarray:
        return np.array([p.y for p in self.samples])

    @cached_property
    def time(self) -> np.ndarray:
        """Sample times, built once per result and read-only."""
        times = np.array([p.t for p in self.samples])
        times.setflags(write=False)
        return times

    @property
    def flight_time(self) -> float:
        return self.final_stats.flight_time

    @property
    def landing_point(self) -> SamplePoint:
        return self.samples[-1]

    def to_dict(self) -> dict:
        """Plain record of the inputs and final statistics of this run."""
        return {
            'params': self.params.to_dict(),
            'method': self.method,
            'stats': self.final_stats.to_dict(),
        }

    def summary(self) -> str:
        """Human-readable summary string."""
        s = self.final_stats
        p = self.params
        drag = f"on (Cd={p.drag_coefficient:.2f})" if p.air_resistance else "off"
        ending = s.collision_kind.value if s.collision_kind else "ground"
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  TRAJECTORY SUMMARY{'':<34s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Method       : {self.method.upper():<36s} ║",
            f"║  Air drag     : {drag:<36s} ║",
            f"║  Samples      : {len(self.samples):<36d} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Launch vel   : {s.launch_speed:>10.2f} m/s{'':<22s} ║",
            f"║  Angle        : {p.angle:>10.1f} °{'':<24s} ║",
            f"║  Tee height   : {p.start_height:>10.2f} m{'':<24s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Distance     : {s.horizontal_distance:>10.2f} m{'':<24s} ║",
            f"║  Max height   : {s.max_height:>10.2f} m{'':<24s} ║",
            f"║  Apex at      : {s.horizontal_distance_to_max_height:>10.2f} m  "
            f"(t={s.time_to_max_height:>6.2f} s){'':<7s} ║",
            f"║  Flight time  : {s.flight_time:>10.2f} s{'':<24s} ║",
            f"║  Impact vel   : {s.impact_speed:>10.2f} m/s{'':<22s} ║",
            f"║  Stopped by   : {ending:<36s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def _check_step(dt):
    if not dt > 0:
        raise ValueError(f"time step must be > 0, got {dt}")


def _grounded_result(params: PhysicsParameters, method: str) -> TrajectoryResult:
    """Single-sample result for a ball that never leaves its resting point.

    Every distance, time and speed is zero, launch speed included.
    """
    rest = SamplePoint(0.0, params.start_height, 0.0)
    stats = FinalStats(
        flight_time=0.0,
        horizontal_distance=0.0,
        max_height=params.start_height,
        max_height_point=rest,
        time_to_max_height=0.0,
        horizontal_distance_to_max_height=0.0,
        launch_speed=0.0,
        impact_speed=0.0,
    )
    return TrajectoryResult(params=params, method=method,
                            samples=(rest,), final_stats=stats)


def simulate_analytical(params: PhysicsParameters,
                        sample_interval: float = DEFAULT_SAMPLE_INTERVAL) -> TrajectoryResult:
    """
    Closed-form projectile motion under constant gravity.

    y(t) = y0 + v0y t − ½ g t²  is solved for its positive root to get
    the flight time; the path is then sampled every `sample_interval`
    seconds with an exact landing sample appended.
    """
    _check_step(sample_interval)
    g = params.gravity
    y0 = params.start_height
    v0x, v0y = params.initial_velocity_vector()

    if params.initial_velocity == 0 or (v0y <= 0 and y0 == 0):
        return _grounded_result(params, 'analytical')

    flight_time = (v0y + math.sqrt(v0y ** 2 + 2 * g * y0)) / g
    horizontal_distance = v0x * flight_time

    time_to_max_height = v0y / g
    max_height = y0 + v0y ** 2 / (2 * g)
    horizontal_distance_to_max_height = v0x * time_to_max_height

    impact_vy = v0y - g * flight_time
    impact_speed = math.sqrt(v0x ** 2 + impact_vy ** 2)

    # Index-based times avoid drift from repeated addition
    n_steps = int(math.ceil(flight_time / sample_interval))
    times = np.arange(n_steps) * sample_interval
    times = times[times < flight_time]
    xs = v0x * times
    ys = y0 + v0y * times - 0.5 * g * times ** 2

    samples = [SamplePoint(float(x), float(y), float(t))
               for x, y, t in zip(xs, ys, times)]
    samples.append(SamplePoint(horizontal_distance, 0.0, flight_time))

    stats = FinalStats(
        flight_time=flight_time,
        horizontal_distance=horizontal_distance,
        max_height=max_height,
        max_height_point=SamplePoint(horizontal_distance_to_max_height,
                                     max_height, time_to_max_height),
        time_to_max_height=time_to_max_height,
        horizontal_distance_to_max_height=horizontal_distance_to_max_height,
        launch_speed=params.initial_velocity,
        impact_speed=impact_speed,
    )
    return TrajectoryResult(params=params, method='analytical',
                            samples=tuple(samples), final_stats=stats)


def simulate_numerical(params: PhysicsParameters,
                       obstacles: Sequence[Obstacle] = (),
                       dt: float = DEFAULT_SAMPLE_INTERVAL,
                       max_flight_time: float = MAX_FLIGHT_TIME) -> TrajectoryResult:
    """
    Semi-implicit Euler integration with drag and obstacle checks.

    v_{n+1} = v_n + a(v_n) * dt
    x_{n+1} = x_n + v_{n+1} * dt

    Raises SolverDivergenceError if the ball is still airborne after
    `max_flight_time` seconds of simulated time.
    """
    _check_step(dt)
    obstacles = tuple(obstacles)
    barriers = [o for o in obstacles if isinstance(o, Barrier)]
    depressions = [o for o in obstacles if isinstance(o, Depression)]

    x, y = params.initial_position()
    vx, vy = params.initial_velocity_vector()
    t = 0.0

    if params.initial_velocity == 0 or (vy <= 0 and y == 0):
        return _grounded_result(params, 'numerical')

    k = drag_constant(params.drag_coefficient) if params.air_resistance else 0.0

    samples: List[SamplePoint] = [SamplePoint(x, y, t)]
    max_height_point = samples[0]
    n_steps = 0
    max_steps = int(math.ceil(max_flight_time / dt))

    while True:
        if n_steps >= max_steps:
            raise SolverDivergenceError(
                f"ball still airborne after {max_flight_time:.1f} s "
                f"({n_steps} steps of {dt} s); last position x={x:.2f} m, y={y:.2f} m"
            )
        n_steps += 1

        prev_x, prev_y, prev_t = x, y, t

        ax, ay = acceleration(vx, vy, params.gravity, params.mass, k)
        vx += ax * dt
        vy += ay * dt
        x += vx * dt
        y += vy * dt
        t = n_steps * dt

        ground_f = prev_y / (prev_y - y) if y < 0 else None

        contacts = [(s, b) for b in barriers
                    for s in (b.contact_fraction(prev_x, prev_y, x, y),)
                    if s is not None]
        hit = None
        if contacts:
            s, hit = min(contacts, key=lambda c: c[0])
            if ground_f is not None and ground_f < s:
                hit = None  # lands before reaching the barrier
        if hit is not None:
            stop_x = min(max(prev_x + (x - prev_x) * s, hit.left), hit.right)
            stop_y = max(prev_y + (y - prev_y) * s, 0.0)
            stop = SamplePoint(stop_x, stop_y, prev_t + dt * s)
            if stop.y > max_height_point.y:
                max_height_point = stop
            logger.debug("Barrier at x=%.2f stopped the ball at t=%.3f s", hit.x, stop.t)

            hit_vx = vx - ax * (dt * (1 - s))
            hit_vy = vy - ay * (dt * (1 - s))
            if stop.t <= samples[-1].t:
                samples[-1] = stop
            else:
                samples.append(stop)
            stats = _numerical_stats(params, stop, max_height_point,
                                     math.hypot(hit_vx, hit_vy), CollisionKind.BARRIER)
            return TrajectoryResult(params=params, method='numerical',
                                    samples=tuple(samples), final_stats=stats,
                                    obstacles=obstacles)

        if y > max_height_point.y:
            max_height_point = SamplePoint(x, y, t)

        if ground_f is not None:
            # Crossed the ground during this step: interpolate back to y = 0
            f = ground_f
            land_x = prev_x + (x - prev_x) * f
            land_t = prev_t + dt * f

            impact_vx = vx - ax * (dt * (1 - f))
            impact_vy = vy - ay * (dt * (1 - f))
            impact_speed = math.hypot(impact_vx, impact_vy)

            collision = None
            if any(d.spans(land_x) for d in depressions):
                impact_speed = 0.0
                collision = CollisionKind.DEPRESSION
                logger.debug("Ball landed in a depression at x=%.2f", land_x)

            landing = SamplePoint(land_x, 0.0, land_t)
            if land_t <= samples[-1].t:
                # Previous step sat exactly on the ground
                samples[-1] = landing
            else:
                samples.append(landing)

            stats = _numerical_stats(params, landing, max_height_point,
                                     impact_speed, collision)
            return TrajectoryResult(params=params, method='numerical',
                                    samples=tuple(samples), final_stats=stats,
                                    obstacles=obstacles)

        samples.append(SamplePoint(x, y, t))


def _numerical_stats(params, end, apex, impact_speed, collision):
    return FinalStats(
        flight_time=end.t,
        horizontal_distance=end.x,
        max_height=apex.y,
        max_height_point=apex,
        time_to_max_height=apex.t,
        horizontal_distance_to_max_height=apex.x,
        launch_speed=params.initial_velocity,
        impact_speed=impact_speed,
        collision_kind=collision,
    )


def solve(params: PhysicsParameters, obstacles: Sequence[Obstacle] = (),
          sample_interval: float = DEFAULT_SAMPLE_INTERVAL) -> TrajectoryResult:
    """
    Compute the full trajectory and statistics for one shot.

    Uses the analytical method when air resistance is off and there are
    no obstacles, the numerical method otherwise. Deterministic: equal
    inputs always produce equal results.
    """
    obstacles = tuple(obstacles)
    if not params.air_resistance and not obstacles:
        logger.debug("Solving analytically: angle=%.1f° v0=%.2f m/s",
                     params.angle, params.initial_velocity)
        return simulate_analytical(params, sample_interval)

    logger.debug("Solving numerically: drag=%s, %d obstacle(s), dt=%s",
                 params.air_resistance, len(obstacles), sample_interval)
    return simulate_numerical(params, obstacles, dt=sample_interval)


def aiming_preview(params: PhysicsParameters,
                   sample_interval: float = PREVIEW_SAMPLE_INTERVAL) -> List[SamplePoint]:
    """Ideal no-drag arc for the current parameters, for aiming."""
    return list(simulate_analytical(params.without_drag(), sample_interval).samples)
