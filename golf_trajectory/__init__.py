"""
Golf Shot Trajectory Engine
===========================
Deterministic 2D ball-flight solver with real-time playback:
  - Closed-form kinematics for drag-free shots
  - Fixed-step integration with quadratic air resistance
  - Barrier (tree/wall) and depression (sand trap) obstacles
  - Pause / resume / slow-motion replay of a precomputed flight

Solve once, replay deterministically: the full path is computed before
the ball starts moving, so frame rate never alters the flight.
"""

from .drag_model import AIR_DENSITY, BALL_DIAMETER, cross_sectional_area, drag_constant
from .projectile import (
    PhysicsParameters, ParameterError,
    Barrier, Depression, Obstacle, ObstacleKind, CollisionKind,
)
from .integrator import (
    SamplePoint, FinalStats, TrajectoryResult, SolverDivergenceError,
    solve, simulate_analytical, simulate_numerical, aiming_preview,
    DEFAULT_SAMPLE_INTERVAL, MAX_FLIGHT_TIME,
)
from .playback import (
    PlaybackStatus, PlaybackState, PlaybackController, tick,
    NORMAL_TIME_FACTOR, SLOW_MOTION_FACTOR,
)
from .validation import (
    validate_reference_cases, validate_method_agreement,
    validate_drag_integrator, run_all_validations, REFERENCE_CASES,
)

__version__ = "1.0.0"
__all__ = [
    'PhysicsParameters', 'ParameterError',
    'Barrier', 'Depression', 'Obstacle', 'ObstacleKind', 'CollisionKind',
    'SamplePoint', 'FinalStats', 'TrajectoryResult', 'SolverDivergenceError',
    'solve', 'simulate_analytical', 'simulate_numerical', 'aiming_preview',
    'PlaybackStatus', 'PlaybackState', 'PlaybackController', 'tick',
    'NORMAL_TIME_FACTOR', 'SLOW_MOTION_FACTOR',
    'AIR_DENSITY', 'BALL_DIAMETER', 'cross_sectional_area', 'drag_constant',
    'validate_reference_cases', 'validate_method_agreement',
    'validate_drag_integrator', 'run_all_validations', 'REFERENCE_CASES',
]
