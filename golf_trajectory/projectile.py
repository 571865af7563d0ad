"""
Shot Parameters & Course Obstacles
==================================
Defines the immutable inputs of one simulated shot:

  - PhysicsParameters : launch angle/speed, gravity, ball mass, drag, tee height
  - Barrier           : vertical obstacle (tree, wall) that stops the ball
  - Depression        : sand-trap style hollow that kills the ball on landing

Coordinate system:
  x = downrange (horizontal, m)
  y = height above ground (vertical, up positive, m)

Values outside their physical domain are rejected with ParameterError;
nothing is clamped silently.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


class ParameterError(ValueError):
    """Raised when a shot parameter or obstacle is outside its domain."""


class ObstacleKind(Enum):
    BARRIER = "barrier"
    DEPRESSION = "depression"


class CollisionKind(Enum):
    """How a flight ended, when it did not simply land on open ground."""
    BARRIER = "barrier"
    DEPRESSION = "depression"


def _require_finite(name, value):
    if not math.isfinite(value):
        raise ParameterError(f"{name} must be a finite number, got {value!r}")


@dataclass(frozen=True)
class PhysicsParameters:
    """
    Complete specification of one shot.

    Defaults reproduce a standard golf ball driven at 45° and 40 m/s
    with air resistance enabled.
    """
    angle: float = 45.0               # degrees above horizontal, [0, 90]
    initial_velocity: float = 40.0    # m/s
    gravity: float = 9.807            # m/s²
    mass: float = 0.0459              # kg  (regulation golf ball)
    air_resistance: bool = True
    drag_coefficient: float = 0.4     # dimensionless, used only with drag
    start_height: float = 0.0         # m above ground

    def __post_init__(self):
        for name in ('angle', 'initial_velocity', 'gravity', 'mass',
                     'drag_coefficient', 'start_height'):
            _require_finite(name, getattr(self, name))

        if not 0.0 <= self.angle <= 90.0:
            raise ParameterError(f"angle must be within [0, 90] degrees, got {self.angle}")
        if self.initial_velocity < 0:
            raise ParameterError(f"initial_velocity must be >= 0, got {self.initial_velocity}")
        if self.gravity <= 0:
            raise ParameterError(f"gravity must be > 0, got {self.gravity}")
        if self.mass <= 0:
            raise ParameterError(f"mass must be > 0, got {self.mass}")
        if self.drag_coefficient < 0:
            raise ParameterError(f"drag_coefficient must be >= 0, got {self.drag_coefficient}")
        if self.start_height < 0:
            raise ParameterError(f"start_height must be >= 0, got {self.start_height}")

    def initial_velocity_vector(self) -> Tuple[float, float]:
        """Convert launch speed + angle to (vx, vy)."""
        theta = math.radians(self.angle)
        return (self.initial_velocity * math.cos(theta),
                self.initial_velocity * math.sin(theta))

    def initial_position(self) -> Tuple[float, float]:
        """Starting position (x, y)."""
        return 0.0, self.start_height

    def without_drag(self) -> 'PhysicsParameters':
        """Copy of these parameters with air resistance switched off."""
        return replace(self, air_resistance=False)

    def to_dict(self) -> dict:
        return {
            'angle': self.angle,
            'initial_velocity': self.initial_velocity,
            'gravity': self.gravity,
            'mass': self.mass,
            'air_resistance': self.air_resistance,
            'drag_coefficient': self.drag_coefficient,
            'start_height': self.start_height,
        }


@dataclass(frozen=True)
class _Obstacle:
    x: float       # centre of the obstacle, m downrange
    width: float   # horizontal extent, m

    def __post_init__(self):
        _require_finite('x', self.x)
        _require_finite('width', self.width)
        if self.width <= 0:
            raise ParameterError(f"obstacle width must be > 0, got {self.width}")

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    def spans(self, x: float) -> bool:
        """True if the horizontal position lies within the obstacle."""
        return self.left <= x <= self.right


@dataclass(frozen=True)
class Barrier(_Obstacle):
    """A vertical obstacle; the ball stops on contact below its top."""
    kind: ClassVar[ObstacleKind] = ObstacleKind.BARRIER
    height: float  # m; contact at or below this height stops the flight

    def __post_init__(self):
        super().__post_init__()
        _require_finite('height', self.height)
        if self.height <= 0:
            raise ParameterError(f"barrier height must be > 0, got {self.height}")

    def contact_fraction(self, x0: float, y0: float,
                         x1: float, y1: float) -> Optional[float]:
        """
        First point of contact along the straight step (x0, y0) → (x1, y1).

        Returns the fraction s in [0, 1] of the step at which the ball is
        first inside the span at or below the top, or None if the step
        never touches the barrier.
        """
        dx = x1 - x0
        if dx == 0:
            if not self.spans(x0):
                return None
            s_in, s_out = 0.0, 1.0
        else:
            s_in = (self.left - x0) / dx
            s_out = (self.right - x0) / dx
            if s_in > s_out:
                s_in, s_out = s_out, s_in
            s_in, s_out = max(s_in, 0.0), min(s_out, 1.0)
            if s_in > s_out:
                return None

        dy = y1 - y0
        if y0 + dy * s_in <= self.height:
            return s_in
        if y0 + dy * s_out <= self.height:
            # Descends onto the top inside the span
            return (self.height - y0) / dy
        return None


@dataclass(frozen=True)
class Depression(_Obstacle):
    """A hollow in the ground; a ball landing inside it stops dead."""
    kind: ClassVar[ObstacleKind] = ObstacleKind.DEPRESSION


Obstacle = Union[Barrier, Depression]
