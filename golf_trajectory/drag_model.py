"""
Aerodynamic Drag Model
======================
Quadratic air resistance for a golf ball in still air.

The drag force opposes the velocity and grows with its square:

    F_drag = -k |v| v,      k = ½ ρ A Cd

with a fixed sea-level air density and the regulation ball diameter.
Cd is supplied per shot (typical golf-ball values are 0.2–0.5).
"""

import numpy as np


# ── Fixed constants ────────────────────────────────────────────────────────
AIR_DENSITY    = 1.225     # kg/m³  (sea level, 15 °C)
BALL_DIAMETER  = 0.0427    # m      (regulation golf ball)


def cross_sectional_area(diameter: float = BALL_DIAMETER) -> float:
    """Frontal area of a sphere of the given diameter (m²)."""
    return np.pi * (diameter / 2) ** 2


def drag_constant(drag_coefficient: float, diameter: float = BALL_DIAMETER,
                  rho: float = AIR_DENSITY) -> float:
    """
    Lumped drag constant k = ½ ρ A Cd  (kg/m).

    Multiply by |v| v to obtain the drag force in newtons.
    """
    return 0.5 * rho * cross_sectional_area(diameter) * drag_coefficient


def drag_force(vx: float, vy: float, k: float) -> np.ndarray:
    """
    Compute aerodynamic drag force vector (N).

    Parameters
    ----------
    vx, vy : float
        Velocity components (m/s)
    k : float
        Drag constant from `drag_constant`

    Returns
    -------
    np.ndarray
        Drag force [Fx, Fy] (N)
    """
    v_mag = np.hypot(vx, vy)
    return np.array([-k * vx * v_mag, -k * vy * v_mag])


def acceleration(vx: float, vy: float, gravity: float, mass: float,
                 k: float = 0.0):
    """
    Total acceleration (ax, ay) from gravity plus drag.

    With k == 0 this reduces to pure gravity: (0, -g).
    """
    if k == 0.0:
        return 0.0, -gravity
    fx, fy = drag_force(vx, vy, k)
    return float(fx / mass), float(-gravity + fy / mass)
