"""
Playback Controller
===================
Replays a precomputed TrajectoryResult against a wall clock.

The flight is solved once at launch; each animation frame then maps the
elapsed real time (optionally slowed down) onto the stored samples by
linear interpolation. Frame rate therefore never changes the path.

    idle ──launch──▶ flying ──tick──▶ finished
                      │  ▲
                 pause│  │resume
                      ▼  │
                     paused

`reset` returns any state to idle.
"""

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .integrator import SamplePoint, TrajectoryResult, solve, DEFAULT_SAMPLE_INTERVAL
from .projectile import PhysicsParameters, Obstacle

logger = logging.getLogger(__name__)


NORMAL_TIME_FACTOR = 1.0
SLOW_MOTION_FACTOR = 0.25


class PlaybackStatus(Enum):
    IDLE = "idle"
    FLYING = "flying"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of one playback; replaced, never mutated, on every tick."""
    status: PlaybackStatus
    elapsed_sim_time: float
    visible_prefix: Tuple[SamplePoint, ...]
    current_position: SamplePoint
    result: Optional[TrajectoryResult] = None
    last_wall_time: float = 0.0

    @classmethod
    def idle(cls, start_height: float = 0.0) -> 'PlaybackState':
        """Ball resting on the tee, nothing drawn."""
        return cls(
            status=PlaybackStatus.IDLE,
            elapsed_sim_time=0.0,
            visible_prefix=(),
            current_position=SamplePoint(0.0, start_height, 0.0),
        )

    @classmethod
    def launched(cls, result: TrajectoryResult, now: float) -> 'PlaybackState':
        first = result.samples[0]
        return cls(
            status=PlaybackStatus.FLYING,
            elapsed_sim_time=0.0,
            visible_prefix=(first,),
            current_position=first,
            result=result,
            last_wall_time=now,
        )


def tick(state: PlaybackState, now: float,
         time_factor: float = NORMAL_TIME_FACTOR) -> PlaybackState:
    """
    Advance a flying playback to wall-clock time `now` (seconds).

    The wall time elapsed since the previous tick is scaled by
    `time_factor` and added to the simulated time. States that are not
    flying are returned unchanged. A negative or non-finite
    `time_factor` raises ValueError.
    """
    if time_factor < 0 or not np.isfinite(time_factor):
        raise ValueError(f"time factor must be >= 0 and finite, got {time_factor}")
    if state.status is not PlaybackStatus.FLYING or state.result is None:
        return state

    wall_delta = max(now - state.last_wall_time, 0.0)
    elapsed = state.elapsed_sim_time + wall_delta * time_factor

    result = state.result
    samples = result.samples

    if elapsed >= result.final_stats.flight_time:
        return replace(
            state,
            status=PlaybackStatus.FINISHED,
            elapsed_sim_time=result.final_stats.flight_time,
            visible_prefix=samples,
            current_position=samples[-1],
            last_wall_time=now,
        )

    # p1.t <= elapsed < p2.t
    i = int(np.searchsorted(result.time, elapsed, side='right')) - 1
    p1, p2 = samples[i], samples[i + 1]
    frac = (elapsed - p1.t) / (p2.t - p1.t)
    current = SamplePoint(
        p1.x + (p2.x - p1.x) * frac,
        p1.y + (p2.y - p1.y) * frac,
        elapsed,
    )

    visible = samples[:i + 1]
    if (current.x, current.y) != (p1.x, p1.y):
        visible = visible + (current,)

    return replace(
        state,
        elapsed_sim_time=elapsed,
        visible_prefix=visible,
        current_position=current,
        last_wall_time=now,
    )


class PlaybackController:
    """
    Owns the active playback and applies transport commands to it.

    Every command accepts an explicit `now`; when omitted the injected
    clock (seconds, monotonic) is read instead.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter,
                 start_height: float = 0.0):
        self._clock = clock
        self._start_height = start_height
        self.time_factor = NORMAL_TIME_FACTOR
        self.state = PlaybackState.idle(start_height)

    @property
    def status(self) -> PlaybackStatus:
        return self.state.status

    @property
    def result(self) -> Optional[TrajectoryResult]:
        return self.state.result

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def _reject(self, command: str) -> bool:
        logger.warning("Ignoring %s while %s", command, self.state.status.value)
        return False

    def launch(self, params: PhysicsParameters, obstacles: Sequence[Obstacle] = (),
               now: Optional[float] = None,
               sample_interval: float = DEFAULT_SAMPLE_INTERVAL) -> bool:
        """Solve the shot and start playing it from t = 0."""
        if self.state.status not in (PlaybackStatus.IDLE, PlaybackStatus.FINISHED):
            return self._reject('launch')

        result = solve(params, obstacles, sample_interval)
        return self.play(result, now)

    def play(self, result: TrajectoryResult, now: Optional[float] = None) -> bool:
        """Start playing an already solved shot from t = 0."""
        if self.state.status not in (PlaybackStatus.IDLE, PlaybackStatus.FINISHED):
            return self._reject('play')

        self._start_height = result.params.start_height
        self.state = PlaybackState.launched(result, self._now(now))
        logger.info("Launched: %.2f m in %.2f s (%s)",
                    result.final_stats.horizontal_distance,
                    result.final_stats.flight_time, result.method)
        return True

    def pause(self) -> bool:
        if self.state.status is not PlaybackStatus.FLYING:
            return self._reject('pause')
        self.state = replace(self.state, status=PlaybackStatus.PAUSED)
        return True

    def resume(self, now: Optional[float] = None) -> bool:
        """Continue a paused flight; time spent paused is not replayed."""
        if self.state.status is not PlaybackStatus.PAUSED:
            return self._reject('resume')
        self.state = replace(self.state, status=PlaybackStatus.FLYING,
                             last_wall_time=self._now(now))
        return True

    def reset(self, start_height: Optional[float] = None) -> None:
        """Abandon any playback and put the ball back on the tee."""
        if start_height is not None:
            self._start_height = start_height
        self.state = PlaybackState.idle(self._start_height)

    def set_time_factor(self, factor: float) -> None:
        """Takes effect from the next tick; elapsed time is not rescaled."""
        if not factor > 0:
            raise ValueError(f"time factor must be > 0, got {factor}")
        self.time_factor = factor

    def set_slow_motion(self, enabled: bool) -> None:
        self.set_time_factor(SLOW_MOTION_FACTOR if enabled else NORMAL_TIME_FACTOR)

    def clear_path(self) -> None:
        """Drop the drawn path, keeping only the ball's current position."""
        self.state = replace(self.state, visible_prefix=(self.state.current_position,))

    def tick(self, now: Optional[float] = None) -> PlaybackState:
        was_flying = self.state.status is PlaybackStatus.FLYING
        self.state = tick(self.state, self._now(now), self.time_factor)
        if was_flying and self.state.status is PlaybackStatus.FINISHED:
            logger.debug("Playback finished at t=%.3f s", self.state.elapsed_sim_time)
        return self.state
