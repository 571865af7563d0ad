"""
Unit Tests for the Playback Controller
======================================
Drives playback with a synthetic clock so every run is reproducible.
Run: python -m pytest tests/ -v
"""

import sys
import os
import logging
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from golf_trajectory.projectile import PhysicsParameters
from golf_trajectory.integrator import solve
from golf_trajectory.playback import (
    PlaybackController, PlaybackState, PlaybackStatus, tick,
    SLOW_MOTION_FACTOR,
)


IDEAL = PhysicsParameters(angle=45.0, initial_velocity=40.0, gravity=9.80665,
                          air_resistance=False)


class FakeClock:
    """Manually advanced wall clock (seconds)."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(clock):
    return PlaybackController(clock=clock)


class TestLaunch:

    def test_starts_idle(self, controller):
        state = controller.state
        assert state.status is PlaybackStatus.IDLE
        assert state.visible_prefix == ()
        assert (state.current_position.x, state.current_position.y) == (0.0, 0.0)

    def test_idle_rests_at_start_height(self, clock):
        c = PlaybackController(clock=clock, start_height=7.5)
        assert c.state.current_position.y == 7.5

    def test_launch_solves_and_flies(self, controller):
        assert controller.launch(IDEAL)
        state = controller.state
        assert state.status is PlaybackStatus.FLYING
        assert state.elapsed_sim_time == 0.0
        assert state.result == solve(IDEAL)
        assert state.visible_prefix == (state.result.samples[0],)

    def test_launch_rejected_while_flying(self, controller, caplog):
        controller.launch(IDEAL)
        before = controller.state
        with caplog.at_level(logging.WARNING, logger='golf_trajectory.playback'):
            assert controller.launch(PhysicsParameters()) is False
        assert controller.state is before
        assert 'Ignoring launch while flying' in caplog.text

    def test_launch_rejected_while_paused(self, controller):
        controller.launch(IDEAL)
        controller.pause()
        assert controller.launch(IDEAL) is False
        assert controller.status is PlaybackStatus.PAUSED

    def test_relaunch_after_finish(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(100.0)
        controller.tick()
        assert controller.status is PlaybackStatus.FINISHED
        assert controller.launch(PhysicsParameters())
        assert controller.status is PlaybackStatus.FLYING
        assert controller.state.elapsed_sim_time == 0.0


class TestTick:

    def test_interpolates_position(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(1.0)
        state = controller.tick()

        vx, vy = IDEAL.initial_velocity_vector()
        assert state.elapsed_sim_time == pytest.approx(1.0)
        assert state.current_position.x == pytest.approx(vx * 1.0)
        assert state.current_position.y == pytest.approx(vy - 0.5 * 9.80665, abs=1e-3)

    def test_visible_prefix(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(1.0)
        state = controller.tick()

        *drawn, last = state.visible_prefix
        assert all(p.t <= state.elapsed_sim_time for p in drawn)
        assert last == state.current_position
        n_due = sum(1 for p in state.result.samples if p.t <= state.elapsed_sim_time)
        assert len(drawn) == n_due

    def test_finishes_at_landing(self, controller, clock):
        controller.launch(IDEAL)
        result = controller.result
        clock.advance(result.flight_time + 0.5)
        state = controller.tick()

        assert state.status is PlaybackStatus.FINISHED
        assert state.elapsed_sim_time == result.flight_time
        assert state.current_position == result.samples[-1]
        assert state.visible_prefix == result.samples

    def test_finished_is_terminal(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(60.0)
        finished = controller.tick()
        clock.advance(1.0)
        assert controller.tick() is finished

    def test_clock_going_backwards_adds_nothing(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(0.5)
        controller.tick()
        clock.advance(-0.3)
        assert controller.tick().elapsed_sim_time == pytest.approx(0.5)

    def test_degenerate_shot_finishes_on_first_tick(self, controller, clock):
        controller.launch(PhysicsParameters(initial_velocity=0.0))
        clock.advance(0.016)
        state = controller.tick()
        assert state.status is PlaybackStatus.FINISHED
        assert len(state.visible_prefix) == 1

    def test_pure_tick_ignores_idle_state(self):
        state = PlaybackState.idle(2.0)
        assert tick(state, 10.0) is state

    @pytest.mark.parametrize('factor', [-3.0, -1e-9, float('nan'), float('inf')])
    def test_pure_tick_rejects_bad_time_factor(self, factor):
        state = tick(PlaybackState.launched(solve(IDEAL), now=0.0), 1.0)
        with pytest.raises(ValueError):
            tick(state, 1.5, factor)

    def test_zero_time_factor_freezes_flight(self):
        state = tick(PlaybackState.launched(solve(IDEAL), now=0.0), 1.0)
        frozen = tick(state, 5.0, 0.0)
        assert frozen.elapsed_sim_time == state.elapsed_sim_time
        assert frozen.current_position == state.current_position

    def test_replay_is_deterministic(self):
        deltas = [0.016, 0.017, 0.033, 0.001, 0.25, 0.016] * 10

        def run():
            result = solve(PhysicsParameters())
            state = PlaybackState.launched(result, now=100.0)
            now, positions = 100.0, []
            for i, d in enumerate(deltas):
                now += d
                state = tick(state, now, SLOW_MOTION_FACTOR if i % 7 == 0 else 1.0)
                positions.append(state.current_position)
            return positions

        assert run() == run()


class TestTransport:

    def test_pause_freezes_time(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(0.5)
        controller.tick()
        assert controller.pause()
        frozen = controller.state

        clock.advance(3.0)
        controller.tick()
        assert controller.state is frozen
        assert controller.status is PlaybackStatus.PAUSED
        assert controller.state.elapsed_sim_time == pytest.approx(0.5)

    def test_resume_rebases_clock(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(1.0)
        controller.tick()
        controller.pause()

        clock.advance(9.0)
        assert controller.resume()
        clock.advance(0.5)
        state = controller.tick()

        assert state.status is PlaybackStatus.FLYING
        assert state.elapsed_sim_time == pytest.approx(1.5)

    def test_invalid_pause_and_resume(self, controller):
        assert controller.pause() is False
        assert controller.resume() is False
        controller.launch(IDEAL)
        assert controller.resume() is False
        assert controller.status is PlaybackStatus.FLYING

    def test_slow_motion_scales_time(self, controller, clock):
        controller.set_slow_motion(True)
        controller.launch(IDEAL)
        clock.advance(1.0)
        assert controller.tick().elapsed_sim_time == pytest.approx(0.25)

    def test_time_factor_change_is_not_retroactive(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(1.0)
        controller.tick()
        controller.set_slow_motion(True)
        clock.advance(1.0)
        assert controller.tick().elapsed_sim_time == pytest.approx(1.25)
        controller.set_slow_motion(False)
        clock.advance(1.0)
        assert controller.tick().elapsed_sim_time == pytest.approx(2.25)

    def test_invalid_time_factor(self, controller):
        with pytest.raises(ValueError):
            controller.set_time_factor(0.0)

    def test_reset_cancels_playback(self, controller, clock):
        controller.launch(PhysicsParameters(start_height=6.0))
        clock.advance(0.3)
        controller.tick()
        controller.reset()

        state = controller.state
        assert state.status is PlaybackStatus.IDLE
        assert state.visible_prefix == ()
        assert state.result is None
        assert (state.current_position.x, state.current_position.y) == (0.0, 6.0)

        clock.advance(1.0)
        assert controller.tick() is state

    def test_reset_while_paused(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(0.5)
        controller.tick()
        controller.pause()
        controller.reset()

        assert controller.status is PlaybackStatus.IDLE
        assert controller.state.result is None
        assert controller.resume() is False
        assert controller.launch(IDEAL)
        assert controller.state.elapsed_sim_time == 0.0

    def test_reset_after_finish(self, controller, clock):
        controller.launch(PhysicsParameters(start_height=2.0))
        clock.advance(100.0)
        controller.tick()
        assert controller.status is PlaybackStatus.FINISHED
        controller.reset()

        state = controller.state
        assert state.status is PlaybackStatus.IDLE
        assert state.visible_prefix == ()
        assert (state.current_position.x, state.current_position.y) == (0.0, 2.0)

    def test_reset_with_new_start_height(self, controller):
        controller.reset(start_height=3.0)
        assert controller.state.current_position.y == 3.0

    def test_clear_path(self, controller, clock):
        controller.launch(IDEAL)
        clock.advance(1.0)
        controller.tick()
        controller.clear_path()
        state = controller.state
        assert state.visible_prefix == (state.current_position,)
        assert state.status is PlaybackStatus.FLYING

    def test_explicit_now_overrides_clock(self, clock):
        c = PlaybackController(clock=clock)
        c.launch(IDEAL, now=50.0)
        assert c.tick(now=50.75).elapsed_sim_time == pytest.approx(0.75)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
