"""
Visualization Engine
====================
Plots for shot analysis:
  1. Trajectory (height vs distance) with obstacles and aiming arc
  2. Drag comparison (same shot with and without air resistance)
  3. Analytical vs numerical method comparison
  4. Dashboard with key metrics
  5. Validation error chart
  6. Animated playback (saved as GIF), driven by PlaybackController
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec
from matplotlib.patches import Rectangle
from typing import Dict, List, Optional, Sequence
import os

from .integrator import TrajectoryResult, SamplePoint
from .projectile import Barrier, Depression
from .playback import PlaybackController, PlaybackStatus, NORMAL_TIME_FACTOR


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
    'font_family': 'monospace',
}

LEGEND_KW = dict(facecolor='#1a1a1a', edgecolor='#444', labelcolor=STYLE['text_color'])


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _save(fig, save_path):
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


def sample_speeds(result: TrajectoryResult) -> np.ndarray:
    """Speed at each sample, by finite differences of the positions."""
    if len(result.samples) < 2:
        return np.zeros(len(result.samples))
    t = result.time
    vx = np.gradient(result.x, t)
    vy = np.gradient(result.y, t)
    return np.hypot(vx, vy)


def _draw_obstacles(ax, obstacles):
    for obs in obstacles:
        if isinstance(obs, Barrier):
            ax.add_patch(Rectangle((obs.left, 0), obs.width, obs.height,
                                   color='#2e7d32', alpha=0.8, zorder=3))
        elif isinstance(obs, Depression):
            ax.add_patch(Rectangle((obs.left, -0.6), obs.width, 0.6,
                                   color='#d7b46a', alpha=0.8, zorder=3))


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Trajectory Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: TrajectoryResult,
                    aiming_arc: Optional[Sequence[SamplePoint]] = None,
                    save_path: str = None, show: bool = False) -> plt.Figure:
    """Height vs distance for a single shot."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    if aiming_arc:
        ax.plot([p.x for p in aiming_arc], [p.y for p in aiming_arc],
                ':', color='#888888', linewidth=1.5, label='Aiming arc (no drag)')

    ax.plot(result.x, result.y, color=STYLE['accent_colors'][0], linewidth=2.5,
            label=f'{result.method} path')
    _draw_obstacles(ax, result.obstacles)

    s = result.final_stats
    ax.plot(0, result.y[0], 'o', color='#00e676', markersize=10,
            label='Tee', zorder=5)
    ax.plot(result.landing_point.x, result.landing_point.y, 'x',
            color='#ff5252', markersize=12, markeredgewidth=3,
            label='Stop' if s.collision_kind else 'Landing', zorder=5)
    ax.plot(s.max_height_point.x, s.max_height_point.y, '^',
            color='#ffeb3b', markersize=10, label='Apex', zorder=5)

    p = result.params
    ax.set_xlabel('Distance (m)', fontsize=12)
    ax.set_ylabel('Height (m)', fontsize=12)
    ax.set_title(f'Shot Trajectory — v₀={p.initial_velocity:.1f} m/s, '
                 f'θ={p.angle:.0f}°, drag {"on" if p.air_resistance else "off"}',
                 fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, **LEGEND_KW)
    ax.set_ylim(bottom=-1)
    ax.set_xlim(left=0)

    plt.tight_layout()
    _save(fig, save_path)
    if show:
        plt.show()
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Drag Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_drag_comparison(results: Dict[str, TrajectoryResult],
                         save_path: str = None) -> plt.Figure:
    """Overlay several shots (e.g. different drag coefficients)."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 6))
    _apply_dark_style(fig, axes)

    for (label, r), color in zip(results.items(), STYLE['accent_colors']):
        axes[0].plot(r.x, r.y, color=color, linewidth=2, label=label)
        axes[1].plot(r.time, sample_speeds(r), color=color, linewidth=2, label=label)

    axes[0].set_xlabel('Distance (m)')
    axes[0].set_ylabel('Height (m)')
    axes[0].set_title('Trajectories', fontweight='bold')
    axes[0].set_ylim(bottom=0)
    axes[0].legend(fontsize=10, **LEGEND_KW)

    axes[1].set_xlabel('Time (s)')
    axes[1].set_ylabel('Speed (m/s)')
    axes[1].set_title('Speed vs Time', fontweight='bold')
    axes[1].legend(fontsize=10, **LEGEND_KW)

    fig.suptitle('Effect of Air Resistance', fontsize=14, fontweight='bold',
                 color=STYLE['text_color'], y=1.02)
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Analytical vs Numerical
# ══════════════════════════════════════════════════════════════════════════

def plot_method_comparison(analytical: TrajectoryResult,
                           numerical: TrajectoryResult,
                           save_path: str = None) -> plt.Figure:
    """Compare the closed-form path with the integrated one."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 5))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(analytical.x, analytical.y, color='#00d4ff', linewidth=2,
            label='Analytical')
    ax.plot(numerical.x, numerical.y, color='#ff6b35', linewidth=2,
            linestyle='--', label='Numerical (Euler)')
    ax.set_xlabel('Distance (m)')
    ax.set_ylabel('Height (m)')
    ax.set_title('Trajectory Comparison', fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_KW)
    ax.set_ylim(bottom=0)

    ax = axes[1]
    ax.axis('off')
    ax.set_facecolor('#111111')
    a, n = analytical.final_stats, numerical.final_stats
    rows = [
        ('Distance (m)', a.horizontal_distance, n.horizontal_distance),
        ('Max height (m)', a.max_height, n.max_height),
        ('Flight time (s)', a.flight_time, n.flight_time),
        ('Impact speed (m/s)', a.impact_speed, n.impact_speed),
    ]
    text_lines = [
        f"{'Metric':<20} {'Analytical':>11} {'Numerical':>11} {'Δ':>9}",
        f"{'─'*54}",
    ]
    text_lines += [f"{name:<20} {av:>11.3f} {nv:>11.3f} {nv - av:>+9.4f}"
                   for name, av, nv in rows]
    ax.text(0.05, 0.85, '\n'.join(text_lines), transform=ax.transAxes,
            fontsize=10, fontfamily='monospace', color=STYLE['text_color'],
            verticalalignment='top')
    ax.set_title('Numerical Comparison', fontweight='bold',
                 color=STYLE['text_color'])

    fig.suptitle('Analytical vs Numerical Integration', fontsize=14,
                 fontweight='bold', color=STYLE['text_color'], y=1.02)
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Dashboard
# ══════════════════════════════════════════════════════════════════════════

def plot_dashboard(result: TrajectoryResult, save_path: str = None) -> plt.Figure:
    """Trajectory, flight data panel and time histories on one figure."""
    fig = plt.figure(figsize=(18, 10))
    fig.patch.set_facecolor(STYLE['bg_color'])

    gs = gridspec.GridSpec(2, 3, figure=fig, hspace=0.35, wspace=0.3)
    s = result.final_stats
    p = result.params

    # ── Trajectory (top, spans 2 cols) ──
    ax1 = fig.add_subplot(gs[0, :2])
    _apply_dark_style(fig, ax1)
    ax1.plot(result.x, result.y, color='#00d4ff', linewidth=2.5)
    _draw_obstacles(ax1, result.obstacles)
    ax1.plot(s.max_height_point.x, s.max_height_point.y, '^',
             color='#ffeb3b', markersize=12)
    ax1.plot(result.landing_point.x, result.landing_point.y, 'x',
             color='#ff5252', markersize=14, markeredgewidth=3)
    ax1.set_xlabel('Distance (m)')
    ax1.set_ylabel('Height (m)')
    ax1.set_title('TRAJECTORY', fontweight='bold', fontsize=13)
    ax1.set_ylim(bottom=-1)

    # ── Metrics panel (top-right) ──
    ax_info = fig.add_subplot(gs[0, 2])
    ax_info.set_facecolor('#111111')
    ax_info.axis('off')

    metrics = [
        ('LAUNCH', f'{p.initial_velocity:.1f} m/s @ {p.angle:.0f}°'),
        ('DISTANCE', f'{s.horizontal_distance:.2f} m'),
        ('MAX HEIGHT', f'{s.max_height:.2f} m'),
        ('APEX AT', f'{s.horizontal_distance_to_max_height:.1f} m / {s.time_to_max_height:.2f} s'),
        ('FLIGHT TIME', f'{s.flight_time:.2f} s'),
        ('IMPACT VEL', f'{s.impact_speed:.2f} m/s'),
        ('STOPPED BY', s.collision_kind.value.upper() if s.collision_kind else 'GROUND'),
        ('METHOD', result.method.upper()),
    ]

    for i, (label, value) in enumerate(metrics):
        y_pos = 0.92 - i * 0.115
        ax_info.text(0.05, y_pos, label, fontsize=10, fontweight='bold',
                     color='#888888', transform=ax_info.transAxes, fontfamily='monospace')
        ax_info.text(0.95, y_pos, value, fontsize=11, fontweight='bold',
                     color='#00d4ff', transform=ax_info.transAxes,
                     ha='right', fontfamily='monospace')

    ax_info.set_title('FLIGHT DATA', fontweight='bold',
                      color=STYLE['text_color'], fontsize=13, pad=10)

    # ── Speed vs time ──
    ax2 = fig.add_subplot(gs[1, 0])
    _apply_dark_style(fig, ax2)
    ax2.plot(result.time, sample_speeds(result), color='#ff6b35', linewidth=2)
    ax2.set_xlabel('Time (s)')
    ax2.set_ylabel('Speed (m/s)')
    ax2.set_title('SPEED', fontweight='bold')

    # ── Height vs time ──
    ax3 = fig.add_subplot(gs[1, 1])
    _apply_dark_style(fig, ax3)
    ax3.plot(result.time, result.y, color='#ffeb3b', linewidth=2)
    ax3.set_xlabel('Time (s)')
    ax3.set_ylabel('Height (m)')
    ax3.set_title('HEIGHT', fontweight='bold')

    # ── Distance vs time ──
    ax4 = fig.add_subplot(gs[1, 2])
    _apply_dark_style(fig, ax4)
    ax4.plot(result.time, result.x, color='#00e676', linewidth=2)
    ax4.set_xlabel('Time (s)')
    ax4.set_ylabel('Distance (m)')
    ax4.set_title('DOWNRANGE', fontweight='bold')

    fig.suptitle('GOLF SHOT DASHBOARD', fontsize=16, fontweight='bold',
                 color='#00d4ff', y=0.98)
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  5. Validation Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_validation(validation_results, title: str = 'Validation',
                    save_path: str = None) -> plt.Figure:
    """Bar chart of range / height errors per validation case."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    names = [v.name for v in validation_results]
    idx = np.arange(len(names))
    range_err = [v.range_error_pct for v in validation_results]
    alt_err = [v.alt_error_pct for v in validation_results]

    ax.bar(idx - 0.2, range_err, width=0.4, color='#00d4ff', label='Range error')
    ax.bar(idx + 0.2, alt_err, width=0.4, color='#ffeb3b', label='Height error')
    ax.axhline(y=0, color='#888', linewidth=0.5)
    ax.set_xticks(idx)
    ax.set_xticklabels(names, rotation=15, ha='right')
    ax.set_ylabel('Error (%)')
    ax.set_title(title, fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_KW)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  6. Animated Playback (GIF)
# ══════════════════════════════════════════════════════════════════════════

def playback_frames(result: TrajectoryResult, fps: int = 20,
                    time_factor: float = NORMAL_TIME_FACTOR) -> List:
    """
    Replay a solved shot through PlaybackController at a fixed frame rate.

    Returns the PlaybackState of every frame, the last one finished.
    """
    clock = [0.0]
    controller = PlaybackController(clock=lambda: clock[0],
                                    start_height=result.params.start_height)
    controller.set_time_factor(time_factor)
    controller.play(result)

    frames = [controller.state]
    while controller.status is PlaybackStatus.FLYING:
        clock[0] += 1.0 / fps
        frames.append(controller.tick())
    return frames


def create_trajectory_animation(result: TrajectoryResult,
                                save_path: str = 'outputs/trajectory_anim.gif',
                                fps: int = 20,
                                time_factor: float = NORMAL_TIME_FACTOR) -> str:
    """Create animated GIF of the playback with trail."""
    from matplotlib.animation import FuncAnimation, PillowWriter

    frames = playback_frames(result, fps=fps, time_factor=time_factor)

    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)
    _draw_obstacles(ax, result.obstacles)

    ax.set_xlim(0, max(result.x.max(), 1.0) * 1.05)
    ax.set_ylim(-1, max(result.y.max(), 1.0) * 1.15)
    ax.set_xlabel('Distance (m)', fontsize=12)
    ax.set_ylabel('Height (m)', fontsize=12)
    ax.set_title('Shot Playback', fontsize=14, fontweight='bold')

    trail_line, = ax.plot([], [], color='#00d4ff', linewidth=1.5, alpha=0.6)
    point, = ax.plot([], [], 'o', color='#ffffff', markersize=8)
    time_text = ax.text(0.02, 0.95, '', transform=ax.transAxes,
                        color=STYLE['text_color'], fontsize=11, fontfamily='monospace')

    def animate(frame_idx):
        state = frames[frame_idx]
        trail_line.set_data([p.x for p in state.visible_prefix],
                            [p.y for p in state.visible_prefix])
        pos = state.current_position
        point.set_data([pos.x], [pos.y])
        time_text.set_text(
            f't={state.elapsed_sim_time:.2f}s | x={pos.x:.1f} m | '
            f'y={pos.y:.1f} m | {state.status.value}'
        )
        return trail_line, point, time_text

    anim = FuncAnimation(fig, animate, frames=len(frames),
                         interval=1000 / fps, blit=True)
    anim.save(save_path, writer=PillowWriter(fps=fps),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    plt.close(fig)
    print(f"  Animation saved: {save_path}")
    return save_path
