from __future__ import annotations

import logging
import time
from typing import List

import plotly.graph_objects as go
import streamlit as st

from pendulum_sim.config import SimulationConfig
from pendulum_sim.physics import compute_energy_fraction, project_to_screen
from pendulum_sim.sim_session import SimulationSession
from pendulum_sim.state import PendulumState, SimulationControls

CANVAS_WIDTH = 600
CANVAS_HEIGHT = 500
GAUGE_HEIGHT = 100.0


def _ensure_session() -> SimulationSession:
    if "sim" not in st.session_state:
        st.session_state.sim = SimulationSession()
    if "last_time" not in st.session_state:
        st.session_state.last_time = time.time()
    return st.session_state.sim


def _update_params_from_sidebar(sim: SimulationSession) -> None:
    state, controls = sim.snapshot()
    cfg = sim.config

    length = st.sidebar.slider(
        "String Length (m)",
        min_value=cfg.length_range[0], max_value=cfg.length_range[1], value=float(state.length), step=0.1, format="%.1f",
    )
    mass = st.sidebar.slider(
        "Mass (kg)",
        min_value=cfg.mass_range[0], max_value=cfg.mass_range[1], value=float(state.mass), step=0.1, format="%.1f",
    )
    damping = st.sidebar.slider(
        "Air Resistance (%)",
        min_value=cfg.damping_range[0], max_value=cfg.damping_range[1], value=float(controls.damping), step=1.0, format="%.1f",
    )
    gravity = st.sidebar.slider(
        "Gravity (m/s²)",
        min_value=cfg.gravity_range[0], max_value=cfg.gravity_range[1], value=float(controls.gravity), step=0.1, format="%.2f",
    )

    # only touch the session on a real change, setters drop the energy reference
    if length != state.length:
        sim.set_length(length)
    if mass != state.mass:
        sim.set_mass(mass)
    if damping != controls.damping:
        sim.set_damping(damping)
    if gravity != controls.gravity:
        sim.set_gravity(gravity)


def _trail_opacities(count: int) -> List[float]:
    # oldest points fade out
    if count <= 1:
        return [0.6] * count
    return [0.05 + 0.55 * i / (count - 1) for i in range(count)]


def _build_figure(state: PendulumState, controls: SimulationControls, config: SimulationConfig) -> go.Figure:
    pivot_x, pivot_y = config.pivot
    bob_x, bob_y = project_to_screen(state.angle, state.length, config)

    fig = go.Figure()

    # trail
    if controls.show_trail and len(state.trail) > 1:
        trail_x = [p[0] for p in state.trail]
        trail_y = [p[1] for p in state.trail]
        fig.add_trace(go.Scatter(
            x=trail_x, y=trail_y, mode="lines+markers",
            line=dict(color="rgba(59,130,246,0.15)", width=3, shape="spline"),
            marker=dict(size=4, color="#3b82f6", opacity=_trail_opacities(len(trail_x))),
            hoverinfo="skip", showlegend=False,
        ))

    # string
    fig.add_trace(go.Scatter(x=[pivot_x, bob_x], y=[pivot_y, bob_y], mode="lines", line=dict(color="#334155", width=2), hoverinfo="skip", showlegend=False))

    # bob, radius grows with mass
    fig.add_trace(go.Scatter(
        x=[bob_x], y=[bob_y], mode="markers",
        marker=dict(size=2 * state.mass * 25, color="#3b82f6", line=dict(color="#1d4ed8", width=2)),
        hoverinfo="skip", showlegend=False,
    ))

    # pivot
    fig.add_trace(go.Scatter(x=[pivot_x], y=[pivot_y], mode="markers", marker=dict(size=16, color="#1e3a8a"), hoverinfo="skip", showlegend=False))

    # mount and energy gauge
    energy_height = compute_energy_fraction(state, controls.gravity) * GAUGE_HEIGHT
    gauge_bottom = CANVAS_HEIGHT - 20
    fig.add_shape(type="rect", x0=pivot_x - 40, y0=0, x1=pivot_x + 40, y1=pivot_y - 10, fillcolor="#475569", line_width=0)
    fig.add_shape(type="rect", x0=20, y0=gauge_bottom - GAUGE_HEIGHT, x1=40, y1=gauge_bottom, fillcolor="rgba(59,130,246,0.1)", line_width=0)
    fig.add_shape(type="rect", x0=20, y0=gauge_bottom - energy_height, x1=40, y1=gauge_bottom, fillcolor="#1d4ed8", line_width=0)
    fig.add_annotation(x=25, y=gauge_bottom - GAUGE_HEIGHT - 10, text="Energy", showarrow=False, font=dict(size=12, color="#1e3a8a"))

    fig.update_layout(
        template="plotly_white",
        width=CANVAS_WIDTH,
        height=CANVAS_HEIGHT,
        margin=dict(l=0, r=0, t=0, b=0),
        xaxis=dict(range=[0, CANVAS_WIDTH], showgrid=True, gridcolor="rgba(240,240,240,0.8)", dtick=40, zeroline=False, showticklabels=False),
        # screen space: y grows downwards
        yaxis=dict(range=[CANVAS_HEIGHT, 0], showgrid=True, gridcolor="rgba(240,240,240,0.8)", dtick=40, zeroline=False, showticklabels=False, scaleanchor="x", scaleratio=1.0),
        dragmode=False,
    )
    return fig


def _info_lines(sim: SimulationSession) -> List[str]:
    return [
        f"Period ≈ {sim.period():.2f} seconds",
        f"Max Speed ≈ {sim.max_speed():.2f} m/s",
    ]


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    st.set_page_config(page_title="Pendulum Simulator", layout="wide")
    sim = _ensure_session()

    st.title("Interactive Pendulum Simulator")

    _update_params_from_sidebar(sim)

    _, controls = sim.snapshot()
    col_a, col_b, col_c, col_d = st.columns([1, 1, 1, 1])
    with col_a:
        if st.button("Pause" if controls.is_running else "Start", type="primary"):
            if sim.toggle_running():
                st.session_state.last_time = time.time()
    with col_b:
        if st.button("Reset"):
            sim.reset()
            st.session_state.last_time = time.time()
    with col_c:
        if st.button("Trail", type="primary" if controls.show_trail else "secondary"):
            sim.toggle_trail()
    with col_d:
        if st.button("Clear Trail"):
            sim.clear_trail()

    # step simulation once per rerun when running
    now = time.time()
    dt = max(0.0, now - float(st.session_state.get("last_time", now)))
    st.session_state.last_time = now
    state, controls = sim.snapshot()
    if controls.is_running:
        sim.tick(min(dt, sim.config.max_frame_dt))
        state, controls = sim.snapshot()

    fig = _build_figure(state, controls, sim.config)
    st.plotly_chart(fig, use_container_width=False, config={"staticPlot": True, "displayModeBar": False})

    st.subheader("Physics Information")
    for line in _info_lines(sim):
        st.write(line)
    if sim.last_error:
        st.warning(f"Tick skipped: {sim.last_error}")

    with st.expander("Details (State)", expanded=False):
        st.write({
            "angle": state.angle,
            "angular_velocity": state.angular_velocity,
            "energy": sim.energy(),
            "energy_drift": sim.energy_drift,
            "sim_time": sim.sim_time,
            "trail_len": len(state.trail),
        })

    if controls.is_running:
        time.sleep(0.03)
        st.rerun()


if __name__ == "__main__":
    main()
