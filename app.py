#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
SPH Fluid Canvas - Interactive Streamlit Application
================================================================================

Project:        Week 2 Project 1: SPH Fluid Canvas
Module:         app.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
Last Updated:   January 29, 2026

License:        MIT License
================================================================================

This is the main Streamlit application for the SPH Fluid Canvas.
Users can:
- Spawn water atoms on a grid or at random
- Tune every simulation parameter live while the fluid runs
- Toggle gravity and watch the fluid settle
- Monitor density, energy and simulation health

By default every tick advances by the fixed config.dt. With "Real-Time
Timestep" enabled, the wall-clock time since the previous rerun is split
across the ticks of that rerun instead.
"""

import streamlit as st
import numpy as np
import matplotlib.pyplot as plt
import time

from fluid_sim.simulation import (
    SPHSimulation, SimulationConfig, FrameClock, PARTICLE_RADIUS, max_grid_spacing
)
from fluid_sim.diagnostics import StabilityTracker, SimulationHealth
from fluid_sim.visualization import (
    VisualizationConfig, render_particles_streamlit, get_health_indicator_color
)


# Page configuration
st.set_page_config(
    page_title="SPH Fluid Canvas",
    page_icon="💧",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
.stApp {
    background-color: #0e1117;
}
.health-indicator {
    font-size: 24px;
    font-weight: bold;
    padding: 10px;
    border-radius: 8px;
    text-align: center;
    margin: 5px 0;
    color: white;
}
</style>
""", unsafe_allow_html=True)


def initialize_session_state():
    """Initialize Streamlit session state variables."""
    if 'config' not in st.session_state:
        st.session_state.config = SimulationConfig()
    if 'simulation' not in st.session_state:
        st.session_state.simulation = None
    if 'running' not in st.session_state:
        st.session_state.running = False
    if 'step_count' not in st.session_state:
        st.session_state.step_count = 0
    if 'energy_history' not in st.session_state:
        st.session_state.energy_history = {'time': [], 'kinetic': [], 'pressure': [], 'total': []}
    if 'tracker' not in st.session_state:
        st.session_state.tracker = StabilityTracker()
    if 'vis_config' not in st.session_state:
        st.session_state.vis_config = VisualizationConfig()
    if 'clock' not in st.session_state:
        st.session_state.clock = FrameClock()
    if 'realtime' not in st.session_state:
        st.session_state.realtime = False


def create_simulation(config: SimulationConfig, layout: str) -> SPHSimulation:
    """Spawn a new particle scene from the current configuration."""
    sim = SPHSimulation(config)

    if layout == "Grid":
        sim.initialize_grid()
    else:
        sim.initialize_random()

    return sim


def render_sidebar():
    """Render the sidebar with setup and live tuning controls."""
    config = st.session_state.config

    st.sidebar.title("💧 SPH Fluid Canvas")

    st.sidebar.markdown("""
    ---
    ### About This Simulation

    Each water atom samples the fluid density through a smoothing kernel:

    $$\\rho_i = \\sum_j m \\, W(r, |x_j - x_i|)$$

    Pressure pushes atoms out of over-dense regions and pulls them into
    sparse ones:

    $$P = (\\rho - \\rho_0) \\, k$$

    ---
    """)

    # Scene setup (applies on initialize)
    st.sidebar.subheader("⚙️ Scene Setup")

    config.particles_num = st.sidebar.slider(
        "Number of Particles",
        min_value=10, max_value=800, value=int(config.particles_num), step=1,
        help="Takes effect on the next initialization"
    )

    config.particles_spacing = st.sidebar.slider(
        "Grid Spacing",
        min_value=float(2.0 * PARTICLE_RADIUS), max_value=1.0,
        value=float(config.particles_spacing), step=0.01,
        help="Distance between atoms in the grid layout"
    )

    spacing_limit = max_grid_spacing(config.particles_num, config.half_extent)
    if config.particles_spacing > spacing_limit:
        st.sidebar.caption(
            f"Grid layout will use spacing {spacing_limit:.3f} to fit the bounds"
        )

    layout = st.sidebar.selectbox(
        "Layout",
        ["Grid", "Random"],
        help="Starting placement of the atoms"
    )

    if st.sidebar.button("🚀 Initialize Simulation", use_container_width=True):
        st.session_state.simulation = create_simulation(config, layout)
        st.session_state.step_count = 0
        st.session_state.energy_history = {'time': [], 'kinetic': [], 'pressure': [], 'total': []}
        st.session_state.tracker = StabilityTracker()
        st.session_state.running = False
        st.rerun()

    st.sidebar.markdown("---")

    # Live tuning (read at the start of every tick)
    st.sidebar.subheader("🎛️ Live Parameters")

    config.collision_damping = st.sidebar.slider(
        "Collision Damping",
        min_value=0.0, max_value=1.0, value=float(config.collision_damping), step=0.05,
        help="1 = perfectly elastic walls, 0 = no rebound"
    )

    config.smoothing_radius = st.sidebar.slider(
        "Smoothing Radius",
        min_value=0.2, max_value=3.0, value=float(config.smoothing_radius), step=0.05
    )

    config.target_density = st.sidebar.slider(
        "Target Density",
        min_value=0.0, max_value=10.0, value=float(config.target_density), step=0.05
    )

    config.pressure_multiplier = st.sidebar.slider(
        "Pressure Multiplier",
        min_value=0.0, max_value=20.0, value=float(config.pressure_multiplier), step=0.1
    )

    config.gravity_enabled = st.sidebar.checkbox(
        "Enable Gravity", value=bool(config.gravity_enabled)
    )

    config.gravity = st.sidebar.slider(
        "Gravity",
        min_value=0.0, max_value=30.0, value=float(config.gravity), step=0.5,
        disabled=not config.gravity_enabled
    )

    bounds_w = st.sidebar.slider(
        "Bounds Width",
        min_value=1.0, max_value=30.0, value=float(config.bounds_size[0]), step=0.1
    )
    bounds_h = st.sidebar.slider(
        "Bounds Height",
        min_value=1.0, max_value=20.0, value=float(config.bounds_size[1]), step=0.1
    )
    config.bounds_size = (bounds_w, bounds_h)

    config.include_self_in_pressure = st.sidebar.checkbox(
        "Include Self in Pressure Sum", value=bool(config.include_self_in_pressure)
    )

    st.session_state.realtime = st.sidebar.checkbox(
        "Real-Time Timestep", value=bool(st.session_state.realtime),
        help="Advance by measured wall-clock time instead of a fixed dt"
    )

    config.dt = st.sidebar.slider(
        "Fixed Timestep",
        min_value=0.001, max_value=0.05, value=float(config.dt), step=0.001,
        format="%.3f", disabled=st.session_state.realtime
    )

    st.sidebar.markdown("---")

    # Visualization Options
    st.sidebar.subheader("🎨 Visualization")

    st.session_state.vis_config.color_by = st.sidebar.selectbox(
        "Color By",
        ["density", "speed", "uniform"],
        help="What property determines particle color"
    )

    st.session_state.vis_config.show_velocities = st.sidebar.checkbox(
        "Show Velocity Arrows",
        value=False
    )


def run_simulation_step(n_steps: int = 1, dt: float = None):
    """Run simulation for n steps and update history."""
    sim = st.session_state.simulation
    if sim is None:
        return

    for _ in range(n_steps):
        sim.step(dt)
        st.session_state.step_count += 1

    state = sim.state
    history = st.session_state.energy_history
    history['time'].append(state.time)
    history['kinetic'].append(state.kinetic_energy)
    history['pressure'].append(state.pressure_energy)
    history['total'].append(state.total_energy)

    st.session_state.tracker.update(state.time, state.total_energy, sim.check_health())

    # Keep history limited
    max_history = 500
    if len(history['time']) > max_history:
        for key in history:
            history[key] = history[key][-max_history:]


def render_health_indicator(status: SimulationHealth):
    """Render a colored health badge."""
    color = get_health_indicator_color(status.value)
    st.markdown(f"""
    <div class="health-indicator" style="background-color: {color};">
        {status.value.upper()}
    </div>
    """, unsafe_allow_html=True)


def render_main_content():
    """Render the main simulation content."""
    sim = st.session_state.simulation

    if sim is None:
        st.title("💧 SPH Fluid Canvas")
        st.markdown("""
        ## Welcome to the SPH Fluid Canvas!

        A 2D water simulation built from **smoothed-particle hydrodynamics**.
        Hundreds of water atoms estimate the local density around them and
        push or pull each other towards a target density.

        ### 🚀 Getting Started:
        1. Choose a particle count and layout in the sidebar
        2. Click **Initialize Simulation**
        3. Press **Run** and tune parameters while it runs
        4. Enable gravity to watch the fluid fall and settle

        ---
        *👈 Use the sidebar to begin!*
        """)
        return

    col1, col2 = st.columns([2, 1])

    with col1:
        st.subheader("Fluid")

        btn_col1, btn_col2, btn_col3, btn_col4 = st.columns(4)

        with btn_col1:
            run_label = "▶️ Run" if not st.session_state.running else "⏸️ Pause"
            if st.button(run_label, use_container_width=True, key="run_pause_btn"):
                st.session_state.running = not st.session_state.running
                st.rerun()

        with btn_col2:
            if st.button("⏭️ Step (x10)", use_container_width=True):
                run_simulation_step(10)

        with btn_col3:
            if st.button("🔄 Reset", use_container_width=True):
                st.session_state.simulation = None
                st.session_state.running = False
                st.rerun()

        with btn_col4:
            st.metric("Steps", st.session_state.step_count)

        if st.session_state.running:
            if st.session_state.realtime:
                elapsed = st.session_state.clock.tick()
                run_simulation_step(2, dt=elapsed / 2.0)
            else:
                run_simulation_step(2)
        else:
            st.session_state.clock.reset()

        state = sim.state
        img_bytes = render_particles_streamlit(
            state.positions,
            state.velocities,
            state.densities,
            sim.config.bounds_size,
            sim.config.target_density,
            st.session_state.vis_config
        )
        st.image(img_bytes, use_container_width=True)

    with col2:
        st.subheader("Diagnostics")

        report = sim.check_health()

        st.markdown("### Health")
        render_health_indicator(report.status)
        st.caption(report.description)

        met1, met2 = st.columns(2)
        with met1:
            st.metric("Mean Density", f"{report.mean_density:.3f}")
        with met2:
            st.metric("Max Density Error", f"{report.max_density_error * 100:.1f}%")

        met3, met4 = st.columns(2)
        with met3:
            st.metric("Max Speed", f"{report.max_speed:.2f}")
        with met4:
            st.metric("Steps / s", f"{sim.steps_per_second:.1f}")

        st.metric("Total Energy", f"{sim.state.total_energy:.3f}")

        history = st.session_state.energy_history
        if len(history['time']) > 1:
            st.markdown("### Energy History")
            fig, ax = plt.subplots(figsize=(6, 3))
            ax.plot(history['time'], history['kinetic'], 'r-', label='KE', linewidth=1)
            ax.plot(history['time'], history['pressure'], 'b-', label='Pressure', linewidth=1)
            ax.plot(history['time'], history['total'], 'w-', label='Total', linewidth=1.5)
            ax.set_xlabel('Time (s)')
            ax.set_ylabel('Energy')
            ax.legend(fontsize=8)
            ax.set_facecolor('#1a1a2e')
            fig.patch.set_facecolor('#1a1a2e')
            ax.tick_params(colors='white')
            ax.xaxis.label.set_color('white')
            ax.yaxis.label.set_color('white')
            for spine in ax.spines.values():
                spine.set_color('white')
            plt.tight_layout()
            st.pyplot(fig)
            plt.close()

        if len(state.densities) > 0 and state.step > 0:
            st.markdown("### Density Distribution")
            fig, ax = plt.subplots(figsize=(6, 3))
            ax.hist(state.densities[np.isfinite(state.densities)], bins=30, color='#3b82f6')
            ax.axvline(sim.config.target_density, color='red', linestyle='--')
            ax.set_xlabel('Density')
            plt.tight_layout()
            st.pyplot(fig)
            plt.close()

    if st.session_state.running:
        time.sleep(0.02)
        st.rerun()


def main():
    """Main application entry point."""
    initialize_session_state()
    render_sidebar()
    render_main_content()


if __name__ == "__main__":
    main()
