#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
SPH Fluid Canvas - Command Line Interface
================================================================================

Project:        Week 2 Project 1: SPH Fluid Canvas
Module:         main.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
Last Updated:   January 29, 2026

License:        MIT License
================================================================================

Command line interface for running and testing the SPH Fluid Canvas
simulation.
"""

import argparse
import numpy as np
import matplotlib.pyplot as plt
import time

from fluid_sim.simulation import (
    SPHSimulation, SimulationConfig,
    create_grid_simulation, create_random_simulation
)
from fluid_sim.diagnostics import (
    SimulationHealth, StabilityTracker, calculate_density_field
)
from fluid_sim.visualization import (
    VisualizationConfig, render_particles_matplotlib,
    render_density_field, render_energy_plot, create_animation
)


def build_simulation(n_particles: int, layout: str, gravity: bool) -> SPHSimulation:
    """Create a grid or random simulation with the default parameters."""
    if layout == "random":
        return create_random_simulation(n_particles=n_particles, seed=0,
                                        gravity_enabled=gravity)
    return create_grid_simulation(n_particles=n_particles, gravity_enabled=gravity)


def run_stability_test(
    n_particles: int = 100,
    n_steps: int = 1000,
    layout: str = "grid",
    gravity: bool = False
):
    """
    Run a stability test to verify the simulation is working.

    Args:
        n_particles: Number of particles
        n_steps: Number of simulation steps
        layout: "grid" or "random"
        gravity: Whether gravity is enabled
    """
    print("=" * 60)
    print("SPH Fluid Canvas - Stability Test")
    print("=" * 60)

    print(f"\nInitializing {n_particles} particles ({layout} layout)...")
    sim = build_simulation(n_particles, layout, gravity)
    dt = sim.config.dt

    print(f"Running {n_steps} steps (dt = {dt:.4f} s)...")

    tracker = StabilityTracker(history_length=n_steps)
    kinetic_energies = []
    pressure_energies = []
    total_energies = []
    times = []

    t_start = time.time()

    for step in range(n_steps):
        state = sim.step()
        report = sim.check_health()

        change = tracker.update(state.time, state.total_energy, report)
        if change is not None:
            print(f"  t = {state.time:7.3f}: {change[0].value} -> {change[1].value}")

        if step % 10 == 0:
            kinetic_energies.append(state.kinetic_energy)
            pressure_energies.append(state.pressure_energy)
            total_energies.append(state.total_energy)
            times.append(state.time)

        if step % 100 == 0:
            print(f"  Step {step:5d}: ρ̄ = {report.mean_density:.3f}, "
                  f"v_max = {report.max_speed:.3f}, E = {state.total_energy:.3f}")

        if report.status == SimulationHealth.DIVERGED:
            print(f"  Simulation diverged at step {step}")
            break

    t_end = time.time()

    print(f"\nSimulation completed in {t_end - t_start:.2f} seconds")
    print(f"Steps per second: {(step + 1) / (t_end - t_start):.1f}")

    state = sim.state
    report = sim.check_health()

    print(f"\nFinal State:")
    print(f"  Health:            {report.status.value}")
    print(f"  Mean Density:      {report.mean_density:.4f}")
    print(f"  Max Density Error: {report.max_density_error * 100:.2f}%")
    print(f"  Max Speed:         {report.max_speed:.4f}")
    print(f"  Kinetic Energy:    {state.kinetic_energy:.4f}")
    print(f"  Pressure Energy:   {state.pressure_energy:.4f}")
    print(f"  Energy Variance:   {tracker.energy_variance():.6f}")

    if report.status == SimulationHealth.STABLE:
        print("  ✓ Simulation stayed stable")
    elif report.status == SimulationHealth.AGITATED:
        print("  ⚠ Particles are moving fast, consider a smaller timestep")
    else:
        print("  ✗ Simulation diverged, check the configuration")

    # Plot results
    fig, axes = plt.subplots(2, 2, figsize=(14, 9))

    render_energy_plot(
        np.array(times), np.array(kinetic_energies),
        np.array(pressure_energies), np.array(total_energies),
        ax=axes[0, 0]
    )

    ax = axes[0, 1]
    ax.hist(state.densities, bins=30, density=True, alpha=0.7, color='blue')
    ax.axvline(sim.config.target_density, color='red', linestyle='--', label='Target')
    ax.set_xlabel('Density')
    ax.set_ylabel('Probability Density')
    ax.set_title('Density Distribution')
    ax.legend()
    ax.grid(True, alpha=0.3)

    render_particles_matplotlib(
        state.positions, state.velocities, state.densities,
        sim.config.bounds_size, sim.config.target_density,
        VisualizationConfig(), ax=axes[1, 0]
    )
    axes[1, 0].set_title('Final Configuration')

    field = calculate_density_field(
        state.positions, sim.config.bounds_size, sim.config.smoothing_radius
    )
    render_density_field(
        field, sim.config.bounds_size, sim.config.target_density, ax=axes[1, 1]
    )

    plt.tight_layout()
    plt.savefig('stability_test.png', dpi=150)
    print(f"\nPlot saved to stability_test.png")
    plt.show()


def run_dam_break_demo(n_particles: int = 400, n_steps: int = 2000):
    """
    Drop a block of water into the container under gravity.

    Args:
        n_particles: Number of particles
        n_steps: Number of simulation steps
    """
    print("=" * 60)
    print("SPH Fluid Canvas - Dam Break Demonstration")
    print("=" * 60)

    config = SimulationConfig(particles_num=n_particles, gravity_enabled=True)
    sim = SPHSimulation(config)
    state = sim.initialize_grid()

    # Shift the block into the upper-left corner of the box
    half_x, half_y = config.half_extent
    state.positions[:, 0] += -half_x - state.positions[:, 0].min()
    state.positions[:, 1] += half_y - state.positions[:, 1].max()

    print(f"\nReleasing {n_particles} particles with g = {config.gravity}...")

    snapshots = []
    snapshot_steps = set(np.linspace(0, n_steps - 1, 4).astype(int))

    for step in range(n_steps):
        sim.step()

        if step in snapshot_steps:
            snapshots.append((step, sim.state.copy()))

        if step % 250 == 0:
            report = sim.check_health()
            print(f"  Step {step:5d}: {report.description}")

    fig, axes = plt.subplots(2, 2, figsize=(14, 9))
    vis_config = VisualizationConfig(color_by="speed")

    for ax, (step, snap) in zip(axes.ravel(), snapshots):
        render_particles_matplotlib(
            snap.positions, snap.velocities, snap.densities,
            config.bounds_size, config.target_density, vis_config, ax=ax
        )
        ax.set_title(f'Step {step} (t = {snap.time:.2f} s)', color='white')

    plt.tight_layout()
    plt.savefig('dam_break_demo.png', dpi=150)
    print(f"\nPlot saved to dam_break_demo.png")
    plt.show()


def run_animation(
    n_particles: int = 200,
    n_frames: int = 200,
    n_steps_per_frame: int = 2,
    layout: str = "random",
    gravity: bool = True
):
    """
    Create an animation of the simulation.

    Args:
        n_particles: Number of particles
        n_frames: Number of animation frames
        n_steps_per_frame: Simulation steps between frames
        layout: "grid" or "random"
        gravity: Whether gravity is enabled
    """
    print("=" * 60)
    print("SPH Fluid Canvas - Animation")
    print("=" * 60)

    print(f"\nInitializing {n_particles} particles...")
    sim = build_simulation(n_particles, layout, gravity)

    print(f"Recording {n_frames} frames...")
    history = []
    for frame in range(n_frames):
        for _ in range(n_steps_per_frame):
            sim.step()

        state = sim.state
        history.append((
            state.positions.copy(), state.velocities.copy(), state.densities.copy()
        ))

        if frame % 50 == 0:
            print(f"  Frame {frame:4d}: {sim.check_health().description}")

    print(f"Creating animation with {n_frames} frames...")
    ani = create_animation(
        history, sim.config.bounds_size, sim.config.target_density,
        VisualizationConfig(), fps=20
    )

    print("Saving animation (this may take a while)...")
    ani.save('simulation_animation.gif', writer='pillow', fps=20)
    print("Animation saved to simulation_animation.gif")

    plt.show()


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="SPH Fluid Canvas - 2D Smoothed-Particle Hydrodynamics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --test              Run stability test
  python main.py --demo              Run dam break demo
  python main.py --animate           Create animation
  python main.py --app               Launch Streamlit app
        """
    )

    parser.add_argument('--test', action='store_true',
                       help='Run stability test')
    parser.add_argument('--demo', action='store_true',
                       help='Run dam break demonstration')
    parser.add_argument('--animate', action='store_true',
                       help='Create animation')
    parser.add_argument('--app', action='store_true',
                       help='Launch Streamlit web app')
    parser.add_argument('--particles', '-n', type=int, default=100,
                       help='Number of particles (default: 100)')
    parser.add_argument('--steps', '-s', type=int, default=1000,
                       help='Number of simulation steps (default: 1000)')
    parser.add_argument('--layout', choices=['grid', 'random'], default='grid',
                       help='Initial particle layout (default: grid)')
    parser.add_argument('--gravity', action='store_true',
                       help='Enable gravity')

    args = parser.parse_args()

    if args.test:
        run_stability_test(n_particles=args.particles, n_steps=args.steps,
                           layout=args.layout, gravity=args.gravity)
    elif args.demo:
        run_dam_break_demo(n_particles=args.particles, n_steps=args.steps)
    elif args.animate:
        run_animation(n_particles=args.particles, layout=args.layout,
                      gravity=args.gravity)
    elif args.app:
        import subprocess
        print("Launching Streamlit app...")
        subprocess.run(['streamlit', 'run', 'app.py'])
    else:
        parser.print_help()
        print("\nNo action specified. Run with --test, --demo, --animate, or --app")


if __name__ == "__main__":
    main()
