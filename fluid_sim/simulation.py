#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
SPH Simulation Engine
================================================================================

Project:        Week 2 Project 1: SPH Fluid Canvas
Module:         simulation.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
Last Updated:   January 29, 2026

License:        MIT License
================================================================================

Core SPH simulation engine: particle store, configuration, scene spawning
and the per-frame update. The application owns one mutable configuration;
every tick works from a frozen snapshot of it taken when the tick starts.
"""

import math
import time
import numpy as np
from typing import Tuple, Optional, Callable
from dataclasses import dataclass, replace

from .physics import (
    compute_densities,
    compute_pressure_accelerations,
    integrate_particles,
    resolve_collisions,
    calculate_kinetic_energy,
    calculate_pressure_energy
)
from .diagnostics import HealthReport, DEFAULT_SPEED_LIMIT, check_health


# Draw/interaction radius of a water atom (simulation units)
PARTICLE_RADIUS = 0.1

# Mass shared by every particle
PARTICLE_MASS = 1.0

# 80% of a 1920x1080 px window at 100 px per unit
DEFAULT_BOUNDS_SIZE = (1920.0 * 0.8 / 100.0, 1080.0 * 0.8 / 100.0)


@dataclass(frozen=True)
class StepParameters:
    """Read-only configuration snapshot used by every pass of one tick."""
    collision_damping: float
    smoothing_radius: float
    half_extent: Tuple[float, float]
    gravity_accel: float
    target_density: float
    pressure_multiplier: float
    include_self_in_pressure: bool
    mass: float = PARTICLE_MASS


@dataclass
class SimulationConfig:
    """
    Configuration for the SPH simulation.

    Any field may be edited between ticks (e.g. from the live tuning
    sidebar); the next tick picks up the new values. particles_num and
    particles_spacing only matter when the scene is spawned.
    """
    # Boundaries
    collision_damping: float = 0.7
    bounds_size: Tuple[float, float] = DEFAULT_BOUNDS_SIZE

    # Kernel and equation of state
    smoothing_radius: float = 1.3
    target_density: float = 2.75
    pressure_multiplier: float = 0.5
    include_self_in_pressure: bool = True

    # External forces
    gravity: float = 10.0
    gravity_enabled: bool = False

    # Scene
    particles_num: int = 402
    particles_spacing: float = 2.0 * PARTICLE_RADIUS + 0.02

    # Default frame time when the caller does not supply one
    dt: float = 1.0 / 60.0

    @property
    def half_extent(self) -> Tuple[float, float]:
        """Largest |x| and |y| a particle center may reach."""
        return (
            self.bounds_size[0] / 2.0 - PARTICLE_RADIUS,
            self.bounds_size[1] / 2.0 - PARTICLE_RADIUS
        )

    def validate(self) -> None:
        """
        Reject configurations the kernels cannot handle.

        Raises:
            ValueError: If any parameter is out of range
        """
        if not self.smoothing_radius > 0:
            raise ValueError(
                f"smoothing_radius must be positive, got {self.smoothing_radius}"
            )
        if not 0.0 <= self.collision_damping <= 1.0:
            raise ValueError(
                f"collision_damping must be in [0, 1], got {self.collision_damping}"
            )
        if len(self.bounds_size) != 2:
            raise ValueError(f"bounds_size must have 2 components, got {self.bounds_size}")
        for extent in self.bounds_size:
            if not extent > 2.0 * PARTICLE_RADIUS:
                raise ValueError(
                    f"bounds_size components must exceed {2.0 * PARTICLE_RADIUS}, "
                    f"got {self.bounds_size}"
                )
        if self.particles_num < 1:
            raise ValueError(f"particles_num must be at least 1, got {self.particles_num}")
        if self.particles_spacing < 0:
            raise ValueError(
                f"particles_spacing must be non-negative, got {self.particles_spacing}"
            )
        if self.dt < 0:
            raise ValueError(f"dt must be non-negative, got {self.dt}")

    def snapshot(self) -> StepParameters:
        """Validate and freeze the current values for one tick."""
        self.validate()
        return StepParameters(
            collision_damping=float(self.collision_damping),
            smoothing_radius=float(self.smoothing_radius),
            half_extent=self.half_extent,
            gravity_accel=float(self.gravity) if self.gravity_enabled else 0.0,
            target_density=float(self.target_density),
            pressure_multiplier=float(self.pressure_multiplier),
            include_self_in_pressure=bool(self.include_self_in_pressure),
        )


@dataclass
class SimulationState:
    """
    Current state of the particle system.

    positions, velocities and densities are index-aligned: row i of each
    array belongs to particle i. Densities are placeholders until the
    first tick has run.
    """
    positions: np.ndarray
    velocities: np.ndarray
    densities: np.ndarray
    pressure_accelerations: Optional[np.ndarray] = None
    time: float = 0.0
    step: int = 0
    kinetic_energy: float = 0.0
    pressure_energy: float = 0.0

    @property
    def total_energy(self) -> float:
        return self.kinetic_energy + self.pressure_energy

    @property
    def n_particles(self) -> int:
        return self.positions.shape[0]

    def check_aligned(self) -> None:
        """
        Fail fast when the particle arrays disagree in shape.

        Raises:
            ValueError: On any length or shape mismatch
        """
        n = self.positions.shape[0]
        if self.positions.ndim != 2 or self.positions.shape[1] != 2:
            raise ValueError(f"positions must have shape (n, 2), got {self.positions.shape}")
        if self.velocities.shape != (n, 2):
            raise ValueError(
                f"velocities shape {self.velocities.shape} does not match {n} particles"
            )
        if self.densities.shape != (n,):
            raise ValueError(
                f"densities shape {self.densities.shape} does not match {n} particles"
            )

    def copy(self) -> "SimulationState":
        """Deep copy of the arrays, for comparisons and replays."""
        return replace(
            self,
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            densities=self.densities.copy(),
            pressure_accelerations=(
                None if self.pressure_accelerations is None
                else self.pressure_accelerations.copy()
            )
        )


def spawn_grid_positions(n_particles: int, spacing: float) -> np.ndarray:
    """
    Place particles on a square-ish grid centered on the origin.

    Rows are filled in order with ceil(sqrt(n)) particles each; the last
    row may be partial.

    Args:
        n_particles: Number of particles
        spacing: Distance between neighboring grid points

    Returns:
        Nx2 array of positions
    """
    per_row = int(math.ceil(math.sqrt(n_particles)))
    n_rows = (n_particles - 1) // per_row + 1

    positions = np.zeros((n_particles, 2))
    for i in range(n_particles):
        col = i % per_row
        row = i // per_row
        positions[i, 0] = (col - per_row / 2.0 + 0.5) * spacing
        positions[i, 1] = (row - n_rows / 2.0 + 0.5) * spacing

    return positions


def max_grid_spacing(n_particles: int, half_extent: Tuple[float, float]) -> float:
    """
    Largest spacing for which spawn_grid_positions stays inside half_extent.

    Returns inf for a single particle, which always sits at the origin.
    """
    per_row = int(math.ceil(math.sqrt(n_particles)))
    n_rows = (n_particles - 1) // per_row + 1

    limit = math.inf
    if per_row > 1:
        limit = min(limit, half_extent[0] / ((per_row - 1) / 2.0))
    if n_rows > 1:
        limit = min(limit, half_extent[1] / ((n_rows - 1) / 2.0))
    return limit


def spawn_random_positions(
    n_particles: int,
    bounds_size: Tuple[float, float],
    seed: Optional[int] = None
) -> np.ndarray:
    """
    Scatter particles uniformly inside the box.

    The box is shrunk by the particle radius so no particle starts
    overlapping a wall.

    Args:
        n_particles: Number of particles
        bounds_size: (width, height) of the domain
        seed: Optional seed for reproducible layouts

    Returns:
        Nx2 array of positions
    """
    rng = np.random.default_rng(seed)
    half_width = (bounds_size[0] - PARTICLE_RADIUS) / 2.0
    half_height = (bounds_size[1] - PARTICLE_RADIUS) / 2.0

    positions = np.empty((n_particles, 2))
    positions[:, 0] = rng.uniform(-half_width, half_width, n_particles)
    positions[:, 1] = rng.uniform(-half_height, half_height, n_particles)
    return positions


def advance_simulation(
    state: SimulationState,
    params: StepParameters,
    dt: float
) -> SimulationState:
    """
    Advance the particle system by one tick, in place.

    The passes run in strict sequence, each over all particles:
    1. Density estimation from start-of-tick positions
    2. Pressure accelerations from the frozen density array
    3. Semi-implicit Euler integration (velocity, then position)
    4. Boundary collision resolution

    Args:
        state: Particle store to update
        params: Configuration snapshot for this tick
        dt: Elapsed time in seconds (>= 0)

    Returns:
        The same state object, updated
    """
    state.check_aligned()

    state.densities[:] = compute_densities(
        state.positions, params.smoothing_radius, params.mass
    )

    accelerations = compute_pressure_accelerations(
        state.positions,
        state.densities,
        params.smoothing_radius,
        params.target_density,
        params.pressure_multiplier,
        params.mass,
        params.include_self_in_pressure
    )

    integrate_particles(
        state.positions, state.velocities, accelerations,
        params.gravity_accel, dt
    )

    half_x, half_y = params.half_extent
    resolve_collisions(
        state.positions, state.velocities,
        half_x, half_y, params.collision_damping
    )

    state.pressure_accelerations = accelerations
    state.time += dt
    state.step += 1
    state.kinetic_energy = calculate_kinetic_energy(state.velocities, params.mass)
    state.pressure_energy = calculate_pressure_energy(
        state.densities, params.target_density, params.pressure_multiplier, params.mass
    )

    return state


class FrameClock:
    """
    Wall-clock time between frames, for real-time stepping.

    The first tick after construction or reset() reports 0 elapsed time.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._last: Optional[float] = None

    def tick(self) -> float:
        """Seconds since the previous tick (never negative)."""
        now = self._clock()
        elapsed = 0.0 if self._last is None else now - self._last
        self._last = now
        return max(elapsed, 0.0)

    def reset(self) -> None:
        self._last = None


class SPHSimulation:
    """
    SPH fluid simulation driver.

    Owns the mutable configuration and the particle store, and steps
    them once per frame. Parameter changes made between calls to step()
    take effect on the next tick.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self.config.validate()
        self.state: Optional[SimulationState] = None

        # Performance tracking
        self.steps_per_second = 0.0
        self._last_time = time.time()
        self._step_count = 0

    def initialize_from_arrays(
        self,
        positions: np.ndarray,
        velocities: Optional[np.ndarray] = None
    ) -> SimulationState:
        """
        Initialize from explicit particle positions.

        Args:
            positions: Nx2 array of positions
            velocities: Optional Nx2 array of velocities (default: zero)

        Returns:
            Initial simulation state
        """
        positions = np.array(positions, dtype=np.float64)
        n_particles = positions.shape[0]

        if velocities is None:
            velocities = np.zeros((n_particles, 2))
        else:
            velocities = np.array(velocities, dtype=np.float64)

        self.state = SimulationState(
            positions=positions,
            velocities=velocities,
            densities=np.zeros(n_particles)
        )
        self.state.check_aligned()

        return self.state

    def initialize_grid(self) -> SimulationState:
        """
        Initialize particles on a centered grid using the config's count and spacing.

        The spacing is reduced when the grid would not fit inside the bounds.
        """
        spacing = min(
            self.config.particles_spacing,
            max_grid_spacing(self.config.particles_num, self.config.half_extent)
        )
        positions = spawn_grid_positions(self.config.particles_num, spacing)
        return self.initialize_from_arrays(positions)

    def initialize_random(self, seed: Optional[int] = None) -> SimulationState:
        """Initialize particles uniformly inside the bounds."""
        positions = spawn_random_positions(
            self.config.particles_num, self.config.bounds_size, seed
        )
        return self.initialize_from_arrays(positions)

    def step(self, dt: Optional[float] = None) -> SimulationState:
        """
        Advance the simulation by one tick.

        Args:
            dt: Elapsed time in seconds (default: config.dt)

        Returns:
            Updated simulation state
        """
        if self.state is None:
            raise RuntimeError("Simulation not initialized")

        params = self.config.snapshot()
        if dt is None:
            dt = self.config.dt
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        advance_simulation(self.state, params, dt)

        # Track performance
        self._step_count += 1
        if self._step_count % 100 == 0:
            current_time = time.time()
            elapsed = current_time - self._last_time
            if elapsed > 0:
                self.steps_per_second = 100.0 / elapsed
            self._last_time = current_time

        return self.state

    def run(self, n_steps: int, dt: Optional[float] = None) -> SimulationState:
        """Run simulation for n_steps."""
        for _ in range(n_steps):
            self.step(dt)
        return self.state

    def check_health(self, speed_limit: float = DEFAULT_SPEED_LIMIT) -> HealthReport:
        """Summarize whether the run is still numerically sound."""
        if self.state is None:
            raise RuntimeError("Simulation not initialized")

        return check_health(self.state, self.config.target_density, speed_limit)


def create_grid_simulation(
    n_particles: int = 402,
    spacing: float = 2.0 * PARTICLE_RADIUS + 0.02,
    gravity_enabled: bool = False,
    **config_overrides
) -> SPHSimulation:
    """
    Create a simulation with particles on a centered grid.

    Args:
        n_particles: Number of particles
        spacing: Grid spacing
        gravity_enabled: Whether gravity acts on the particles
        **config_overrides: Any other SimulationConfig field

    Returns:
        Initialized SPHSimulation
    """
    config = SimulationConfig(
        particles_num=n_particles,
        particles_spacing=spacing,
        gravity_enabled=gravity_enabled,
        **config_overrides
    )

    sim = SPHSimulation(config)
    sim.initialize_grid()

    return sim


def create_random_simulation(
    n_particles: int = 402,
    seed: Optional[int] = None,
    gravity_enabled: bool = False,
    **config_overrides
) -> SPHSimulation:
    """
    Create a simulation with particles scattered uniformly in the box.

    Args:
        n_particles: Number of particles
        seed: Optional seed for the layout
        gravity_enabled: Whether gravity acts on the particles
        **config_overrides: Any other SimulationConfig field

    Returns:
        Initialized SPHSimulation
    """
    config = SimulationConfig(
        particles_num=n_particles,
        gravity_enabled=gravity_enabled,
        **config_overrides
    )

    sim = SPHSimulation(config)
    sim.initialize_random(seed)

    return sim
