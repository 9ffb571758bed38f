#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Simulation Health and Diagnostics
================================================================================

Project:        Week 2 Project 1: SPH Fluid Canvas
Module:         diagnostics.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
Last Updated:   January 29, 2026

License:        MIT License
================================================================================

This module watches the SPH simulation from the outside. The core never
sanitizes non-finite values; instead this module reports them:
- Health classification (stable, agitated, diverged)
- Density error relative to the target density
- Density field sampled on a grid for heatmaps
- Energy/stability tracking over time
"""

import numpy as np
from typing import Tuple, Optional, List
from dataclasses import dataclass
from enum import Enum
from numba import jit

from .physics import smoothing_kernel


class SimulationHealth(Enum):
    """Coarse health of a running simulation."""
    STABLE = "stable"
    AGITATED = "agitated"
    DIVERGED = "diverged"


@dataclass
class HealthReport:
    """Snapshot of the simulation's numerical health."""
    status: SimulationHealth
    max_speed: float
    mean_density: float
    max_density_error: float  # |ρ - ρ₀| / ρ₀, or absolute when ρ₀ = 0
    non_finite_count: int
    description: str


# Above this speed (units/s) particles visibly jitter or explode
DEFAULT_SPEED_LIMIT = 50.0


def calculate_density_error(densities: np.ndarray, target_density: float) -> np.ndarray:
    """
    Relative deviation of each density from the target.

    Falls back to the absolute deviation when the target is zero.
    """
    deviation = np.abs(densities - target_density)
    if target_density == 0:
        return deviation
    return deviation / abs(target_density)


def check_health(
    state,
    target_density: float,
    speed_limit: float = DEFAULT_SPEED_LIMIT
) -> HealthReport:
    """
    Classify the state of a simulation.

    Any NaN/Inf in positions, velocities or densities means the run has
    diverged; otherwise a particle faster than speed_limit marks it as
    agitated.

    Args:
        state: SimulationState to inspect
        target_density: Rest density of the fluid
        speed_limit: Speed above which the run counts as agitated

    Returns:
        HealthReport describing the state
    """
    non_finite = (
        int(np.count_nonzero(~np.isfinite(state.positions)))
        + int(np.count_nonzero(~np.isfinite(state.velocities)))
        + int(np.count_nonzero(~np.isfinite(state.densities)))
    )

    speeds = np.sqrt(np.sum(state.velocities ** 2, axis=1))
    max_speed = float(np.max(speeds)) if len(speeds) > 0 else 0.0
    mean_density = float(np.mean(state.densities)) if len(state.densities) > 0 else 0.0
    errors = calculate_density_error(state.densities, target_density)
    max_error = float(np.max(errors)) if len(errors) > 0 else 0.0

    if non_finite > 0:
        status = SimulationHealth.DIVERGED
        description = f"Diverged: {non_finite} non-finite values"
    elif max_speed > speed_limit:
        status = SimulationHealth.AGITATED
        description = f"Agitated: max speed {max_speed:.2f} exceeds {speed_limit:.2f}"
    else:
        status = SimulationHealth.STABLE
        description = f"Stable: max speed {max_speed:.2f}, ρ̄={mean_density:.3f}"

    return HealthReport(
        status=status,
        max_speed=max_speed,
        mean_density=mean_density,
        max_density_error=max_error,
        non_finite_count=non_finite,
        description=description
    )


@jit(nopython=True, cache=True)
def _sample_density(
    positions: np.ndarray,
    sample_points: np.ndarray,
    smoothing_radius: float,
    mass: float
) -> np.ndarray:
    n_samples = sample_points.shape[0]
    n_particles = positions.shape[0]
    values = np.zeros(n_samples)

    for s in range(n_samples):
        density = 0.0
        for j in range(n_particles):
            dx = positions[j, 0] - sample_points[s, 0]
            dy = positions[j, 1] - sample_points[s, 1]
            dst = np.sqrt(dx * dx + dy * dy)
            density += mass * smoothing_kernel(smoothing_radius, dst)
        values[s] = density

    return values


def sample_density(
    positions: np.ndarray,
    sample_points: np.ndarray,
    smoothing_radius: float,
    mass: float = 1.0
) -> np.ndarray:
    """
    Evaluate the SPH density at arbitrary points.

    Args:
        positions: Nx2 array of particle positions
        sample_points: Mx2 array of points to sample
        smoothing_radius: Kernel support radius
        mass: Mass shared by all particles

    Returns:
        Array of M densities
    """
    return _sample_density(
        np.ascontiguousarray(positions, dtype=np.float64),
        np.ascontiguousarray(sample_points, dtype=np.float64),
        float(smoothing_radius),
        float(mass)
    )


def calculate_density_field(
    positions: np.ndarray,
    bounds_size: Tuple[float, float],
    smoothing_radius: float,
    grid_size: Tuple[int, int] = (48, 27),
    mass: float = 1.0
) -> np.ndarray:
    """
    Sample the density on a regular grid covering the domain.

    The domain is centered on the origin. Samples sit at cell centers.

    Args:
        positions: Nx2 array of positions
        bounds_size: (width, height) of the domain
        smoothing_radius: Kernel support radius
        grid_size: (nx, ny) number of cells
        mass: Mass shared by all particles

    Returns:
        (nx, ny) array of densities
    """
    width, height = bounds_size
    nx, ny = grid_size

    xs = (np.arange(nx) + 0.5) / nx * width - width / 2.0
    ys = (np.arange(ny) + 0.5) / ny * height - height / 2.0
    xx, yy = np.meshgrid(xs, ys, indexing='ij')
    points = np.column_stack([xx.ravel(), yy.ravel()])

    values = sample_density(positions, points, smoothing_radius, mass)
    return values.reshape(nx, ny)


class StabilityTracker:
    """
    Track energy and health over time.

    Keeps a bounded history and records every change of health status,
    e.g. the moment a run goes from stable to diverged.
    """

    def __init__(self, history_length: int = 500):
        self.history_length = history_length
        self.time_history: List[float] = []
        self.energy_history: List[float] = []
        self.status_history: List[SimulationHealth] = []

        self.status_changes: List[Tuple[float, SimulationHealth, SimulationHealth]] = []

    def update(
        self,
        time: float,
        total_energy: float,
        report: HealthReport
    ) -> Optional[Tuple[SimulationHealth, SimulationHealth]]:
        """
        Record a new measurement.

        Args:
            time: Simulation time
            total_energy: Kinetic plus pressure energy
            report: Health report for the same instant

        Returns:
            (old_status, new_status) if the status changed, else None
        """
        self.time_history.append(time)
        self.energy_history.append(total_energy)
        self.status_history.append(report.status)

        # Trim history
        if len(self.time_history) > self.history_length:
            self.time_history.pop(0)
            self.energy_history.pop(0)
            self.status_history.pop(0)

        if len(self.status_history) >= 2:
            old_status = self.status_history[-2]
            if old_status != report.status:
                self.status_changes.append((time, old_status, report.status))
                return (old_status, report.status)

        return None

    def energy_variance(self) -> float:
        """Variance of the recorded total energy."""
        if len(self.energy_history) < 2:
            return 0.0
        return float(np.var(self.energy_history))

    def is_bounded(self, limit: float) -> bool:
        """True while every recorded energy is finite and below limit."""
        energies = np.array(self.energy_history)
        return bool(np.all(np.isfinite(energies)) and np.all(energies < limit))

    def get_recent_changes(self, n: int = 5) -> List[Tuple[float, SimulationHealth, SimulationHealth]]:
        """Get the n most recent status changes."""
        return self.status_changes[-n:]
