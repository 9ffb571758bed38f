#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
SPH Physics Engine
================================================================================

Project:        Week 2 Project 1: SPH Fluid Canvas
Module:         physics.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
Last Updated:   January 29, 2026

License:        MIT License
================================================================================

This module implements the smoothed-particle hydrodynamics (SPH) numerics
for the 2D fluid simulation. Every pass is a brute-force all-pairs loop
compiled with Numba.

The smoothing kernel and its slope are:
    W(r, d)  = (r - d)³ / V             V = π r⁸ / 4
    W'(r, d) = -24 / (π r⁸) · d (r² - d²)²

Both vanish for d ≥ r (compact support).

Pressure follows a linear equation of state:
    P(ρ) = (ρ - ρ₀) · k

Per tick the passes run in a fixed order:
    1. Density      ρᵢ = Σⱼ m W(r, |xⱼ - xᵢ|)   (self term included)
    2. Pressure     aᵢ = Fᵢ / ρᵢ
    3. Integration  v += (g + a) dt, then x += v dt
    4. Boundaries   clamp to the box and reflect with damping
"""

import numpy as np
from numba import jit, prange
from typing import Tuple


# Below this separation the pair direction is undefined
DIRECTION_EPSILON = 1e-4


@jit(nopython=True, cache=True)
def smoothing_kernel(radius: float, dst: float) -> float:
    """
    Evaluate the smoothing kernel.

    W(r, d) = (r - d)³ / (π r⁸ / 4)  for d < r, else 0

    Args:
        radius: Smoothing radius (must be positive)
        dst: Distance between the two particles

    Returns:
        Kernel weight
    """
    if dst >= radius:
        return 0.0

    volume = np.pi * radius ** 8 / 4.0
    v = radius - dst
    return v * v * v / volume


@jit(nopython=True, cache=True)
def smoothing_kernel_derivative(radius: float, dst: float) -> float:
    """
    Evaluate the kernel slope used for the pressure gradient.

    W'(r, d) = -24 / (π r⁸) · d (r² - d²)²  for d < r, else 0

    The slope is never positive and is exactly zero at d = 0, so a
    particle exerts no pressure force on itself.

    Args:
        radius: Smoothing radius (must be positive)
        dst: Distance between the two particles

    Returns:
        Kernel slope
    """
    if dst >= radius:
        return 0.0

    f = radius * radius - dst * dst
    scale = -24.0 / (np.pi * radius ** 8)
    return scale * dst * f * f


@jit(nopython=True, cache=True)
def density_to_pressure(
    density: float,
    target_density: float,
    pressure_multiplier: float
) -> float:
    """
    Linear equation of state.

    Positive above the target density, negative below it.
    """
    return (density - target_density) * pressure_multiplier


@jit(nopython=True, parallel=True, cache=True)
def compute_densities(
    positions: np.ndarray,
    smoothing_radius: float,
    mass: float
) -> np.ndarray:
    """
    Estimate the density at every particle.

    Every particle reads the same start-of-tick positions, so the result
    does not depend on the order particles are processed in. The inner
    sum always runs over j in ascending order, keeping results bitwise
    reproducible even when the outer loop runs in parallel.

    Args:
        positions: Nx2 array of particle positions
        smoothing_radius: Kernel support radius
        mass: Mass shared by all particles

    Returns:
        Array of N densities
    """
    n_particles = positions.shape[0]
    densities = np.zeros(n_particles)

    for i in prange(n_particles):
        density = 0.0
        for j in range(n_particles):
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            dst = np.sqrt(dx * dx + dy * dy)
            density += mass * smoothing_kernel(smoothing_radius, dst)
        densities[i] = density

    return densities


@jit(nopython=True, cache=True)
def calculate_pressure_force(
    sample_index: int,
    positions: np.ndarray,
    densities: np.ndarray,
    smoothing_radius: float,
    target_density: float,
    pressure_multiplier: float,
    mass: float,
    include_self: bool
) -> Tuple[float, float]:
    """
    Calculate the pressure force acting on a single particle.

    F = Σⱼ -P(ρⱼ) · dirⱼ · W'(r, dⱼ) · m / ρⱼ

    dirⱼ is the unit vector from neighbor j towards the sample particle,
    so an over-dense neighborhood pushes the particle away and an
    under-dense one pulls it in. Coincident pairs (d ≤ 1e-4) use the
    fixed +x direction instead of dividing by zero.

    Args:
        sample_index: Index of the particle to evaluate
        positions: Nx2 array of particle positions
        densities: Array of N densities from the current tick
        smoothing_radius: Kernel support radius
        target_density: Rest density of the fluid
        pressure_multiplier: Stiffness of the equation of state
        mass: Mass shared by all particles
        include_self: Whether the particle's own term enters the sum

    Returns:
        (fx, fy): Pressure force components
    """
    n_particles = positions.shape[0]
    sx = positions[sample_index, 0]
    sy = positions[sample_index, 1]

    fx = 0.0
    fy = 0.0

    for j in range(n_particles):
        if j == sample_index and not include_self:
            continue

        offset_x = sx - positions[j, 0]
        offset_y = sy - positions[j, 1]
        dst = np.sqrt(offset_x * offset_x + offset_y * offset_y)

        if dst <= DIRECTION_EPSILON:
            dir_x = 1.0
            dir_y = 0.0
        else:
            dir_x = offset_x / dst
            dir_y = offset_y / dst

        slope = smoothing_kernel_derivative(smoothing_radius, dst)
        pressure = -density_to_pressure(densities[j], target_density, pressure_multiplier)

        scale = pressure * slope * mass / densities[j]
        fx += scale * dir_x
        fy += scale * dir_y

    return fx, fy


@jit(nopython=True, parallel=True, cache=True)
def compute_pressure_accelerations(
    positions: np.ndarray,
    densities: np.ndarray,
    smoothing_radius: float,
    target_density: float,
    pressure_multiplier: float,
    mass: float,
    include_self: bool
) -> np.ndarray:
    """
    Compute the pressure acceleration of every particle.

    The densities must be fully computed for this tick before calling;
    every density is strictly positive because of the self term.

    Returns:
        Nx2 array of accelerations (force / own density)
    """
    n_particles = positions.shape[0]
    accelerations = np.zeros((n_particles, 2))

    for i in prange(n_particles):
        fx, fy = calculate_pressure_force(
            i, positions, densities,
            smoothing_radius, target_density, pressure_multiplier,
            mass, include_self
        )
        accelerations[i, 0] = fx / densities[i]
        accelerations[i, 1] = fy / densities[i]

    return accelerations


@jit(nopython=True, cache=True)
def integrate_particles(
    positions: np.ndarray,
    velocities: np.ndarray,
    accelerations: np.ndarray,
    gravity_accel: float,
    dt: float
) -> None:
    """
    Semi-implicit Euler step, in place.

    All velocities are updated before any position uses them.
    Gravity points along -y; pass 0.0 to disable it.
    """
    n_particles = positions.shape[0]

    for i in range(n_particles):
        velocities[i, 0] += accelerations[i, 0] * dt
        velocities[i, 1] += (accelerations[i, 1] - gravity_accel) * dt

    for i in range(n_particles):
        positions[i, 0] += velocities[i, 0] * dt
        positions[i, 1] += velocities[i, 1] * dt


@jit(nopython=True, cache=True)
def resolve_collisions(
    positions: np.ndarray,
    velocities: np.ndarray,
    half_extent_x: float,
    half_extent_y: float,
    collision_damping: float
) -> None:
    """
    Keep particles inside the box centered on the origin, in place.

    Each axis is handled independently: a particle past the wall is put
    back on it and its velocity along that axis is reversed and scaled
    by the damping factor (1 = elastic, 0 = no rebound).
    """
    n_particles = positions.shape[0]

    for i in range(n_particles):
        if abs(positions[i, 0]) > half_extent_x:
            positions[i, 0] = half_extent_x * np.sign(positions[i, 0])
            velocities[i, 0] *= -1.0 * collision_damping

        if abs(positions[i, 1]) > half_extent_y:
            positions[i, 1] = half_extent_y * np.sign(positions[i, 1])
            velocities[i, 1] *= -1.0 * collision_damping


def calculate_kinetic_energy(velocities: np.ndarray, mass: float = 1.0) -> float:
    """
    Calculate total kinetic energy.

    KE = Σ (1/2) m v²

    Args:
        velocities: Nx2 array of velocities
        mass: Mass shared by all particles

    Returns:
        Total kinetic energy
    """
    v_sq = np.sum(velocities ** 2, axis=1)
    return float(0.5 * mass * np.sum(v_sq))


def calculate_pressure_energy(
    densities: np.ndarray,
    target_density: float,
    pressure_multiplier: float,
    mass: float = 1.0
) -> float:
    """
    Elastic energy stored in density deviations.

    U = Σ (1/2) k m (ρ - ρ₀)²

    Not an exact potential for this scheme; only used to watch the
    total energy for unbounded growth.
    """
    deviation = densities - target_density
    return float(0.5 * pressure_multiplier * mass * np.sum(deviation ** 2))
