#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Fluid Visualization Module
================================================================================

Project:        Week 2 Project 1: SPH Fluid Canvas
Module:         visualization.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
Last Updated:   January 29, 2026

License:        MIT License
================================================================================

This module provides visualization tools for the SPH fluid simulation:
- Color mapping based on particle density or speed
- Particle rendering for Matplotlib and Streamlit
- Density field heatmaps
- Energy plots and animations

Only reads simulation state; nothing here writes back into the core.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap
import matplotlib.animation as animation
from typing import Tuple, Optional, List
from dataclasses import dataclass
import io


def create_density_colormap():
    """
    Create a colormap for density relative to the target.

    Blue (under-dense) -> White (at target) -> Red (over-dense)
    """
    colors = [
        (0.1, 0.3, 0.9),    # Blue (sparse)
        (0.5, 0.8, 1.0),    # Light blue
        (1.0, 1.0, 1.0),    # White (target)
        (1.0, 0.6, 0.3),    # Orange
        (0.9, 0.1, 0.1),    # Red (compressed)
    ]
    return LinearSegmentedColormap.from_list("density", colors, N=256)


def create_speed_colormap():
    """
    Create a colormap for particle speed.

    Dark blue (still) -> Cyan -> Yellow -> Red (fast)
    """
    colors = [
        (0.0, 0.1, 0.5),
        (0.0, 0.6, 1.0),
        (0.0, 1.0, 1.0),
        (1.0, 1.0, 0.0),
        (1.0, 0.2, 0.0),
    ]
    return LinearSegmentedColormap.from_list("speed", colors, N=256)


DENSITY_CMAP = create_density_colormap()
SPEED_CMAP = create_speed_colormap()


@dataclass
class VisualizationConfig:
    """Configuration for visualization."""
    particle_radius: float = 0.1
    show_velocities: bool = False
    color_by: str = "density"  # "density", "speed", "uniform"
    background_color: str = "#333333"
    bounds_color: str = "black"
    max_speed: float = 5.0
    density_span: float = 1.0  # ±span around the target maps to the color range
    figsize: Tuple[int, int] = (12, 7)


def calculate_particle_colors(
    velocities: np.ndarray,
    densities: np.ndarray,
    target_density: float,
    config: VisualizationConfig
) -> np.ndarray:
    """
    Calculate colors for particles based on configuration.

    Args:
        velocities: Nx2 array of velocities
        densities: Array of N densities
        target_density: Rest density of the fluid
        config: Visualization configuration

    Returns:
        Nx4 RGBA color array
    """
    n_particles = len(velocities)

    if config.color_by == "density":
        # Target density maps to the middle of the colormap
        span = max(config.density_span, 1e-12)
        norm = np.clip(0.5 + (densities - target_density) / (2.0 * span), 0, 1)
        colors = DENSITY_CMAP(np.nan_to_num(norm, nan=1.0))

    elif config.color_by == "speed":
        speeds = np.sqrt(np.sum(velocities ** 2, axis=1))
        norm = np.clip(speeds / config.max_speed, 0, 1)
        colors = SPEED_CMAP(np.nan_to_num(norm, nan=1.0))

    else:
        # Default: uniform water blue
        colors = np.zeros((n_particles, 4))
        colors[:, 2] = 1.0  # B
        colors[:, 3] = 1.0  # A

    return colors


def render_particles_matplotlib(
    positions: np.ndarray,
    velocities: np.ndarray,
    densities: np.ndarray,
    bounds_size: Tuple[float, float],
    target_density: float = 2.75,
    config: Optional[VisualizationConfig] = None,
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Render particles and the domain rectangle using Matplotlib.

    The domain is centered on the origin, as in the simulation.

    Args:
        positions: Nx2 array of positions
        velocities: Nx2 array of velocities
        densities: Array of N densities
        bounds_size: (width, height) of the domain
        target_density: Rest density, used for density coloring
        config: Visualization configuration
        ax: Optional existing axes to draw on

    Returns:
        Matplotlib figure
    """
    if config is None:
        config = VisualizationConfig()

    width, height = bounds_size
    half_w = width / 2.0
    half_h = height / 2.0

    if ax is None:
        fig = plt.figure(figsize=config.figsize)
        ax = fig.add_axes([0, 0, 1, 1])
    else:
        fig = ax.figure

    ax.clear()
    ax.set_facecolor(config.background_color)
    fig.patch.set_facecolor(config.background_color)

    colors = calculate_particle_colors(velocities, densities, target_density, config)

    # Marker area in points² so particles keep their size in world units
    fig_width_in = fig.get_size_inches()[0]
    points_per_unit = fig_width_in * 72.0 / (width * 1.04)
    size = (2.0 * config.particle_radius * points_per_unit) ** 2

    ax.scatter(
        positions[:, 0], positions[:, 1],
        s=size,
        c=colors,
        linewidths=0
    )

    if config.show_velocities and len(positions) > 0:
        ax.quiver(
            positions[:, 0], positions[:, 1],
            velocities[:, 0], velocities[:, 1],
            color='white', alpha=0.5,
            angles='xy', scale_units='xy', scale=2.0,
            width=0.002
        )

    margin = max(width, height) * 0.02
    ax.set_xlim(-half_w - margin, half_w + margin)
    ax.set_ylim(-half_h - margin, half_h + margin)
    ax.set_aspect('equal')

    # Domain rectangle
    ax.plot(
        [-half_w, half_w, half_w, -half_w, -half_w],
        [-half_h, -half_h, half_h, half_h, -half_h],
        color=config.bounds_color, linewidth=1.5
    )

    ax.set_xticks([])
    ax.set_yticks([])
    ax.axis('off')

    return fig


def render_particles_streamlit(
    positions: np.ndarray,
    velocities: np.ndarray,
    densities: np.ndarray,
    bounds_size: Tuple[float, float],
    target_density: float = 2.75,
    config: Optional[VisualizationConfig] = None
) -> bytes:
    """
    Render particles and return PNG bytes for Streamlit.

    Returns:
        PNG image as bytes
    """
    fig = render_particles_matplotlib(
        positions, velocities, densities, bounds_size, target_density, config
    )

    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=100,
                facecolor=fig.get_facecolor(), edgecolor='none',
                pad_inches=0, bbox_inches='tight')
    plt.close(fig)
    buf.seek(0)

    return buf.getvalue()


def render_density_field(
    density_field: np.ndarray,
    bounds_size: Tuple[float, float],
    target_density: float,
    config: Optional[VisualizationConfig] = None,
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Render a sampled density field as a heatmap.

    Args:
        density_field: (nx, ny) array from calculate_density_field
        bounds_size: (width, height) of the domain
        target_density: Rest density, centered in the colormap
        config: Visualization configuration
        ax: Optional existing axes

    Returns:
        Matplotlib figure
    """
    if config is None:
        config = VisualizationConfig()

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=config.figsize)
    else:
        fig = ax.figure

    ax.clear()

    half_w = bounds_size[0] / 2.0
    half_h = bounds_size[1] / 2.0
    im = ax.imshow(
        density_field.T,  # Transpose for correct orientation
        origin='lower',
        extent=[-half_w, half_w, -half_h, half_h],
        cmap=DENSITY_CMAP,
        vmin=target_density - config.density_span,
        vmax=target_density + config.density_span,
        aspect='equal',
        interpolation='bilinear'
    )

    plt.colorbar(im, ax=ax, label='Density')
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title('Density Field')

    return fig


def render_energy_plot(
    times: np.ndarray,
    kinetic: np.ndarray,
    pressure: np.ndarray,
    total: np.ndarray,
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Render energy vs time plot.

    Args:
        times: Time array
        kinetic: Kinetic energy array
        pressure: Pressure energy array
        total: Total energy array
        ax: Optional existing axes

    Returns:
        Matplotlib figure
    """
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(10, 4))
    else:
        fig = ax.figure

    ax.clear()
    ax.plot(times, kinetic, 'r-', label='Kinetic', linewidth=1.5)
    ax.plot(times, pressure, 'b-', label='Pressure', linewidth=1.5)
    ax.plot(times, total, 'k-', label='Total', linewidth=2)

    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Energy')
    ax.set_title('Energy vs Time')
    ax.legend(loc='best')
    ax.grid(True, alpha=0.3)

    return fig


def create_animation(
    simulation_history: List[Tuple[np.ndarray, np.ndarray, np.ndarray]],
    bounds_size: Tuple[float, float],
    target_density: float = 2.75,
    config: Optional[VisualizationConfig] = None,
    fps: int = 30
) -> animation.FuncAnimation:
    """
    Create an animation from recorded frames.

    Args:
        simulation_history: List of (positions, velocities, densities) tuples
        bounds_size: (width, height) of the domain
        target_density: Rest density, used for density coloring
        config: Visualization configuration
        fps: Frames per second

    Returns:
        Matplotlib animation
    """
    if config is None:
        config = VisualizationConfig()

    fig, ax = plt.subplots(1, 1, figsize=config.figsize)

    def update(frame):
        positions, velocities, densities = simulation_history[frame]
        render_particles_matplotlib(
            positions, velocities, densities, bounds_size,
            target_density, config, ax=ax
        )
        return ax,

    ani = animation.FuncAnimation(
        fig, update, frames=len(simulation_history),
        interval=1000 / fps, blit=False
    )

    return ani


def get_health_indicator_color(status_name: str) -> str:
    """Get color for the health indicator badge."""
    colors = {
        'stable': '#22c55e',    # Green
        'agitated': '#f59e0b',  # Amber
        'diverged': '#ef4444',  # Red
    }
    return colors.get(status_name.lower(), '#6b7280')
