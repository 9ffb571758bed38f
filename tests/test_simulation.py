#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Simulation Module Tests
================================================================================

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
License:        MIT License
================================================================================
"""

import dataclasses

import numpy as np
import pytest
from fluid_sim.physics import smoothing_kernel
from fluid_sim.simulation import (
    SPHSimulation, SimulationConfig, SimulationState, StepParameters,
    PARTICLE_RADIUS, DEFAULT_BOUNDS_SIZE,
    FrameClock, spawn_grid_positions, spawn_random_positions, max_grid_spacing,
    advance_simulation, create_grid_simulation, create_random_simulation
)
from fluid_sim.diagnostics import StabilityTracker


class TestSimulationConfig:
    """Tests for simulation configuration."""

    def test_default_config(self):
        """Test default configuration values."""
        config = SimulationConfig()
        assert config.collision_damping == 0.7
        assert config.smoothing_radius == 1.3
        assert config.target_density == 2.75
        assert config.pressure_multiplier == 0.5
        assert config.gravity_enabled == False
        assert config.particles_num == 402
        assert config.bounds_size == DEFAULT_BOUNDS_SIZE

    def test_half_extent(self):
        """Half extent is half the bounds minus the particle radius."""
        config = SimulationConfig(bounds_size=(10.0, 6.0))
        half_x, half_y = config.half_extent
        assert abs(half_x - (5.0 - PARTICLE_RADIUS)) < 1e-12
        assert abs(half_y - (3.0 - PARTICLE_RADIUS)) < 1e-12

    @pytest.mark.parametrize("overrides", [
        {"smoothing_radius": 0.0},
        {"smoothing_radius": -1.0},
        {"collision_damping": -0.1},
        {"collision_damping": 1.5},
        {"bounds_size": (0.1, 5.0)},
        {"bounds_size": (5.0,)},
        {"particles_num": 0},
        {"particles_spacing": -0.2},
        {"dt": -0.01},
    ])
    def test_invalid_config(self, overrides):
        """Out-of-range parameters are rejected."""
        config = SimulationConfig(**overrides)
        with pytest.raises(ValueError):
            config.validate()

    def test_snapshot_values(self):
        """Snapshot copies the current values."""
        config = SimulationConfig(gravity=9.0, gravity_enabled=True)
        params = config.snapshot()
        assert isinstance(params, StepParameters)
        assert params.gravity_accel == 9.0
        assert params.smoothing_radius == config.smoothing_radius
        assert params.half_extent == config.half_extent

    def test_snapshot_gravity_disabled(self):
        """Disabled gravity freezes to zero acceleration."""
        params = SimulationConfig(gravity=9.0, gravity_enabled=False).snapshot()
        assert params.gravity_accel == 0.0

    def test_snapshot_is_frozen(self):
        """A tick cannot modify its parameters."""
        params = SimulationConfig().snapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.smoothing_radius = 2.0

    def test_snapshot_independent_of_later_edits(self):
        """Editing the config does not alter an existing snapshot."""
        config = SimulationConfig()
        params = config.snapshot()
        config.target_density = 9.0
        assert params.target_density == 2.75


class TestSpawning:
    """Tests for initial particle layouts."""

    def test_grid_count(self):
        """Grid holds exactly the requested number of particles."""
        for n in [1, 2, 9, 10, 402]:
            assert spawn_grid_positions(n, 0.22).shape == (n, 2)

    def test_grid_centered(self):
        """A full square grid is centered on the origin."""
        positions = spawn_grid_positions(9, 0.5)
        assert np.allclose(positions.mean(axis=0), 0.0)

    def test_grid_spacing(self):
        """Neighbors are exactly one spacing apart."""
        positions = spawn_grid_positions(16, 0.3)
        assert abs(positions[1, 0] - positions[0, 0] - 0.3) < 1e-12
        assert abs(positions[4, 1] - positions[0, 1] - 0.3) < 1e-12

    def test_grid_rows(self):
        """Rows hold ceil(sqrt(n)) particles."""
        positions = spawn_grid_positions(402, 0.22)
        assert len(np.unique(np.round(positions[:, 0], 9))) == 21
        assert len(np.unique(np.round(positions[:, 1], 9))) == 20

    def test_max_grid_spacing_fits(self):
        """A grid at the maximum spacing just fits the half extent."""
        half_extent = (7.58, 4.22)
        spacing = max_grid_spacing(402, half_extent)
        positions = spawn_grid_positions(402, spacing)
        assert np.max(np.abs(positions[:, 0])) <= half_extent[0] + 1e-9
        assert np.max(np.abs(positions[:, 1])) <= half_extent[1] + 1e-9

    def test_max_grid_spacing_single(self):
        """A single particle fits at any spacing."""
        assert max_grid_spacing(1, (1.0, 1.0)) == np.inf

    def test_oversized_spacing_clamped(self):
        """initialize_grid shrinks a spacing the bounds cannot hold."""
        sim = SPHSimulation(SimulationConfig(particles_num=402, particles_spacing=1.0))
        positions = sim.initialize_grid().positions
        half_x, half_y = sim.config.half_extent

        assert positions.shape == (402, 2)
        assert np.all(np.abs(positions[:, 0]) <= half_x + 1e-9)
        assert np.all(np.abs(positions[:, 1]) <= half_y + 1e-9)

    def test_fitting_spacing_kept(self):
        """A spacing that fits is used as configured."""
        sim = SPHSimulation(SimulationConfig(particles_num=16, particles_spacing=0.3))
        positions = sim.initialize_grid().positions
        assert abs(positions[1, 0] - positions[0, 0] - 0.3) < 1e-12

    def test_random_within_bounds(self):
        """Random particles start inside the box."""
        bounds = (10.0, 6.0)
        positions = spawn_random_positions(500, bounds, seed=1)
        assert np.all(np.abs(positions[:, 0]) <= (bounds[0] - PARTICLE_RADIUS) / 2.0)
        assert np.all(np.abs(positions[:, 1]) <= (bounds[1] - PARTICLE_RADIUS) / 2.0)

    def test_random_seeded(self):
        """The same seed reproduces the layout."""
        a = spawn_random_positions(50, (10.0, 6.0), seed=42)
        b = spawn_random_positions(50, (10.0, 6.0), seed=42)
        assert np.array_equal(a, b)


class TestSPHSimulation:
    """Tests for the SPH simulation class."""

    def test_initialization(self):
        """Test simulation initialization."""
        config = SimulationConfig(particles_num=20)
        sim = SPHSimulation(config)

        assert sim.config == config
        assert sim.state is None  # Not initialized yet

    def test_invalid_config_rejected(self):
        """Construction validates the configuration."""
        with pytest.raises(ValueError):
            SPHSimulation(SimulationConfig(smoothing_radius=0.0))

    def test_step_before_init(self):
        """Stepping an empty simulation is an error."""
        sim = SPHSimulation()
        with pytest.raises(RuntimeError):
            sim.step()

    def test_grid_initialization(self):
        """Grid scene uses the configured count."""
        sim = create_grid_simulation(n_particles=25)
        assert sim.state.n_particles == 25
        assert np.all(sim.state.velocities == 0)
        assert np.all(sim.state.densities == 0)

    def test_random_initialization(self):
        """Random scene uses the configured count."""
        sim = create_random_simulation(n_particles=30, seed=3)
        assert sim.state.n_particles == 30

    def test_mismatched_arrays(self):
        """Velocities must match positions."""
        sim = SPHSimulation()
        with pytest.raises(ValueError):
            sim.initialize_from_arrays(np.zeros((3, 2)), np.zeros((2, 2)))

    def test_mismatch_detected_on_step(self):
        """A corrupted store fails fast instead of reading out of range."""
        sim = SPHSimulation()
        sim.initialize_from_arrays(np.zeros((3, 2)))
        sim.state.densities = np.zeros(2)
        with pytest.raises(ValueError):
            sim.step()

    def test_single_step(self):
        """Test that a single step updates time and step count."""
        sim = create_grid_simulation(n_particles=16)
        state = sim.step(0.016)

        assert state.step == 1
        assert abs(state.time - 0.016) < 1e-12
        assert np.all(state.densities > 0)
        assert state.pressure_accelerations.shape == (16, 2)

    def test_particle_count_fixed(self):
        """Ticks never add or remove particles."""
        sim = create_random_simulation(n_particles=40, seed=0, gravity_enabled=True)
        sim.run(50)
        assert sim.state.positions.shape == (40, 2)
        assert sim.state.velocities.shape == (40, 2)
        assert sim.state.densities.shape == (40,)

    def test_negative_dt_rejected(self):
        """An explicit negative dt is an error and leaves the state alone."""
        sim = create_grid_simulation(n_particles=9)
        with pytest.raises(ValueError):
            sim.step(-1.0)
        assert sim.state.time == 0.0
        assert sim.state.step == 0

    def test_zero_dt(self):
        """dt = 0 only refreshes the densities."""
        sim = create_grid_simulation(n_particles=16, gravity_enabled=True)
        p0 = sim.state.positions.copy()
        sim.step(0.0)
        assert np.array_equal(sim.state.positions, p0)
        assert np.all(sim.state.velocities == 0)


class TestLiveTuning:
    """Tests for parameter changes between ticks."""

    def test_gravity_toggle(self):
        """Enabling gravity takes effect on the next tick."""
        sim = SPHSimulation(SimulationConfig())
        sim.initialize_from_arrays(np.array([[0.0, 0.0]]))

        sim.step(0.1)
        assert sim.state.velocities[0, 1] == 0.0

        sim.config.gravity_enabled = True
        sim.step(0.1)
        assert abs(sim.state.velocities[0, 1] + sim.config.gravity * 0.1) < 1e-12

    def test_target_density_change(self):
        """Changing the target flips attraction into repulsion."""
        sim = SPHSimulation(SimulationConfig(target_density=2.75))
        sim.initialize_from_arrays(np.array([[-0.4, 0.0], [0.4, 0.0]]))

        sim.step(0.01)
        assert sim.state.pressure_accelerations[0, 0] > 0

        sim.config.target_density = 0.1
        sim.step(0.01)
        assert sim.state.pressure_accelerations[0, 0] < 0

    def test_invalid_edit_rejected(self):
        """An invalid edit is caught when the next tick starts."""
        sim = create_grid_simulation(n_particles=9)
        sim.config.smoothing_radius = 0.0
        with pytest.raises(ValueError):
            sim.step()


class TestPhysicalBehavior:
    """End-to-end behavior of the update."""

    def test_single_particle_at_rest(self):
        """A lone particle at the origin only sees itself and never moves."""
        sim = SPHSimulation(SimulationConfig())
        sim.initialize_from_arrays(np.array([[0.0, 0.0]]))

        sim.step(1.0)

        assert abs(sim.state.densities[0] - smoothing_kernel(1.3, 0.0)) < 1e-12
        assert np.all(sim.state.pressure_accelerations == 0)
        assert np.all(sim.state.velocities == 0)
        assert np.all(sim.state.positions == 0)

    def test_separated_pair(self):
        """A pair beyond the radius only sees itself and stays still."""
        config = SimulationConfig(
            smoothing_radius=1.3, target_density=2.75, pressure_multiplier=0.5
        )
        sim = SPHSimulation(config)
        sim.initialize_from_arrays(np.array([[-1.0, 0.0], [1.0, 0.0]]))

        sim.step(0.016)

        expected = smoothing_kernel(1.3, 0.0) + smoothing_kernel(1.3, 2.0)
        assert np.allclose(sim.state.densities, expected)
        assert np.all(sim.state.velocities == 0)
        assert np.array_equal(sim.state.positions, [[-1.0, 0.0], [1.0, 0.0]])

    def test_deterministic(self):
        """Identical inputs give bitwise identical results."""
        a = create_random_simulation(n_particles=60, seed=11, gravity_enabled=True)
        b = create_random_simulation(n_particles=60, seed=11, gravity_enabled=True)

        a.run(30)
        b.run(30)

        assert np.array_equal(a.state.positions, b.state.positions)
        assert np.array_equal(a.state.velocities, b.state.velocities)
        assert np.array_equal(a.state.densities, b.state.densities)

    def test_stays_in_bounds(self):
        """After every tick all particles lie within the half extent."""
        sim = create_random_simulation(
            n_particles=80, seed=5, gravity_enabled=True,
            bounds_size=(4.0, 3.0), collision_damping=0.9
        )
        half_x, half_y = sim.config.half_extent

        for _ in range(100):
            sim.step()
            assert np.all(np.abs(sim.state.positions[:, 0]) <= half_x)
            assert np.all(np.abs(sim.state.positions[:, 1]) <= half_y)

    def test_bounded_energy(self):
        """An elastic two-particle system keeps a bounded energy."""
        config = SimulationConfig(
            target_density=0.3, collision_damping=1.0, gravity_enabled=False
        )
        sim = SPHSimulation(config)
        sim.initialize_from_arrays(np.array([[-0.4, 0.0], [0.4, 0.0]]))

        energies = []
        for _ in range(500):
            state = sim.step(0.016)
            energies.append(state.total_energy)

        energies = np.array(energies)
        assert np.all(np.isfinite(energies))
        assert np.max(energies) < 1.0

    def test_block_at_rest_density_conserves_energy(self):
        """
        A grid block relaxing around its own mean density stays away from
        the elastic walls and keeps a bounded energy variance.
        """
        sim = create_grid_simulation(
            n_particles=100, gravity_enabled=False, collision_damping=1.0
        )
        sim.step(0.0)
        sim.config.target_density = float(np.mean(sim.state.densities))
        half_x, half_y = sim.config.half_extent

        tracker = StabilityTracker(history_length=300)
        for _ in range(300):
            state = sim.step()
            report = sim.check_health()
            tracker.update(state.time, state.total_energy, report)

            assert np.all(np.abs(state.positions[:, 0]) < half_x)
            assert np.all(np.abs(state.positions[:, 1]) < half_y)

        assert tracker.is_bounded(100.0)
        assert tracker.energy_variance() < 50.0

    def test_grid_block_stays_finite(self):
        """A default grid block relaxes without blowing up."""
        sim = create_grid_simulation(n_particles=100)
        sim.run(200)

        assert np.all(np.isfinite(sim.state.positions))
        assert np.all(np.isfinite(sim.state.velocities))

    def test_state_copy_independent(self):
        """Copies do not share arrays with the live store."""
        sim = create_grid_simulation(n_particles=9)
        snapshot = sim.state.copy()
        sim.run(5, dt=0.05)
        assert snapshot.step == 0
        assert not np.shares_memory(snapshot.positions, sim.state.positions)


class TestFrameClock:
    """Tests for wall-clock frame timing."""

    def test_elapsed_between_ticks(self):
        """Each tick reports the time since the previous one."""
        times = iter([10.0, 10.25, 10.75])
        clock = FrameClock(clock=lambda: next(times))

        assert clock.tick() == 0.0
        assert clock.tick() == 0.25
        assert clock.tick() == 0.5

    def test_reset(self):
        """After a reset the next tick starts from zero."""
        times = iter([1.0, 2.0, 50.0, 50.5])
        clock = FrameClock(clock=lambda: next(times))

        clock.tick()
        clock.tick()
        clock.reset()
        assert clock.tick() == 0.0
        assert clock.tick() == 0.5

    def test_never_negative(self):
        """A clock that goes backwards yields zero, a valid dt."""
        times = iter([5.0, 4.0])
        clock = FrameClock(clock=lambda: next(times))

        clock.tick()
        assert clock.tick() == 0.0

    def test_drives_simulation(self):
        """Measured time advances the simulation clock."""
        times = iter([0.0, 0.02])
        clock = FrameClock(clock=lambda: next(times))
        sim = create_grid_simulation(n_particles=9)

        sim.step(clock.tick())
        sim.step(clock.tick())

        assert abs(sim.state.time - 0.02) < 1e-12


class TestAdvanceSimulation:
    """Tests for the bare update function."""

    def test_in_place(self):
        """The same state object is updated and returned."""
        state = SimulationState(
            positions=np.array([[0.0, 0.0], [0.5, 0.0]]),
            velocities=np.zeros((2, 2)),
            densities=np.zeros(2)
        )
        params = SimulationConfig().snapshot()
        result = advance_simulation(state, params, 0.016)

        assert result is state
        assert state.step == 1
        assert state.densities[0] > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
