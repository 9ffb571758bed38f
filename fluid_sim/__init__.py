#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
SPH Fluid Canvas
================================================================================

Project:        Week 2 Project 1: SPH Fluid Canvas
Description:    Real-time 2D smoothed-particle hydrodynamics water simulation
                with live parameter tuning

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 29, 2026
Last Updated:   January 29, 2026

License:        MIT License
================================================================================

This package implements a brute-force SPH fluid simulation featuring:
- Density estimation with a compactly supported smoothing kernel
- Pressure forces from a linear equation of state
- Semi-implicit Euler integration with optional gravity
- Damped elastic collisions with a rectangular container
- Numba-compiled all-pairs passes

Modules:
    - physics: Kernels, density, pressure, integration and boundary passes
    - simulation: Configuration, particle store and the per-frame update
    - diagnostics: Health checks, density field sampling, stability tracking
    - visualization: Rendering of particles, density fields and energies
"""

__version__ = "1.0.0"
__author__ = "Ryan Kamp"
