"""Particle-filter grid SLAM building blocks and command-line tools for GFS logs."""

__version__ = "0.1.0"