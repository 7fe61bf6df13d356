"""Electron/quark N-body toy simulation with a free-flying camera."""
__version__ = "0.1.0"
