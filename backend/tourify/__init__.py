# backend/tourify/__init__.py
"""Tourify tour-booking marketplace backend."""

__version__ = "1.0.0"
