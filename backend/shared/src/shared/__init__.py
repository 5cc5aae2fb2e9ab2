"""Shared models and services for the Layback Garments backend."""

__version__ = "0.1.0"
