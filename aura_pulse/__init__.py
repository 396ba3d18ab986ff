"""Aura Pulse: velocity, engineering rigor and impact scores for GitHub repositories."""

__version__ = "0.1.0"
