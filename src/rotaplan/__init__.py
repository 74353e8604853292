"""Rotation planner for a two-operator duty post: one fixed-cycle role, two adaptive roles."""

__version__ = "0.1.0"
