"""Geometry and file helpers."""
