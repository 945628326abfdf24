"""Utilities: runtime validation and sample graph generation."""
