"""Deterministic game engines."""
