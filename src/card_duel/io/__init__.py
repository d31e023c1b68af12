"""Serialization helpers."""
