"""YAML-backed game configuration."""
