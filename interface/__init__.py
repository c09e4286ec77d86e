"""Outer surfaces: interactive CLI, UCI protocol loop, REST API."""
