"""Logging, telemetry and notification helpers."""
