"""Liveness and readiness endpoint."""
