"""Prometheus metrics infrastructure."""

from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .prometheus import REGISTRY

__all__ = ["CONTENT_TYPE_LATEST", "REGISTRY", "generate_latest"]
