"""Prometheus metrics for monitoring with exemplar support."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Custom registry so tests and multiple app instances never collide with the default
REGISTRY = CollectorRegistry()

# Covers response times from 1ms to 10s
DEFAULT_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently being processed",
    ["method"],
    registry=REGISTRY,
)

# Database metrics
database_query_duration_seconds = Histogram(
    "database_query_duration_seconds",
    "Database query duration in seconds",
    ["operation"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# Task store metrics
task_mutations_total = Counter(
    "task_mutations_total",
    "Task mutations committed to the store",
    ["operation"],
    registry=REGISTRY,
)

# Reminder engine metrics
reminder_notifications_total = Counter(
    "reminder_notifications_total",
    "In-app reminder notifications emitted",
    registry=REGISTRY,
)

reminder_desktop_notifications_total = Counter(
    "reminder_desktop_notifications_total",
    "Desktop notification mirrors raised",
    registry=REGISTRY,
)

reminder_sessions_active = Gauge(
    "reminder_sessions_active",
    "Mounted reminder view sessions",
    registry=REGISTRY,
)

reminder_tick_duration_seconds = Histogram(
    "reminder_tick_duration_seconds",
    "Reminder evaluation tick duration in seconds",
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# Change feed metrics
change_feed_events_total = Counter(
    "change_feed_events_total",
    "Task change events published",
    ["operation"],
    registry=REGISTRY,
)

change_feed_dropped_total = Counter(
    "change_feed_dropped_total",
    "Task change events dropped because a subscriber queue was full",
    registry=REGISTRY,
)
