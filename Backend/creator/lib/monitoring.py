# creator/lib/monitoring.py
from fastapi import FastAPI
from prometheus_client.registry import CollectorRegistry as Registry
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator
from creator.core.logging import log

# Create a separate registry
registry = Registry()

active_creations = Gauge(
    'creator_active_creations',
    'Number of creation runs currently in progress',
    registry=registry
)

finished_creations = Counter(
    'creator_finished_creations',
    'Finished creation runs by final status',
    ['status'],
    registry=registry
)


def set_active_creations(n: int):
    """Sets the value of the active creations gauge."""
    active_creations.set(n)


def record_finished_creation(status: str):
    finished_creations.labels(status=status).inc()


def register_monitoring(app: FastAPI):
    """
    Registers Prometheus monitoring on the FastAPI app and exposes /metrics.
    """
    instrumentator = Instrumentator(
        excluded_handlers=["/metrics"],
        registry=registry
    ).instrument(app)

    instrumentator.expose(app, include_in_schema=False, should_gzip=True)

    log("MONITORING", "Prometheus instrumentation registered at /metrics.")
