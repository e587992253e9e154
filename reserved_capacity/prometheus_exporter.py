"""
Prometheus Metrics Exporter
Exposes reserved capacity gauges and reconcile health
"""

import logging
from enum import Enum
from typing import Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)

from reserved_capacity import __version__

logger = logging.getLogger(__name__)


class MetricKind(Enum):
    """Observations recorded per resource"""
    UTILIZATION = "utilization"
    RESERVED = "reserved"
    CAPACITY = "capacity"


class PrometheusExporter:
    """Metrics sink for reserved capacity observations"""

    def __init__(self, port: int = 8080, registry: Optional[CollectorRegistry] = None):
        self.port = port
        self.registry = registry if registry is not None else REGISTRY

        self.info = Info(
            'reserved_capacity_producer',
            'Reserved capacity producer information',
            registry=self.registry
        )

        # One gauge per kind, keyed by resource and owning MetricsProducer
        self.gauges = {
            MetricKind.UTILIZATION: Gauge(
                'reserved_capacity_utilization',
                'Ratio of reserved to allocatable capacity (NaN when capacity is zero)',
                ['resource', 'name', 'namespace'],
                registry=self.registry
            ),
            MetricKind.RESERVED: Gauge(
                'reserved_capacity_reserved',
                'Sum of container resource requests on selected nodes',
                ['resource', 'name', 'namespace'],
                registry=self.registry
            ),
            MetricKind.CAPACITY: Gauge(
                'reserved_capacity_capacity',
                'Sum of allocatable resources on selected nodes',
                ['resource', 'name', 'namespace'],
                registry=self.registry
            ),
        }

        self.reconcile_errors = Counter(
            'reserved_capacity_reconcile_errors_total',
            'Total failed reconciliation passes',
            ['name', 'namespace'],
            registry=self.registry
        )

        self.reconcile_duration = Histogram(
            'reserved_capacity_reconcile_duration_seconds',
            'Time to complete a reconciliation pass',
            ['name', 'namespace'],
            registry=self.registry
        )

    def start(self):
        """Start Prometheus metrics server"""
        start_http_server(self.port, registry=self.registry)
        logger.info(f"Prometheus metrics server started on port {self.port}")
        self.info.info({'version': __version__})

    def record(self, resource: str, kind: MetricKind, name: str, namespace: str, value: float):
        """Set one observation for a resource of a MetricsProducer"""
        self.gauges[kind].labels(
            resource=resource,
            name=name,
            namespace=namespace
        ).set(value)

    def record_reconcile_error(self, name: str, namespace: str):
        self.reconcile_errors.labels(name=name, namespace=namespace).inc()

    def record_reconcile_duration(self, name: str, namespace: str, duration: float):
        self.reconcile_duration.labels(name=name, namespace=namespace).observe(duration)
