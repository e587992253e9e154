"""
Reserved Capacity Producer
Reconciles one MetricsProducer: lists nodes and pods, aggregates, reports
"""

import logging
from kubernetes import client

from reserved_capacity.models import MetricsProducer
from reserved_capacity.node_utils import format_label_selector, is_ready_and_schedulable
from reserved_capacity.prometheus_exporter import MetricKind
from reserved_capacity.reservations import Reservations

logger = logging.getLogger(__name__)


class ReconcileError(Exception):
    """A cluster query failed; nothing was reported for this pass"""


class ReservedCapacityProducer:
    """Computes reserved capacity for the nodes a MetricsProducer selects"""

    def __init__(self, metrics_producer: MetricsProducer, core_v1: client.CoreV1Api, metrics_sink):
        """
        Args:
            metrics_producer: Resource being reconciled; its status is updated in place
            core_v1: Kubernetes core API used to list nodes and pods
            metrics_sink: Object with record(resource, kind, name, namespace, value)
        """
        self.metrics_producer = metrics_producer
        self.core_v1 = core_v1
        self.metrics_sink = metrics_sink

    def reconcile(self) -> Reservations:
        """
        Run one reconciliation pass.

        Raises:
            ReconcileError: if listing nodes or pods fails. Metrics and status
                are left untouched in that case.
        """
        spec = self.metrics_producer.reserved_capacity
        node_selector = spec.node_selector if spec else {}

        try:
            nodes = self.core_v1.list_node(label_selector=format_label_selector(node_selector))
        except Exception as e:
            raise ReconcileError(f"Listing nodes for {node_selector}, {e}") from e

        reservations = Reservations()
        for node in nodes.items:
            # Unschedulable nodes would dilute the denominator before the
            # scheduler can place anything on them
            if not is_ready_and_schedulable(node):
                logger.debug(f"{self.metrics_producer.key} - Skipping node {node.metadata.name}")
                continue

            try:
                pods = self.core_v1.list_pod_for_all_namespaces(
                    field_selector=f"spec.nodeName={node.metadata.name}"
                )
            except Exception as e:
                raise ReconcileError(f"Listing pods for {node.metadata.name}, {e}") from e
            reservations.add(node, pods.items)

        self.record(reservations)
        return reservations

    def record(self, reservations: Reservations):
        """Send observations to the metrics sink and rebuild the status map"""
        name = self.metrics_producer.name
        namespace = self.metrics_producer.namespace

        status = {}
        for resource, aggregate in reservations.items():
            self.metrics_sink.record(resource, MetricKind.UTILIZATION, name, namespace, aggregate.utilization())
            self.metrics_sink.record(resource, MetricKind.RESERVED, name, namespace, float(aggregate.reserved))
            self.metrics_sink.record(resource, MetricKind.CAPACITY, name, namespace, float(aggregate.capacity))
            status[resource] = aggregate.status()

        self.metrics_producer.status.reserved_capacity = status
        logger.info(f"{self.metrics_producer.key} - Reserved capacity: {status}")
