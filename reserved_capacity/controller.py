"""
Reserved Capacity Controller
Periodically reconciles every MetricsProducer with a reservedCapacity spec
"""

import logging
import os
import signal
import sys
import threading
import time
from typing import List, Optional

from kubernetes import client, config as k8s_config

from reserved_capacity import __version__
from reserved_capacity.config_loader import ConfigLoader, OperatorConfig
from reserved_capacity.logging_config import get_logger, setup_structured_logging
from reserved_capacity.models import MetricsProducer
from reserved_capacity.producer import ReconcileError, ReservedCapacityProducer
from reserved_capacity.prometheus_exporter import PrometheusExporter
from reserved_capacity.status import StatusWriter

logger = logging.getLogger(__name__)


class ReservedCapacityController:
    """Drives reconciliation passes on a fixed interval"""

    def __init__(self, config: OperatorConfig, core_v1: client.CoreV1Api,
                 custom_api: client.CustomObjectsApi, exporter: PrometheusExporter,
                 status_writer: Optional[StatusWriter] = None):
        self.config = config
        self.core_v1 = core_v1
        self.custom_api = custom_api
        self.exporter = exporter
        self.status_writer = status_writer or StatusWriter(
            custom_api,
            group=config.crd_group,
            version=config.crd_version,
            plural=config.crd_plural,
            dry_run=config.dry_run
        )
        self.shutdown_event = threading.Event()

    def list_metrics_producers(self) -> List[MetricsProducer]:
        """List MetricsProducers that carry a reservedCapacity spec"""
        if self.config.watch_namespace:
            response = self.custom_api.list_namespaced_custom_object(
                group=self.config.crd_group,
                version=self.config.crd_version,
                namespace=self.config.watch_namespace,
                plural=self.config.crd_plural
            )
        else:
            response = self.custom_api.list_cluster_custom_object(
                group=self.config.crd_group,
                version=self.config.crd_version,
                plural=self.config.crd_plural
            )

        producers = [MetricsProducer.from_dict(item) for item in response.get("items", [])]
        return [p for p in producers if p.reserved_capacity is not None]

    def reconcile_one(self, metrics_producer: MetricsProducer):
        """Compute, record and persist one MetricsProducer"""
        started = time.monotonic()
        producer = ReservedCapacityProducer(metrics_producer, self.core_v1, self.exporter)
        producer.reconcile()
        self.status_writer.write(metrics_producer)
        self.exporter.record_reconcile_duration(
            metrics_producer.name, metrics_producer.namespace, time.monotonic() - started
        )

    def reconcile_all(self) -> int:
        """
        Reconcile every MetricsProducer once.

        A failing producer is logged and counted; the others still run.

        Returns:
            Number of producers reconciled successfully
        """
        succeeded = 0
        for metrics_producer in self.list_metrics_producers():
            try:
                self.reconcile_one(metrics_producer)
                succeeded += 1
            except ReconcileError as e:
                logger.error(f"{metrics_producer.key} - Reconcile failed: {e}", exc_info=True)
                self.exporter.record_reconcile_error(metrics_producer.name, metrics_producer.namespace)
            except client.exceptions.ApiException as e:
                logger.error(f"{metrics_producer.key} - Failed to update status: {e}", exc_info=True)
                self.exporter.record_reconcile_error(metrics_producer.name, metrics_producer.namespace)
            except Exception as e:
                logger.error(f"{metrics_producer.key} - Unexpected error: {e}", exc_info=True)
                self.exporter.record_reconcile_error(metrics_producer.name, metrics_producer.namespace)
        return succeeded

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def handle_signal(signum, frame):
            logger.info(f"Received signal {signum}, initiating graceful shutdown...")
            self.shutdown_event.set()

        signal.signal(signal.SIGTERM, handle_signal)
        signal.signal(signal.SIGINT, handle_signal)

    def run(self):
        """Reconcile until shutdown is requested"""
        logger.info(f"Starting reserved capacity controller (interval {self.config.check_interval}s)")
        iteration = 0

        while not self.shutdown_event.is_set():
            iteration += 1
            try:
                succeeded = self.reconcile_all()
                logger.info(f"Iteration {iteration} - reconciled {succeeded} MetricsProducer(s)")
            except Exception as e:
                logger.error(f"Error in main loop: {e}", exc_info=True)

            if self.shutdown_event.wait(timeout=self.config.check_interval):
                break

        logger.info("Controller stopped")


def load_kube_config():
    """Prefer in-cluster credentials, fall back to local kubeconfig"""
    try:
        k8s_config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except k8s_config.ConfigException:
        k8s_config.load_kube_config()
        logger.info("Loaded local Kubernetes config")


def main():
    """Main entry point"""
    extra_fields = {'component': 'reserved-capacity-producer', 'version': __version__}

    # Environment-based logging until the ConfigMap has been read
    setup_structured_logging(
        log_level=os.getenv('LOG_LEVEL', 'INFO'),
        json_format=os.getenv('LOG_FORMAT', 'json').lower() == 'json',
        extra_fields=extra_fields
    )

    load_kube_config()
    core_v1 = client.CoreV1Api()

    try:
        config_loader = ConfigLoader(
            core_v1=core_v1,
            namespace=os.getenv("CONFIGMAP_NAMESPACE", "karpenter"),
            configmap_name=os.getenv("CONFIGMAP_NAME", "reserved-capacity-config")
        )
        operator_config = config_loader.load_config()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_structured_logging(
        log_level=operator_config.log_level,
        json_format=operator_config.log_format == 'json',
        extra_fields=extra_fields
    )
    log = get_logger(__name__, {'component': 'reserved-capacity-producer'})

    exporter = PrometheusExporter(port=operator_config.metrics_port)
    exporter.start()

    controller = ReservedCapacityController(
        config=operator_config,
        core_v1=core_v1,
        custom_api=client.CustomObjectsApi(),
        exporter=exporter
    )
    controller._setup_signal_handlers()

    try:
        controller.run()
    except Exception as e:
        log.error(f"Fatal error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
