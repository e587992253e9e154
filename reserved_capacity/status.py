"""
Status Writer
Persists the reserved capacity map onto the MetricsProducer status subresource
"""

import logging
from kubernetes import client

from reserved_capacity.models import MetricsProducer

logger = logging.getLogger(__name__)


class StatusWriter:
    """Patch MetricsProducer status through the custom objects API"""

    def __init__(self, custom_api: client.CustomObjectsApi, group: str, version: str,
                 plural: str, dry_run: bool = False):
        self.custom_api = custom_api
        self.group = group
        self.version = version
        self.plural = plural
        self.dry_run = dry_run

    def write(self, metrics_producer: MetricsProducer):
        """Write status; raises ApiException on failure"""
        body = metrics_producer.status_patch()

        if self.dry_run:
            logger.info(f"[DRY RUN] Would patch {metrics_producer.key} status: {body}")
            return

        self.custom_api.patch_namespaced_custom_object_status(
            group=self.group,
            version=self.version,
            namespace=metrics_producer.namespace,
            plural=self.plural,
            name=metrics_producer.name,
            body=body
        )
        logger.debug(f"Patched {metrics_producer.key} status")
