"""
Configuration Loader
Reads operator settings from the environment with optional ConfigMap overrides
"""

import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from kubernetes import client

from reserved_capacity.config_validator import ConfigValidator

logger = logging.getLogger(__name__)


@dataclass
class OperatorConfig:
    """Operator configuration"""
    check_interval: int = 10
    metrics_port: int = 8080
    watch_namespace: Optional[str] = None
    crd_group: str = "autoscaling.karpenter.sh"
    crd_version: str = "v1alpha1"
    crd_plural: str = "metricsproducers"
    dry_run: bool = False
    log_level: str = "INFO"
    log_format: str = "json"


class ConfigLoader:
    """Load configuration from environment and ConfigMap"""

    def __init__(self, core_v1: Optional[client.CoreV1Api] = None,
                 namespace: str = "karpenter", configmap_name: str = "reserved-capacity-config"):
        self.core_v1 = core_v1
        self.namespace = namespace
        self.configmap_name = configmap_name
        self.config: Optional[OperatorConfig] = None

    def load_config(self) -> OperatorConfig:
        """
        Load configuration from environment variables, then apply ConfigMap
        values on top when a Kubernetes client is available.

        Raises:
            ValueError: if any value fails validation
        """
        values = self._read(os.environ)

        if self.core_v1 is not None:
            configmap_values = self._load_from_configmap()
            if configmap_values:
                values.update(configmap_values)
                logger.info(f"Configuration overridden from ConfigMap {self.namespace}/{self.configmap_name}")

        self.config = self._build(values)
        logger.info(
            f"Configuration loaded: check_interval={self.config.check_interval}s, "
            f"metrics_port={self.config.metrics_port}, "
            f"watch_namespace={self.config.watch_namespace or '<all>'}, "
            f"dry_run={self.config.dry_run}"
        )
        return self.config

    def _read(self, source) -> Dict[str, str]:
        """Pick recognised keys out of a mapping of upper-case names"""
        keys = (
            "CHECK_INTERVAL", "METRICS_PORT", "WATCH_NAMESPACE", "CRD_GROUP",
            "CRD_VERSION", "CRD_PLURAL", "DRY_RUN", "LOG_LEVEL", "LOG_FORMAT",
        )
        return {key: source[key] for key in keys if key in source}

    def _load_from_configmap(self) -> Optional[Dict[str, str]]:
        """Load overrides from ConfigMap; a missing ConfigMap is not an error"""
        try:
            configmap = self.core_v1.read_namespaced_config_map(
                name=self.configmap_name,
                namespace=self.namespace
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                logger.debug(f"ConfigMap {self.configmap_name} not found")
                return None
            raise

        if not configmap.data:
            return None
        return self._read({key.upper(): value for key, value in configmap.data.items()})

    def _build(self, values: Dict[str, Any]) -> OperatorConfig:
        defaults = OperatorConfig()
        return OperatorConfig(
            check_interval=ConfigValidator.validate_check_interval(
                values.get("CHECK_INTERVAL", str(defaults.check_interval))
            ),
            metrics_port=ConfigValidator.validate_port(
                values.get("METRICS_PORT", str(defaults.metrics_port)), "METRICS_PORT"
            ),
            watch_namespace=values.get("WATCH_NAMESPACE", "").strip() or None,
            crd_group=ConfigValidator.validate_required(values.get("CRD_GROUP", defaults.crd_group), "CRD_GROUP"),
            crd_version=ConfigValidator.validate_required(values.get("CRD_VERSION", defaults.crd_version), "CRD_VERSION"),
            crd_plural=ConfigValidator.validate_required(values.get("CRD_PLURAL", defaults.crd_plural), "CRD_PLURAL"),
            dry_run=ConfigValidator.parse_bool(values.get("DRY_RUN", "false")),
            log_level=ConfigValidator.validate_log_level(values.get("LOG_LEVEL", defaults.log_level)),
            log_format=ConfigValidator.validate_log_format(values.get("LOG_FORMAT", defaults.log_format)),
        )
