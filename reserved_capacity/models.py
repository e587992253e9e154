"""
MetricsProducer Resource Model
Typed view of the MetricsProducer custom resource
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ReservedCapacitySpec:
    """Selects the nodes whose reserved capacity is measured"""
    node_selector: Dict[str, str] = field(default_factory=dict)


@dataclass
class MetricsProducerStatus:
    """Observed state written back to the resource"""
    reserved_capacity: Optional[Dict[str, str]] = None


@dataclass
class MetricsProducer:
    """A MetricsProducer custom resource"""
    name: str
    namespace: str
    reserved_capacity: Optional[ReservedCapacitySpec] = None
    status: MetricsProducerStatus = field(default_factory=MetricsProducerStatus)
    # Resource keys present in status.reservedCapacity when last read
    observed_resources: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "MetricsProducer":
        """Build from the dict returned by CustomObjectsApi"""
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        status = obj.get("status") or {}

        reserved_capacity = None
        if spec.get("reservedCapacity") is not None:
            reserved_capacity = ReservedCapacitySpec(
                node_selector=dict(spec["reservedCapacity"].get("nodeSelector") or {})
            )

        existing = status.get("reservedCapacity")
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            reserved_capacity=reserved_capacity,
            status=MetricsProducerStatus(
                reserved_capacity=dict(existing) if existing is not None else None
            ),
            observed_resources=sorted(existing or {}),
        )

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def status_patch(self) -> Dict[str, Any]:
        """
        Body for a merge patch of the status subresource.

        Resources read from the server but absent now are sent as None so
        the merge patch deletes them.
        """
        current = dict(self.status.reserved_capacity or {})
        body: Dict[str, Optional[str]] = {
            resource: None for resource in self.observed_resources if resource not in current
        }
        body.update(current)
        return {"status": {"reservedCapacity": body}}
