"""
Reservation Aggregation
Sums allocatable capacity and pod resource requests per resource name
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Tuple

from kubernetes import client

from reserved_capacity.quantity import Quantity


@dataclass
class ResourceAggregate:
    """Reserved and capacity totals for a single resource name"""
    reserved: Quantity = field(default_factory=Quantity)
    capacity: Quantity = field(default_factory=Quantity)

    def add_capacity(self, quantity: Quantity):
        self.capacity = self.capacity + quantity

    def add_reserved(self, quantity: Quantity):
        self.reserved = self.reserved + quantity

    def utilization(self) -> float:
        """
        Reserved divided by capacity.

        Returns NaN when no capacity is known, so an unknown denominator is
        never confused with an idle resource (0.0).
        """
        capacity = float(self.capacity)
        if capacity == 0:
            return math.nan
        return float(self.reserved) / capacity

    def status(self) -> str:
        """Display string such as '42.50%, 512Mi/1Gi'"""
        utilization = self.utilization()
        if math.isnan(utilization):
            percent = "NaN%"
        else:
            percent = f"{utilization * 100:.2f}%"
        return f"{percent}, {self.reserved}/{self.capacity}"


class Reservations:
    """Per-resource reservation totals for one reconciliation pass"""

    def __init__(self):
        self.resources: Dict[str, ResourceAggregate] = {}

    def _aggregate_for(self, resource: str) -> ResourceAggregate:
        aggregate = self.resources.get(resource)
        if aggregate is None:
            aggregate = ResourceAggregate()
            self.resources[resource] = aggregate
        return aggregate

    def add(self, node: client.V1Node, pods: Iterable[client.V1Pod]):
        """
        Add a node's allocatable capacity and its pods' container requests.

        Resources requested by pods but missing from every node's allocatable
        map still get an entry, with zero capacity.
        """
        allocatable = (node.status.allocatable if node.status else None) or {}
        for resource, quantity in allocatable.items():
            self._aggregate_for(resource).add_capacity(Quantity.parse(quantity))

        for pod in pods:
            if not pod.spec or not pod.spec.containers:
                continue
            for container in pod.spec.containers:
                if not container.resources or not container.resources.requests:
                    continue
                for resource, quantity in container.resources.requests.items():
                    self._aggregate_for(resource).add_reserved(Quantity.parse(quantity))

    def items(self) -> Iterator[Tuple[str, ResourceAggregate]]:
        """Iterate aggregates ordered by resource name"""
        for resource in sorted(self.resources):
            yield resource, self.resources[resource]

    def __len__(self) -> int:
        return len(self.resources)

    def __contains__(self, resource: str) -> bool:
        return resource in self.resources

    def __getitem__(self, resource: str) -> ResourceAggregate:
        return self.resources[resource]
