"""
Tests for reservation aggregation
"""
import math
import itertools
import pytest

from reserved_capacity.quantity import Quantity
from reserved_capacity.reservations import ResourceAggregate, Reservations


class TestResourceAggregate:
    """Test ResourceAggregate"""

    def test_starts_at_zero(self):
        """Test both totals start empty"""
        aggregate = ResourceAggregate()
        assert aggregate.reserved.is_zero()
        assert aggregate.capacity.is_zero()

    def test_add_capacity_and_reserved(self):
        """Test accumulation into each field"""
        aggregate = ResourceAggregate()
        aggregate.add_capacity(Quantity.parse("1Gi"))
        aggregate.add_capacity(Quantity.parse("1Gi"))
        aggregate.add_reserved(Quantity.parse("512Mi"))

        assert str(aggregate.capacity) == "2Gi"
        assert str(aggregate.reserved) == "512Mi"

    def test_utilization(self):
        """Test reserved over capacity"""
        aggregate = ResourceAggregate(
            reserved=Quantity.parse("512Mi"),
            capacity=Quantity.parse("1Gi"),
        )
        assert aggregate.utilization() == 0.5

    def test_utilization_nan_on_zero_capacity(self):
        """Zero capacity yields NaN, not zero and not an error"""
        aggregate = ResourceAggregate(reserved=Quantity.parse("1"))
        assert math.isnan(aggregate.utilization())

    def test_utilization_zero_when_idle(self):
        """Idle capacity yields 0.0"""
        aggregate = ResourceAggregate(capacity=Quantity.parse("4"))
        assert aggregate.utilization() == 0.0

    def test_status_text(self):
        """Test two-decimal percentage with native quantities"""
        aggregate = ResourceAggregate(
            reserved=Quantity.parse("435Mi"),
            capacity=Quantity.parse("1Gi"),
        )
        assert aggregate.status() == "42.48%, 435Mi/1Gi"

    def test_status_text_without_capacity(self):
        """Test undefined utilization renders as NaN"""
        aggregate = ResourceAggregate(reserved=Quantity.parse("100Mi"))
        assert aggregate.status() == "NaN%, 100Mi/0"


class TestReservations:
    """Test Reservations.add"""

    def test_scenario_single_node_two_pods(self, make_node, make_pod):
        """One 2-core node, two 500m pods: half reserved"""
        reservations = Reservations()
        reservations.add(
            make_node("node-1", {"cpu": "2"}),
            [make_pod("a", {"cpu": "500m"}), make_pod("b", {"cpu": "500m"})],
        )

        cpu = reservations["cpu"]
        assert cpu.capacity == Quantity.parse("2")
        assert cpu.reserved == Quantity.parse("1")
        assert cpu.utilization() == 0.5
        assert cpu.status() == "50.00%, 1/2"

    def test_scenario_zero_capacity(self, make_node, make_pod):
        """Zero allocatable memory gives NaN utilization"""
        reservations = Reservations()
        reservations.add(
            make_node("node-1", {"memory": "0"}),
            [make_pod("a", {"memory": "100Mi"})],
        )

        memory = reservations["memory"]
        assert memory.capacity.is_zero()
        assert memory.reserved == Quantity.parse("100Mi")
        assert math.isnan(memory.utilization())

    def test_scenario_no_pods(self, make_node):
        """Two nodes and no pods: nothing reserved"""
        reservations = Reservations()
        reservations.add(make_node("node-1", {"cpu": "1"}), [])
        reservations.add(make_node("node-2", {"cpu": "1"}), [])

        cpu = reservations["cpu"]
        assert cpu.capacity == Quantity.parse("2")
        assert cpu.reserved.is_zero()
        assert cpu.utilization() == 0.0

    def test_scenario_request_only_resource(self, make_node, make_pod):
        """Requested resource absent from every node still appears"""
        reservations = Reservations()
        reservations.add(
            make_node("node-1", {"cpu": "4", "memory": "8Gi"}),
            [make_pod("gpu-job", {"nvidia.com/gpu": "1"})],
        )

        assert "nvidia.com/gpu" in reservations
        gpu = reservations["nvidia.com/gpu"]
        assert gpu.capacity.is_zero()
        assert gpu.reserved == Quantity.parse("1")
        assert math.isnan(gpu.utilization())

    def test_all_resource_names_tracked(self, make_node, make_pod):
        """Test pods, memory and extended resources flow through the same path"""
        reservations = Reservations()
        reservations.add(
            make_node("node-1", {"cpu": "4", "memory": "8Gi", "pods": "110", "example.com/fpga": "2"}),
            [make_pod("a", {"cpu": "1", "memory": "2Gi", "example.com/fpga": "1"})],
        )

        assert sorted(reservations.resources) == ["cpu", "example.com/fpga", "memory", "pods"]
        assert reservations["example.com/fpga"].utilization() == 0.5
        assert reservations["memory"].status() == "25.00%, 2Gi/8Gi"
        assert reservations["pods"].reserved.is_zero()

    def test_multiple_containers_summed(self, make_node, make_pod):
        """Test every container's requests are counted"""
        reservations = Reservations()
        reservations.add(
            make_node("node-1", {"cpu": "2"}),
            [make_pod("a", {"cpu": "250m"}, {"cpu": "250m"}, {"cpu": "1"})],
        )
        assert str(reservations["cpu"].reserved) == "1500m"

    def test_limits_ignored(self, make_node, make_pod):
        """Test limits do not count as reservations"""
        reservations = Reservations()
        reservations.add(
            make_node("node-1", {"cpu": "2"}),
            [make_pod("a", {"cpu": "100m"}, limits={"cpu": "2"})],
        )
        assert str(reservations["cpu"].reserved) == "100m"

    def test_missing_requests_and_allocatable(self, make_node, make_pod):
        """Test containers without requests and nodes without allocatable"""
        reservations = Reservations()
        reservations.add(make_node("node-1", None), [make_pod("a")])
        assert len(reservations) == 0

    def test_malformed_quantity_rejected(self, make_node):
        """Test parse errors surface from the quantity type"""
        reservations = Reservations()
        with pytest.raises(ValueError):
            reservations.add(make_node("node-1", {"cpu": "lots"}), [])

    def test_items_sorted(self, make_node):
        """Test reporting order is stable"""
        reservations = Reservations()
        reservations.add(make_node("node-1", {"pods": "110", "cpu": "1", "memory": "1Gi"}), [])
        assert [name for name, _ in reservations.items()] == ["cpu", "memory", "pods"]

    def test_order_independent(self, make_node, make_pod):
        """Test totals do not depend on input order"""
        inputs = [
            (make_node("node-1", {"cpu": "2", "memory": "4Gi"}), [make_pod("a", {"cpu": "300m"})]),
            (make_node("node-2", {"cpu": "4", "memory": "8Gi"}), [make_pod("b", {"memory": "1Gi"}),
                                                                    make_pod("c", {"cpu": "1200m"})]),
            (make_node("node-3", {"cpu": "500m"}), [make_pod("d", {"nvidia.com/gpu": "1"})]),
        ]

        results = set()
        for ordering in itertools.permutations(inputs):
            reservations = Reservations()
            for node, pods in ordering:
                reservations.add(node, list(reversed(pods)))
            results.add(tuple(
                (name, aggregate.reserved.value, aggregate.capacity.value)
                for name, aggregate in reservations.items()
            ))

        assert len(results) == 1
        totals = {name: (reserved, capacity) for name, reserved, capacity in results.pop()}
        assert totals["cpu"] == (Quantity.parse("1500m").value, Quantity.parse("6500m").value)
        assert totals["memory"] == (Quantity.parse("1Gi").value, Quantity.parse("12Gi").value)

    def test_idempotent(self, make_node, make_pod):
        """Test two passes over the same input agree"""
        node = make_node("node-1", {"cpu": "2", "memory": "1Gi"})
        pods = [make_pod("a", {"cpu": "500m", "memory": "128Mi"})]

        first = Reservations()
        first.add(node, pods)
        second = Reservations()
        second.add(node, pods)

        for name, aggregate in first.items():
            assert second[name].reserved == aggregate.reserved
            assert second[name].capacity == aggregate.capacity
