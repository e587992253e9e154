"""
Shared builders for Kubernetes model objects
"""
import pytest
from kubernetes import client


def build_node(name, allocatable=None, ready=True, unschedulable=None, labels=None):
    conditions = [
        client.V1NodeCondition(type="Ready", status="True" if ready else "False")
    ]
    return client.V1Node(
        metadata=client.V1ObjectMeta(name=name, labels=labels or {}),
        spec=client.V1NodeSpec(unschedulable=unschedulable),
        status=client.V1NodeStatus(allocatable=allocatable, conditions=conditions),
    )


def build_pod(name, *container_requests, node_name=None, limits=None):
    containers = [
        client.V1Container(
            name=f"{name}-{i}",
            resources=client.V1ResourceRequirements(requests=requests, limits=limits),
        )
        for i, requests in enumerate(container_requests)
    ]
    if not containers:
        containers = [client.V1Container(name=f"{name}-0")]
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name=name, namespace="default"),
        spec=client.V1PodSpec(containers=containers, node_name=node_name),
    )


@pytest.fixture
def make_node():
    return build_node


@pytest.fixture
def make_pod():
    return build_pod
