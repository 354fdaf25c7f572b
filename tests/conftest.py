"""
Shared pytest fixtures for the headroom tests.
"""

import pytest

from kube_headroom.models.cluster_components import (
    ClusterComponents,
    Container,
    Namespace,
    Node,
    Pod,
)
from kube_headroom.models.resources import ResourceList


def make_container(name="app", cpu=None, memory=None, req_cpu=None, req_memory=None):
    return Container(
        name=name,
        limits=ResourceList(cpu=cpu, memory=memory),
        requests=ResourceList(cpu=req_cpu, memory=req_memory),
    )


def make_node(name, cpu="2", memory="4096Mi", pods="10", capacity=None, labels=None):
    capacity = capacity or {"cpu": cpu, "memory": memory, "pods": pods}
    return Node(
        name=name,
        allocatable=ResourceList(cpu=cpu, memory=memory, pods=pods),
        capacity=ResourceList(**capacity),
        labels=labels or {},
    )


@pytest.fixture
def example_components():
    """One node, two pods: one with limits, one without."""
    node = make_node("n1", cpu="2000m", memory="4096Mi", pods="10")
    p1 = Pod(name="p1", namespace="default", node_name="n1",
             containers=[make_container(cpu="500m", memory="512Mi")])
    p2 = Pod(name="p2", namespace="default", node_name="n1",
             containers=[make_container(cpu="0", memory="0")])
    return ClusterComponents(
        namespaces=[Namespace(name="default", pods=[p1, p2])],
        nodes=[node],
    )


@pytest.fixture
def multi_node_components():
    """Two nodes, three namespaces, including pods that cannot be linked."""
    nodes = [
        make_node("worker-a", cpu="4", memory="8Gi", pods="110",
                  capacity={"cpu": "4", "memory": "8Gi", "pods": "110"}),
        make_node("worker-b", cpu="3500m", memory="7Gi", pods="50",
                  capacity={"cpu": "4", "memory": "8Gi", "pods": "60"}),
    ]
    namespaces = [
        Namespace(name="default", pods=[
            Pod(name="web-1", node_name="worker-a", containers=[
                make_container("nginx", cpu="250m", memory="256Mi"),
                make_container("sidecar", cpu="100m", memory="64Mi"),
            ]),
            Pod(name="pending", node_name="", containers=[
                make_container("nginx", cpu="1", memory="1Gi"),
            ]),
        ]),
        Namespace(name="kube-system", pods=[
            Pod(name="dns", node_name="worker-b", containers=[
                make_container("coredns", cpu="100m", memory="170Mi", req_cpu="100m", req_memory="70Mi"),
            ]),
            Pod(name="proxy", node_name="worker-a", containers=[
                make_container("kube-proxy"),
            ]),
        ]),
        Namespace(name="batch", pods=[
            Pod(name="job-1", node_name="worker-b", containers=[
                make_container("worker", cpu="1500m", memory="2Gi"),
            ]),
            Pod(name="ghost", node_name="worker-c", containers=[
                make_container("worker", cpu="2", memory="2Gi"),
            ]),
        ]),
    ]
    return ClusterComponents(namespaces=namespaces, nodes=nodes)
