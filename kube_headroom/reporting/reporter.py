import re
from collections import defaultdict
from typing import Dict, List, Pattern

from kube_headroom.engine.accounting import HeadroomReport
from kube_headroom.models.cluster_components import Node
from kube_headroom.models.resources import ResourceList


def format_node_line(node: Node) -> str:
    '''
    One-line headroom summary: CPU in millicores, memory in MiB (truncated),
    available pod slots against the node's total pod capacity.
    '''
    return "({}) Available/Total: \tCPU:{}/{} \tMEM: {}/{}\t POD: {}/{}".format(
        node.name,
        node.available.cpu.milli_value(), node.allocatable.cpu.milli_value(),
        node.available.memory.mebibytes(), node.allocatable.memory.mebibytes(),
        str(node.available.pods), str(node.capacity.pods),
    )


def _resources(resources: ResourceList) -> Dict:
    return {
        "cpu_millicores": resources.cpu.milli_value(),
        "memory_bytes": resources.memory.value(),
        "memory_mib": resources.memory.mebibytes(),
        "pods": resources.pods.value(),
    }


def node_summary(node: Node, pods: List[Dict] = None) -> Dict:
    return {
        "name": node.name,
        "labels": dict(node.labels),
        "taints": list(node.taints),
        "unschedulable": node.unschedulable,
        "allocatable": _resources(node.allocatable),
        "capacity": _resources(node.capacity),
        "available": _resources(node.available),
        "pods": list(pods or []),
    }


def compile_node_patterns(pattern: str = ".*") -> List[Pattern]:
    '''Compile comma separated node name regexes; raises re.error when invalid.'''
    return [re.compile(p.strip()) for p in pattern.split(",") if p.strip()]


def filter_nodes(nodes: List[Node], pattern: str = ".*") -> List[Node]:
    '''Keep nodes whose name fully matches any of the comma separated regexes.'''
    patterns = compile_node_patterns(pattern)
    if not patterns:
        return list(nodes)
    return [n for n in nodes if any(p.fullmatch(n.name) for p in patterns)]


def _pods_by_node(report: HeadroomReport) -> Dict[str, List[Dict]]:
    bound = defaultdict(list)
    for namespace, pod in report.components.pods():
        if pod.node_ref is not None:
            bound[pod.node_ref].append({
                "namespace": namespace.name,
                "name": pod.name,
                "phase": pod.phase,
            })
    return bound


def build_report(report: HeadroomReport, pattern: str = ".*") -> Dict:
    nodes = filter_nodes(report.components.nodes, pattern)
    bound = _pods_by_node(report)
    return {
        "nodes": [node_summary(n, bound.get(n.name)) for n in nodes],
        "accounting": report.summary.model_dump(),
        "unresolved_pods": [p.model_dump() for p in report.links.unresolved],
    }


def render_text(report: HeadroomReport, pattern: str = ".*") -> str:
    nodes = filter_nodes(report.components.nodes, pattern)
    return "\n".join(format_node_line(n) for n in nodes)
