from pydantic import BaseModel

from kube_headroom.engine.linker import LinkResult, link
from kube_headroom.models.cluster_components import ClusterComponents
from kube_headroom.utils.logger import get_module_logger

logger = get_module_logger(__name__)


class AccountingSummary(BaseModel):
    pods_counted: int = 0
    pods_skipped: int = 0
    containers_counted: int = 0
    # Containers with neither a cpu nor a memory limit
    containers_skipped: int = 0


class HeadroomReport(BaseModel):
    components: ClusterComponents
    links: LinkResult
    summary: AccountingSummary


def account(components: ClusterComponents) -> AccountingSummary:
    '''
    Charge every linked pod to its node's available ledger.

    Each pod takes one pod slot and each container its cpu and memory limits.
    Pods without a node_ref are skipped. Running this twice over the same
    snapshot counts everything twice; build a new snapshot per run.
    '''
    index = components.node_index()
    summary = AccountingSummary()

    for _, pod in components.pods():
        node = index.get(pod.node_ref) if pod.node_ref is not None else None
        if node is None:
            summary.pods_skipped += 1
            continue

        node.available.decrement_pod_slot()
        summary.pods_counted += 1

        for container in pod.containers:
            if node.available.decrement_by_limits(container.limits):
                summary.containers_counted += 1
            else:
                summary.containers_skipped += 1

    logger.debug(
        "Accounted %d pod(s), skipped %d; %d container(s) without limits",
        summary.pods_counted, summary.pods_skipped, summary.containers_skipped,
    )
    return summary


def compute_headroom(components: ClusterComponents) -> HeadroomReport:
    """Link pods to nodes, then run a single accounting pass."""
    links = link(components)
    summary = account(components)
    return HeadroomReport(components=components, links=links, summary=summary)
