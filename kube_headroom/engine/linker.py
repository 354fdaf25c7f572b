from typing import List

from pydantic import BaseModel

from kube_headroom.models.cluster_components import ClusterComponents
from kube_headroom.utils.logger import get_module_logger

logger = get_module_logger(__name__)


class UnresolvedPod(BaseModel):
    namespace: str
    pod: str
    node_name: str = ""

    @property
    def is_unscheduled(self) -> bool:
        return self.node_name == ""


class LinkResult(BaseModel):
    linked: int = 0
    unresolved: List[UnresolvedPod] = []


def link(components: ClusterComponents) -> LinkResult:
    '''
    Point every pod at the node it is bound to.

    Pods store the node name as node_ref when that name exists in the
    snapshot's node index, and None otherwise. Nodes are not modified.
    '''
    index = components.node_index()
    result = LinkResult()

    for namespace, pod in components.pods():
        if pod.node_name in index:
            pod.node_ref = pod.node_name
            result.linked += 1
            continue

        pod.node_ref = None
        result.unresolved.append(UnresolvedPod(
            namespace=namespace.name,
            pod=pod.name,
            node_name=pod.node_name,
        ))
        if pod.node_name == "":
            logger.debug("Pod %s/%s is not scheduled", namespace.name, pod.name)
        else:
            logger.debug(
                "Pod %s/%s is bound to unknown node %s",
                namespace.name, pod.name, pod.node_name,
            )

    unknown = [p for p in result.unresolved if not p.is_unscheduled]
    if unknown:
        logger.warning(
            "%d pod(s) reference nodes missing from the snapshot and are not counted",
            len(unknown),
        )
    logger.debug("Linked %d pod(s) to %d node(s)", result.linked, len(index))
    return result
