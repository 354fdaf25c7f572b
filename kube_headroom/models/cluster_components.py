from typing import Dict, List, Optional
from pydantic import BaseModel, Field, model_validator

from kube_headroom.models.resources import ResourceLedger, ResourceList


class Container(BaseModel):
    name: str
    limits: ResourceList = Field(default_factory=ResourceList)
    requests: ResourceList = Field(default_factory=ResourceList)

class Pod(BaseModel):
    name: str
    namespace: str = ""
    # Node name as read from the cluster, empty when the pod is not scheduled
    node_name: str = ""
    labels: Dict[str, str] = {}
    phase: str = ""
    containers: List[Container] = []
    # Key into ClusterComponents.node_index(), set by the linker
    node_ref: Optional[str] = None

    @property
    def is_linked(self) -> bool:
        return self.node_ref is not None

class Namespace(BaseModel):
    name: str
    pods: List[Pod] = []

class Node(BaseModel):
    name: str
    allocatable: ResourceList = Field(default_factory=ResourceList)
    capacity: ResourceList = Field(default_factory=ResourceList)
    available: Optional[ResourceLedger] = None
    labels: Dict[str, str] = {}
    taints: List[str] = []
    unschedulable: bool = False

    @model_validator(mode="after")
    def seed_available(self):
        if self.available is None:
            self.available = ResourceLedger.seed(self.allocatable)
        return self


class ClusterComponents(BaseModel):
    namespaces: List[Namespace] = []
    nodes: List[Node] = []

    def node_index(self) -> Dict[str, Node]:
        # Later nodes overwrite earlier ones, so a duplicated name resolves
        # to the last node listed
        return {node.name: node for node in self.nodes}

    def get_node(self, name: Optional[str]) -> Optional[Node]:
        if not name:
            return None
        return self.node_index().get(name)

    def pods(self):
        for namespace in self.namespaces:
            for pod in namespace.pods:
                yield namespace, pod
