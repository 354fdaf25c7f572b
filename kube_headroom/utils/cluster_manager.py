import os
from typing import List, Optional

import urllib3
from kubernetes import client, config
from kubernetes.config import incluster_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from pydantic import BaseModel

from kube_headroom.models.cluster_components import (
    ClusterComponents,
    Container,
    Namespace,
    Node,
    Pod,
)
from kube_headroom.models.custom_errors import ClusterConnectionError, ListingError
from kube_headroom.models.resources import ResourceList
from kube_headroom.utils.logger import get_module_logger

logger = get_module_logger(__name__)

SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"
IN_CLUSTER_HOST = "kubernetes.default.svc.cluster.local"
IN_CLUSTER_PORT = "443"


class ConnectionConfig(BaseModel):
    '''
    How to reach one cluster. Each ClusterManager builds its own API client
    from this, so independent clusters can be inspected side by side.
    '''
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    in_cluster: bool = False
    service_account_dir: str = SERVICE_ACCOUNT_DIR
    host: str = IN_CLUSTER_HOST
    port: str = IN_CLUSTER_PORT


def _in_cluster_client(connection: ConnectionConfig) -> client.ApiClient:
    loader = incluster_config.InClusterConfigLoader(
        token_filename=os.path.join(connection.service_account_dir, "token"),
        cert_filename=os.path.join(connection.service_account_dir, "ca.crt"),
        environ={
            incluster_config.SERVICE_HOST_ENV_NAME: connection.host,
            incluster_config.SERVICE_PORT_ENV_NAME: connection.port,
        },
    )
    configuration = client.Configuration()
    try:
        loader.load_and_set(configuration)
    except ConfigException as error:
        raise ClusterConnectionError(f"Cannot load in-cluster credentials '{error}'") from error
    return client.ApiClient(configuration)


def create_api_client(connection: ConnectionConfig) -> client.ApiClient:
    if connection.in_cluster or not connection.kubeconfig:
        logger.debug("Using in-cluster service account from %s", connection.service_account_dir)
        return _in_cluster_client(connection)

    if not os.path.exists(connection.kubeconfig):
        raise ClusterConnectionError(f"Kubeconfig file not found: {connection.kubeconfig}")

    logger.debug("Using kubeconfig %s", connection.kubeconfig)
    try:
        return config.new_client_from_config(
            config_file=connection.kubeconfig,
            context=connection.context,
        )
    except ConfigException as error:
        raise ClusterConnectionError(f"Cannot connect to kubernetes '{error}'") from error


def _format_taint(taint) -> str:
    if taint.value:
        return f"{taint.key}={taint.value}:{taint.effect}"
    return f"{taint.key}:{taint.effect}"


class ClusterManager:
    '''
    Reads nodes, namespaces and pods from one cluster.

    Any failing list call raises ListingError; callers never get a partially
    loaded snapshot.
    '''

    def __init__(self, connection: ConnectionConfig, api_client: client.ApiClient = None):
        self.connection = connection
        self.api_client = api_client or create_api_client(connection)
        self.core_api = client.CoreV1Api(self.api_client)

    def load_nodes(self) -> List[Node]:
        try:
            response = self.core_api.list_node()
        except (ApiException, urllib3.exceptions.HTTPError) as error:
            raise ListingError(f"Cannot list nodes '{error}'") from error

        nodes = []
        for item in response.items:
            spec = item.spec
            nodes.append(Node(
                name=item.metadata.name,
                allocatable=ResourceList.from_kubernetes(item.status.allocatable),
                capacity=ResourceList.from_kubernetes(item.status.capacity),
                labels=item.metadata.labels or {},
                taints=[_format_taint(t) for t in (spec.taints or [])] if spec else [],
                unschedulable=bool(spec.unschedulable) if spec else False,
            ))
        logger.debug("Loaded %d node(s)", len(nodes))
        return nodes

    def load_namespaces(self) -> List[str]:
        try:
            response = self.core_api.list_namespace()
        except (ApiException, urllib3.exceptions.HTTPError) as error:
            raise ListingError(f"Cannot list namespaces '{error}'") from error
        return [item.metadata.name for item in response.items]

    def load_pods(self, namespace: str) -> List[Pod]:
        try:
            response = self.core_api.list_namespaced_pod(namespace)
        except (ApiException, urllib3.exceptions.HTTPError) as error:
            raise ListingError(f"Cannot list pods in namespace {namespace} '{error}'") from error

        pods = []
        for item in response.items:
            containers = []
            for container in item.spec.containers or []:
                resources = container.resources
                containers.append(Container(
                    name=container.name,
                    limits=ResourceList.from_kubernetes(resources.limits if resources else None),
                    requests=ResourceList.from_kubernetes(resources.requests if resources else None),
                ))
            pods.append(Pod(
                name=item.metadata.name,
                namespace=namespace,
                node_name=item.spec.node_name or "",
                labels=item.metadata.labels or {},
                phase=(item.status.phase if item.status else None) or "",
                containers=containers,
            ))
        return pods

    def discover_components(self) -> ClusterComponents:
        nodes = self.load_nodes()

        namespaces = []
        for name in self.load_namespaces():
            pods = self.load_pods(name)
            logger.debug("Namespace %s: %d pod(s)", name, len(pods))
            namespaces.append(Namespace(name=name, pods=pods))

        return ClusterComponents(namespaces=namespaces, nodes=nodes)

    def close(self):
        self.api_client.close()
