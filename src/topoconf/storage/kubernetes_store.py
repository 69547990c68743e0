# src/topoconf/storage/kubernetes_store.py
"""
ClusterStore backed by the Kubernetes API.
"""

import logging
from typing import List, Optional

from kubernetes_asyncio.client import V1ConfigMap
from kubernetes_asyncio.client.rest import ApiException

from ..core.exceptions import StorageError
from ..core.k8s_client import get_core_v1_api, get_custom_objects_api
from ..models.cluster import (
    KUBELETCONFIG_PLURAL,
    MCO_GROUP,
    MCO_VERSION,
    MCP_PLURAL,
    NRO_GROUP,
    NRO_PLURAL,
    NRO_VERSION,
    KubeletConfigObject,
    ResourceAwarenessDeclaration,
    WorkerPool,
)
from .base_store import ClusterStore

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class KubernetesClusterStore(ClusterStore):
    """
    Reads NUMAResourcesOperator, MachineConfigPool and KubeletConfig objects
    through the CustomObjectsApi and manages ConfigMaps through the CoreV1Api.
    """

    def __init__(self, core_api=None, custom_api=None):
        self._core_api = core_api
        self._custom_api = custom_api

    async def _core(self):
        if not self._core_api:
            self._core_api = await get_core_v1_api()
        if not self._core_api:
            raise StorageError("Kubernetes client not configured")
        return self._core_api

    async def _custom(self):
        if not self._custom_api:
            self._custom_api = await get_custom_objects_api()
        if not self._custom_api:
            raise StorageError("Kubernetes client not configured")
        return self._custom_api

    async def get_declaration(self, name: str) -> Optional[ResourceAwarenessDeclaration]:
        api = await self._custom()
        try:
            obj = await api.get_cluster_custom_object(
                group=NRO_GROUP, version=NRO_VERSION, plural=NRO_PLURAL, name=name
            )
        except ApiException as e:
            if e.status == HTTP_NOT_FOUND:
                return None
            raise StorageError(f"cannot get {NRO_PLURAL} {name!r}: {e}") from e
        return ResourceAwarenessDeclaration.from_k8s(obj)

    async def list_worker_pools(self) -> List[WorkerPool]:
        api = await self._custom()
        try:
            result = await api.list_cluster_custom_object(group=MCO_GROUP, version=MCO_VERSION, plural=MCP_PLURAL)
        except ApiException as e:
            raise StorageError(f"cannot list {MCP_PLURAL}: {e}") from e
        return [WorkerPool.from_k8s(item) for item in result.get("items") or []]

    async def get_kubelet_config(self, namespace: str, name: str) -> Optional[KubeletConfigObject]:
        api = await self._custom()
        try:
            if namespace:
                obj = await api.get_namespaced_custom_object(
                    group=MCO_GROUP, version=MCO_VERSION, namespace=namespace, plural=KUBELETCONFIG_PLURAL, name=name
                )
            else:
                obj = await api.get_cluster_custom_object(
                    group=MCO_GROUP, version=MCO_VERSION, plural=KUBELETCONFIG_PLURAL, name=name
                )
        except ApiException as e:
            if e.status == HTTP_NOT_FOUND:
                return None
            raise StorageError(f"cannot get {KUBELETCONFIG_PLURAL} {name!r}: {e}") from e
        return KubeletConfigObject.from_k8s(obj)

    async def list_kubelet_configs(self) -> List[KubeletConfigObject]:
        api = await self._custom()
        try:
            result = await api.list_cluster_custom_object(
                group=MCO_GROUP, version=MCO_VERSION, plural=KUBELETCONFIG_PLURAL
            )
        except ApiException as e:
            raise StorageError(f"cannot list {KUBELETCONFIG_PLURAL}: {e}") from e
        return [KubeletConfigObject.from_k8s(item) for item in result.get("items") or []]

    async def get_config_map(self, namespace: str, name: str) -> Optional[V1ConfigMap]:
        api = await self._core()
        try:
            return await api.read_namespaced_config_map(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == HTTP_NOT_FOUND:
                return None
            raise StorageError(f"cannot get ConfigMap {namespace}/{name}: {e}") from e

    async def upsert_config_map(self, config_map: V1ConfigMap) -> V1ConfigMap:
        api = await self._core()
        namespace = config_map.metadata.namespace
        name = config_map.metadata.name

        existing = await self.get_config_map(namespace, name)
        try:
            if existing is None:
                created = await api.create_namespaced_config_map(namespace=namespace, body=config_map)
                logger.info("Created ConfigMap %s/%s", namespace, name)
                return created

            config_map.metadata.resource_version = existing.metadata.resource_version
            replaced = await api.replace_namespaced_config_map(name=name, namespace=namespace, body=config_map)
            logger.info("Updated ConfigMap %s/%s", namespace, name)
            return replaced
        except ApiException as e:
            raise StorageError(f"cannot write ConfigMap {namespace}/{name}: {e}") from e

    async def close(self):
        """Close the Kubernetes API clients if they exist."""
        for api in (self._core_api, self._custom_api):
            if api:
                await api.api_client.close()
        self._core_api = None
        self._custom_api = None
        logger.debug("KubernetesClusterStore clients closed.")
