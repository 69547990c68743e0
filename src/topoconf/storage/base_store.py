# src/topoconf/storage/base_store.py
from abc import ABC, abstractmethod
from typing import List, Optional

from kubernetes_asyncio.client import V1ConfigMap

from ..models.cluster import KubeletConfigObject, ResourceAwarenessDeclaration, WorkerPool


class ClusterStore(ABC):
    """
    Abstract base class for access to the cluster objects the reconciler
    reads and writes.

    Lookups return None when the object does not exist. Every other failure
    is raised as a StorageError.
    """

    @abstractmethod
    async def get_declaration(self, name: str) -> Optional[ResourceAwarenessDeclaration]:
        """
        Fetches the cluster-scoped NUMAResourcesOperator object.

        Args:
            name: Object name.

        Returns:
            The declaration, or None if it does not exist yet.
        """
        pass

    @abstractmethod
    async def list_worker_pools(self) -> List[WorkerPool]:
        """Lists every MachineConfigPool."""
        pass

    @abstractmethod
    async def get_kubelet_config(self, namespace: str, name: str) -> Optional[KubeletConfigObject]:
        """
        Fetches a KubeletConfig.

        Args:
            namespace: Object namespace, empty for cluster-scoped objects.
            name: Object name.

        Returns:
            The KubeletConfig, or None if it does not exist.
        """
        pass

    @abstractmethod
    async def list_kubelet_configs(self) -> List[KubeletConfigObject]:
        """Lists every KubeletConfig."""
        pass

    @abstractmethod
    async def get_config_map(self, namespace: str, name: str) -> Optional[V1ConfigMap]:
        pass

    @abstractmethod
    async def upsert_config_map(self, config_map: V1ConfigMap) -> V1ConfigMap:
        """
        Creates the ConfigMap, or replaces it in place when it already exists.

        Returns:
            The stored ConfigMap.
        """
        pass

    async def close(self):
        """
        Clean up resources (e.g., close API clients).
        """
        pass
