# src/topoconf/storage/memory_store.py
"""
Dictionary-backed ClusterStore, used by tests and dry runs.
"""

import logging
from typing import Dict, List, Optional, Tuple

from kubernetes_asyncio.client import V1ConfigMap, V1ObjectMeta

from ..models.cluster import KubeletConfigObject, ResourceAwarenessDeclaration, WorkerPool
from .base_store import ClusterStore

logger = logging.getLogger(__name__)


class InMemoryClusterStore(ClusterStore):
    def __init__(
        self,
        declarations: Optional[List[ResourceAwarenessDeclaration]] = None,
        pools: Optional[List[WorkerPool]] = None,
        kubelet_configs: Optional[List[KubeletConfigObject]] = None,
        config_maps: Optional[List[V1ConfigMap]] = None,
    ):
        self.declarations: Dict[str, ResourceAwarenessDeclaration] = {d.name: d for d in declarations or []}
        self.pools: Dict[str, WorkerPool] = {p.name: p for p in pools or []}
        self.kubelet_configs: Dict[Tuple[str, str], KubeletConfigObject] = {
            (kc.namespace, kc.name): kc for kc in kubelet_configs or []
        }
        self.config_maps: Dict[Tuple[str, str], V1ConfigMap] = {}
        for cm in config_maps or []:
            self.config_maps[(cm.metadata.namespace, cm.metadata.name)] = cm
        self.created = 0
        self.updated = 0

    async def get_declaration(self, name: str) -> Optional[ResourceAwarenessDeclaration]:
        return self.declarations.get(name)

    async def list_worker_pools(self) -> List[WorkerPool]:
        return list(self.pools.values())

    async def get_kubelet_config(self, namespace: str, name: str) -> Optional[KubeletConfigObject]:
        return self.kubelet_configs.get((namespace, name))

    async def list_kubelet_configs(self) -> List[KubeletConfigObject]:
        return list(self.kubelet_configs.values())

    async def get_config_map(self, namespace: str, name: str) -> Optional[V1ConfigMap]:
        cm = self.config_maps.get((namespace, name))
        return _copy_config_map(cm) if cm is not None else None

    async def upsert_config_map(self, config_map: V1ConfigMap) -> V1ConfigMap:
        key = (config_map.metadata.namespace, config_map.metadata.name)
        if key in self.config_maps:
            self.updated += 1
            logger.debug("Updated ConfigMap %s/%s", *key)
        else:
            self.created += 1
            logger.debug("Created ConfigMap %s/%s", *key)
        self.config_maps[key] = _copy_config_map(config_map)
        return _copy_config_map(config_map)


def _copy_config_map(cm: V1ConfigMap) -> V1ConfigMap:
    metadata = cm.metadata
    return V1ConfigMap(
        api_version=cm.api_version,
        kind=cm.kind,
        metadata=V1ObjectMeta(
            name=metadata.name,
            namespace=metadata.namespace,
            labels=dict(metadata.labels) if metadata.labels else None,
            owner_references=list(metadata.owner_references) if metadata.owner_references else None,
            resource_version=metadata.resource_version,
        ),
        data=dict(cm.data) if cm.data is not None else None,
    )
