# src/topoconf/core/artifact.py
"""
Construction and inspection of the ConfigMap that carries the agent
configuration for one worker pool.
"""

import logging
from typing import Optional

from kubernetes_asyncio.client import V1ConfigMap, V1ObjectMeta, V1OwnerReference

from ..models.cluster import ObjectRef
from .exceptions import MissingArtifactError, MissingDataError, MissingKeyError

logger = logging.getLogger(__name__)

CONFIG_KEY = "config.yaml"


def get_component_name(declaration_name: str, pool_name: str) -> str:
    """Name of the artifact published for a (declaration, pool) pair."""
    return f"{declaration_name}-{pool_name}"


def create_config_map(namespace: str, name: str, config_data: str) -> V1ConfigMap:
    return V1ConfigMap(
        api_version="v1",
        kind="ConfigMap",
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        data={CONFIG_KEY: config_data},
    )


def unpack_config_map(cm: Optional[V1ConfigMap]) -> str:
    """
    Returns the serialized configuration stored in a ConfigMap.

    Raises:
        MissingArtifactError: If no ConfigMap is given.
        MissingDataError: If the ConfigMap has no data.
        MissingKeyError: If the data lacks the configuration key.
    """
    if cm is None:
        raise MissingArtifactError("nil config map")
    namespace, name = _namespaced_name(cm)
    if cm.data is None:
        raise MissingDataError(f"missing data in config map {namespace}/{name}")
    if CONFIG_KEY not in cm.data:
        raise MissingKeyError(f"missing expected key {CONFIG_KEY!r} in config map {namespace}/{name}")
    return cm.data[CONFIG_KEY]


def set_controller_reference(cm: V1ConfigMap, owner: ObjectRef) -> V1ConfigMap:
    """
    Marks the owner as the controller of the ConfigMap so it is garbage
    collected with it. Owners without a UID are left out.
    """
    if not owner.uid:
        logger.debug("owner %s/%s has no uid, not setting controller reference", owner.kind, owner.name)
        return cm

    refs = [ref for ref in (cm.metadata.owner_references or []) if not ref.controller]
    refs.append(
        V1OwnerReference(
            api_version=owner.api_version,
            kind=owner.kind,
            name=owner.name,
            uid=owner.uid,
            controller=True,
            block_owner_deletion=True,
        )
    )
    cm.metadata.owner_references = refs
    return cm


def _namespaced_name(cm: V1ConfigMap):
    metadata = cm.metadata
    if metadata is None:
        return "", ""
    return metadata.namespace or "", metadata.name or ""
