import asyncio
import logging
from typing import Callable, Optional, TypeVar

from kubernetes_asyncio import client, config

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Serializes the first configuration load across concurrent callers
_load_lock = asyncio.Lock()
_loaded_from: Optional[str] = None


async def load_cluster_config() -> Optional[str]:
    """
    Loads the Kubernetes client configuration once per process.

    The in-cluster service account is preferred; outside a cluster the local
    kubeconfig is used.

    Returns:
        "in-cluster" or "kubeconfig" depending on the source that was loaded,
        or None when neither is available.
    """
    global _loaded_from

    if _loaded_from is not None:
        return _loaded_from

    async with _load_lock:
        if _loaded_from is not None:
            return _loaded_from

        try:
            config.load_incluster_config()
            _loaded_from = "in-cluster"
        except config.ConfigException:
            logger.debug("Not running inside a cluster, trying kubeconfig.")
            try:
                await config.load_kube_config()
                _loaded_from = "kubeconfig"
            except config.ConfigException as e:
                logger.warning("No usable Kubernetes configuration: %s", e)
                return None

        logger.info("Loaded Kubernetes configuration (%s).", _loaded_from)
        return _loaded_from


async def _api(factory: Callable[[], T]) -> Optional[T]:
    if await load_cluster_config() is None:
        return None
    return factory()


async def get_core_v1_api() -> Optional[client.CoreV1Api]:
    """Returns a CoreV1Api for ConfigMaps and Events, or None without cluster access."""
    return await _api(client.CoreV1Api)


async def get_custom_objects_api() -> Optional[client.CustomObjectsApi]:
    """Returns a CustomObjectsApi for the operator and machine config resources, or None without cluster access."""
    return await _api(client.CustomObjectsApi)
