# src/topoconf/core/reconciler.py
"""
Reconciliation of KubeletConfig objects into the per-pool ConfigMaps read by
the resource-topology agent.

Each call recomputes the published configuration from the current cluster
state; the ConfigMaps are the only state kept between calls, so repeated or
concurrent reconciliations of the same object converge on the same content.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional

from ..models.cluster import (
    KUBELETCONFIG_KIND,
    MCO_GROUP,
    MCO_VERSION,
    KubeletConfigObject,
    ObjectRef,
    ResourceAwarenessDeclaration,
    WorkerPool,
)
from ..storage.base_store import ClusterStore
from .artifact import create_config_map, get_component_name, set_controller_reference
from .codec import decode_kubelet_config, find_reserved_memory, render
from .config import Config
from .events import (
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
    REASON_PROCESS_FAILED,
    REASON_PROCESS_OK,
    REASON_PROCESS_SKIP,
    EventRecorder,
)
from .exceptions import InvalidKubeletConfigError
from .resolver import find_pools_for_kubelet_config, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileRequest:
    """Identifies the KubeletConfig to reconcile."""

    name: str
    namespace: str = ""

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name

    def ref(self) -> ObjectRef:
        return ObjectRef(
            api_version=f"{MCO_GROUP}/{MCO_VERSION}",
            kind=KUBELETCONFIG_KIND,
            name=self.name,
            namespace=self.namespace,
        )


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a successful reconciliation; requeue_after asks for another pass later."""

    requeue_after: Optional[timedelta] = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None


class KubeletConfigReconciler:
    """
    Publishes the topology manager settings of a KubeletConfig for every
    MachineConfigPool it targets that belongs to a node group of the
    NUMAResourcesOperator declaration.
    """

    def __init__(
        self,
        store: ClusterStore,
        recorder: EventRecorder,
        config: Config,
        pod_excludes: Optional[Dict[str, str]] = None,
    ):
        self.store = store
        self.recorder = recorder
        self.config = config
        self.namespace = config.NAMESPACE
        self.pod_excludes = dict(pod_excludes or {})

    async def reconcile(self, request: ReconcileRequest) -> ReconcileResult:
        """
        Runs one reconciliation pass for the given KubeletConfig.

        Returns:
            A result without requeue on success, when the KubeletConfig is
            gone, or when none of its pools is managed by a node group; a
            result asking for a retry when the declaration does not exist yet.

        Raises:
            Any error met while reading the inputs or publishing the
            ConfigMaps, after a ProcessFailed event was recorded.
        """
        logger.debug("reconcile start for KubeletConfig %s", request)
        subject = request.ref()
        try:
            kubelet_config = await self.store.get_kubelet_config(request.namespace, request.name)
            if kubelet_config is None:
                logger.info("KubeletConfig %s not found, nothing to do", request)
                return ReconcileResult()
            subject = kubelet_config.ref()

            pools = find_pools_for_kubelet_config(kubelet_config, await self.store.list_worker_pools())

            declaration = await self.store.get_declaration(self.config.DECLARATION_NAME)
            if declaration is None:
                retry = self.config.kubeletconfig_retry_period
                logger.info(
                    "NUMAResourcesOperator %r not found, retrying KubeletConfig %s in %s",
                    self.config.DECLARATION_NAME,
                    request,
                    retry,
                )
                return ReconcileResult(requeue_after=retry)
            subject = declaration.ref()

            published = await self._reconcile_config_maps(declaration, kubelet_config, pools)
        except InvalidKubeletConfigError as e:
            logger.info("skipping KubeletConfig %s: %s", request, e.reason)
            await self.recorder.event(
                kubelet_config.ref(),
                EVENT_TYPE_NORMAL,
                REASON_PROCESS_SKIP,
                f"ignored KubeletConfig {request}: {e.reason}",
            )
            return ReconcileResult()
        except Exception as e:
            await self._record_failure(subject, request, e)
            raise

        await self.recorder.event(
            declaration.ref(),
            EVENT_TYPE_NORMAL,
            REASON_PROCESS_OK,
            f"Updated RTE config {', '.join(published)} from KubeletConfig {request}",
        )
        logger.debug("reconcile done for KubeletConfig %s", request)
        return ReconcileResult()

    async def _reconcile_config_maps(
        self,
        declaration: ResourceAwarenessDeclaration,
        kubelet_config: KubeletConfigObject,
        pools: List[WorkerPool],
    ) -> List[str]:
        targets = []
        for pool in pools:
            _, found = resolve(declaration, pool)
            if not found:
                logger.debug("MachineConfigPool %s is not part of any node group, skipping", pool.name)
                continue
            targets.append(pool)

        if not targets:
            raise InvalidKubeletConfigError(
                kubelet_config.key,
                f"no MachineConfigPool selected by it belongs to a node group of {declaration.name!r}",
            )

        kl_config = decode_kubelet_config(kubelet_config.payload)
        reserved_memory = find_reserved_memory(kl_config)
        if reserved_memory:
            logger.info("KubeletConfig %s reserves memory per NUMA node: %s", kubelet_config.key, reserved_memory)

        data = render(kl_config.topology_manager_policy, kl_config.topology_manager_scope, self.pod_excludes)

        owner = declaration.ref()
        published = []
        for pool in targets:
            name = get_component_name(declaration.name, pool.name)
            config_map = set_controller_reference(create_config_map(self.namespace, name, data), owner)
            await self.store.upsert_config_map(config_map)
            logger.info("Synced RTE config %s/%s for MachineConfigPool %s", self.namespace, name, pool.name)
            published.append(f"{self.namespace}/{name}")
        return published

    async def _record_failure(self, subject: ObjectRef, request: ReconcileRequest, error: Exception):
        logger.error("failed to reconcile KubeletConfig %s: %s", request, error)
        await self.recorder.event(
            subject,
            EVENT_TYPE_WARNING,
            REASON_PROCESS_FAILED,
            f"Failed to update RTE config from KubeletConfig {request}: {error}",
        )
