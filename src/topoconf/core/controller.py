# src/topoconf/core/controller.py
"""
Drives the reconciler from a periodic resync of every KubeletConfig.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Set

from ..storage.base_store import ClusterStore
from .reconciler import KubeletConfigReconciler, ReconcileRequest

logger = logging.getLogger(__name__)


class KubeletConfigController:
    """
    Fans reconciliation out over all KubeletConfig objects.

    Distinct objects are reconciled concurrently; a given object is never
    reconciled twice at the same time.
    """

    def __init__(self, reconciler: KubeletConfigReconciler, store: ClusterStore):
        self.reconciler = reconciler
        self.store = store
        self._in_flight: Set[ReconcileRequest] = set()
        self._requeued: Set[ReconcileRequest] = set()
        self._pending: Set[asyncio.Task] = set()

    async def resync(self) -> int:
        """
        Reconciles every KubeletConfig once.

        Returns:
            The number of successful reconciliations.
        """
        kubelet_configs = await self.store.list_kubelet_configs()
        requests = [ReconcileRequest(name=kc.name, namespace=kc.namespace) for kc in kubelet_configs]
        logger.info("Resyncing %d KubeletConfig object(s)", len(requests))
        results = await asyncio.gather(*(self.run_once(request) for request in requests))
        return sum(1 for ok in results if ok)

    async def run_once(self, request: ReconcileRequest) -> bool:
        if request in self._in_flight:
            logger.debug("KubeletConfig %s already being reconciled, skipping", request)
            return False

        self._in_flight.add(request)
        try:
            result = await self.reconciler.reconcile(request)
        except Exception as e:
            logger.error("Reconciliation of KubeletConfig %s failed: %s", request, e)
            return False
        finally:
            self._in_flight.discard(request)

        if result.requeue:
            self._schedule_requeue(request, result.requeue_after)
        return True

    def _schedule_requeue(self, request: ReconcileRequest, delay: timedelta):
        if request in self._requeued:
            return
        self._requeued.add(request)
        task = asyncio.create_task(self._requeue(request, delay))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _requeue(self, request: ReconcileRequest, delay: timedelta):
        await asyncio.sleep(delay.total_seconds())
        self._requeued.discard(request)
        if request in self._in_flight:
            logger.debug("KubeletConfig %s still being reconciled, requeueing in %s", request, delay)
            self._schedule_requeue(request, delay)
            return
        await self.run_once(request)

    async def stop(self):
        """Cancels pending requeues."""
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()
        self._requeued.clear()
