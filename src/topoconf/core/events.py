# src/topoconf/core/events.py
"""
Event recording for reconciliation outcomes.

The recorder mirrors the Kubernetes event recorder contract: recording is
best effort and never fails the caller.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List

from kubernetes_asyncio.client import CoreV1Event, V1EventSource, V1ObjectMeta, V1ObjectReference
from kubernetes_asyncio.client.rest import ApiException

from ..models.cluster import ObjectRef
from .k8s_client import get_core_v1_api

logger = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

REASON_PROCESS_OK = "ProcessOK"
REASON_PROCESS_FAILED = "ProcessFailed"
REASON_PROCESS_SKIP = "ProcessSkip"

COMPONENT_NAME = "topoconf-controller"

# Events about cluster-scoped objects are stored here
DEFAULT_EVENT_NAMESPACE = "default"


class EventRecorder(ABC):
    """
    Abstract Base Class for event recorders.
    """

    @abstractmethod
    async def event(self, ref: ObjectRef, event_type: str, reason: str, message: str) -> None:
        """Records an event about the referenced object."""
        pass

    async def close(self):
        """
        Clean up resources (e.g., close API clients).
        """
        pass


class FakeEventRecorder(EventRecorder):
    """Keeps events in memory as '<type> <reason> <message>' strings."""

    def __init__(self):
        self.events: List[str] = []

    async def event(self, ref: ObjectRef, event_type: str, reason: str, message: str) -> None:
        self.events.append(f"{event_type} {reason} {message}")

    def reasons(self) -> List[str]:
        return [entry.split(" ", 2)[1] for entry in self.events]


class KubernetesEventRecorder(EventRecorder):
    """Publishes core/v1 Events through the Kubernetes API."""

    def __init__(self, component: str = COMPONENT_NAME):
        self.component = component
        self._api = None

    async def _ensure_client(self):
        """Lazily initialize the Kubernetes Client."""
        if self._api:
            return self._api

        self._api = await get_core_v1_api()
        if not self._api:
            logger.warning("Event recorder could not initialize Kubernetes client.")
        return self._api

    async def event(self, ref: ObjectRef, event_type: str, reason: str, message: str) -> None:
        try:
            api = await self._ensure_client()
        except Exception as e:
            logger.warning("cannot record event %s on %s/%s: %s", reason, ref.kind, ref.name, e)
            return
        if not api:
            logger.info("event %s %s on %s/%s: %s", event_type, reason, ref.kind, ref.name, message)
            return

        namespace = ref.namespace or DEFAULT_EVENT_NAMESPACE
        now = datetime.now(timezone.utc)
        body = CoreV1Event(
            metadata=V1ObjectMeta(name=f"{ref.name}.{time.time_ns():x}", namespace=namespace),
            involved_object=V1ObjectReference(
                api_version=ref.api_version,
                kind=ref.kind,
                name=ref.name,
                namespace=ref.namespace or None,
                uid=ref.uid,
            ),
            type=event_type,
            reason=reason,
            message=message,
            source=V1EventSource(component=self.component),
            reporting_component=self.component,
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )
        try:
            await api.create_namespaced_event(namespace=namespace, body=body)
        except ApiException as e:
            logger.warning("cannot record event %s on %s/%s: %s", reason, ref.kind, ref.name, e)
        except Exception as e:
            logger.warning("unexpected error recording event %s on %s/%s: %s", reason, ref.kind, ref.name, e)

    async def close(self):
        """Close the Kubernetes API client if it exists."""
        if self._api:
            await self._api.api_client.close()
            self._api = None
