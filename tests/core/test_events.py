# tests/core/test_events.py

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from kubernetes_asyncio.client.rest import ApiException

from topoconf.core.config import Config
from topoconf.core.events import FakeEventRecorder, KubernetesEventRecorder
from topoconf.core.exceptions import StorageError
from topoconf.core.reconciler import KubeletConfigReconciler, ReconcileRequest
from topoconf.models.cluster import ObjectRef
from topoconf.storage.memory_store import InMemoryClusterStore

NRO_REF = ObjectRef(
    api_version="nodetopology.openshift.io/v1alpha1",
    kind="NUMAResourcesOperator",
    name="numaresourcesoperator",
    uid="abc-123",
)


@pytest.fixture
def mock_core_api():
    api = MagicMock()
    api.create_namespaced_event = AsyncMock()
    api.api_client.close = AsyncMock()
    return api


async def test_fake_recorder_buffers_events():
    recorder = FakeEventRecorder()

    await recorder.event(NRO_REF, "Normal", "ProcessOK", "Updated RTE config ns/cm")

    assert recorder.events == ["Normal ProcessOK Updated RTE config ns/cm"]
    assert recorder.reasons() == ["ProcessOK"]


@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_kubernetes_recorder_creates_event(mock_get_api, mock_core_api):
    mock_get_api.return_value = mock_core_api
    recorder = KubernetesEventRecorder()

    await recorder.event(NRO_REF, "Warning", "ProcessFailed", "boom")

    mock_core_api.create_namespaced_event.assert_awaited_once()
    kwargs = mock_core_api.create_namespaced_event.await_args.kwargs
    assert kwargs["namespace"] == "default"
    body = kwargs["body"]
    assert body.reason == "ProcessFailed"
    assert body.type == "Warning"
    assert body.message == "boom"
    assert body.involved_object.kind == "NUMAResourcesOperator"
    assert body.involved_object.uid == "abc-123"
    assert body.metadata.name.startswith("numaresourcesoperator.")


@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_kubernetes_recorder_uses_object_namespace(mock_get_api, mock_core_api):
    mock_get_api.return_value = mock_core_api
    recorder = KubernetesEventRecorder()
    ref = ObjectRef(api_version="v1", kind="ConfigMap", name="cm", namespace="numaresources")

    await recorder.event(ref, "Normal", "ProcessOK", "ok")

    assert mock_core_api.create_namespaced_event.await_args.kwargs["namespace"] == "numaresources"


@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_kubernetes_recorder_never_raises(mock_get_api, mock_core_api):
    mock_get_api.return_value = mock_core_api
    mock_core_api.create_namespaced_event.side_effect = ApiException(status=403, reason="Forbidden")
    recorder = KubernetesEventRecorder()

    await recorder.event(NRO_REF, "Normal", "ProcessOK", "ok")


@pytest.mark.parametrize(
    "error",
    [asyncio.TimeoutError(), ConnectionResetError("connection reset by peer"), OSError("network is unreachable")],
)
@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_kubernetes_recorder_swallows_transport_errors(mock_get_api, mock_core_api, error, caplog):
    mock_get_api.return_value = mock_core_api
    mock_core_api.create_namespaced_event.side_effect = error
    recorder = KubernetesEventRecorder()

    with caplog.at_level("WARNING"):
        await recorder.event(NRO_REF, "Warning", "ProcessFailed", "boom")

    assert "ProcessFailed" in caplog.text


@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_kubernetes_recorder_swallows_client_setup_errors(mock_get_api):
    mock_get_api.side_effect = ValueError("invalid kubeconfig")
    recorder = KubernetesEventRecorder()

    await recorder.event(NRO_REF, "Normal", "ProcessOK", "ok")


@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_failed_recording_keeps_the_reconcile_error(mock_get_api, mock_core_api, nro, mcp1, make_kubelet_config):
    mock_get_api.return_value = mock_core_api
    mock_core_api.create_namespaced_event.side_effect = asyncio.TimeoutError()
    store = InMemoryClusterStore(declarations=[nro], pools=[mcp1], kubelet_configs=[make_kubelet_config()])
    store.upsert_config_map = AsyncMock(side_effect=StorageError("etcd unavailable"))
    reconciler = KubeletConfigReconciler(store=store, recorder=KubernetesEventRecorder(), config=Config())

    with pytest.raises(StorageError, match="etcd unavailable"):
        await reconciler.reconcile(ReconcileRequest(name="test1"))


@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_kubernetes_recorder_without_client_logs(mock_get_api, caplog):
    mock_get_api.return_value = None
    recorder = KubernetesEventRecorder()

    with caplog.at_level("INFO"):
        await recorder.event(NRO_REF, "Normal", "ProcessOK", "ok")

    assert "ProcessOK" in caplog.text


@patch("topoconf.core.events.get_core_v1_api", new_callable=AsyncMock)
async def test_kubernetes_recorder_close(mock_get_api, mock_core_api):
    mock_get_api.return_value = mock_core_api
    recorder = KubernetesEventRecorder()
    await recorder.event(NRO_REF, "Normal", "ProcessOK", "ok")

    await recorder.close()

    mock_core_api.api_client.close.assert_awaited_once()
