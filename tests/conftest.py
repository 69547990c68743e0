# tests/conftest.py

import json

import pytest

from topoconf.core.config import Config
from topoconf.core.events import FakeEventRecorder
from topoconf.models.cluster import (
    KubeletConfigObject,
    LabelSelector,
    NodeGroup,
    ResourceAwarenessDeclaration,
    WorkerPool,
)

TEST_NAMESPACE = "test-namespace"


@pytest.fixture(autouse=True)
def mock_settings_env_vars(monkeypatch):
    """
    Pytest fixture to mock environment variables for the config module.

    This fixture runs automatically for every test (`autouse=True`) so that
    configuration built during a test never depends on the real environment.
    """
    monkeypatch.setenv("NAMESPACE", TEST_NAMESPACE)
    monkeypatch.setenv("DECLARATION_NAME", "numaresourcesoperator")
    monkeypatch.setenv("KUBELETCONFIG_RETRY_PERIOD", "30s")
    monkeypatch.setenv("RESYNC_INTERVAL", "10m")
    monkeypatch.setenv("RTE_CONFIG_FILE", "/nonexistent/topoconf/config.yaml")
    monkeypatch.delenv("LOG_LEVEL", raising=False)


@pytest.fixture
def test_config():
    return Config()


@pytest.fixture
def recorder():
    return FakeEventRecorder()


@pytest.fixture
def label1():
    return {"test1": "test1"}


@pytest.fixture
def mcp1(label1):
    """A MachineConfigPool carrying label1, selecting machine configs by label1."""
    return WorkerPool(
        name="test1",
        labels=label1,
        machine_config_selector=LabelSelector(match_labels=label1),
        node_selector=LabelSelector(match_labels=label1),
    )


@pytest.fixture
def nro(label1):
    """A NUMAResourcesOperator with one node group selecting mcp1."""
    return ResourceAwarenessDeclaration(
        name="numaresourcesoperator",
        uid="0b4a5b5e-9a0c-4d2e-8d38-4a3f6b3c1e11",
        node_groups=[NodeGroup(machine_config_pool_selector=LabelSelector(match_labels=label1))],
    )


@pytest.fixture
def make_kubelet_config(label1):
    """Factory building a KubeletConfig selecting mcp1 with the given kubelet settings or raw payload."""

    def _make(kubelet_config=None, payload=None, name="test1", selector=None):
        if payload is None:
            payload = json.dumps(kubelet_config if kubelet_config is not None else {}).encode("utf-8")
        return KubeletConfigObject(
            name=name,
            labels=label1,
            machine_config_pool_selector=selector if selector is not None else LabelSelector(match_labels=label1),
            payload=payload,
        )

    return _make
