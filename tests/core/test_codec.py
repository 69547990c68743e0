# tests/core/test_codec.py

import json
from unittest.mock import patch

import pytest

from topoconf.core.codec import decode_kubelet_config, find_reserved_memory, read_file, render, unrender
from topoconf.core.exceptions import KubeletConfigDecodeError, ParseError, SerializationError
from topoconf.models.kubelet import KubeletConfiguration, MemoryReservation
from topoconf.models.rte_config import DerivedConfig


@pytest.mark.parametrize(
    "policy, scope, pod_excludes",
    [
        ("single-numa-node", "pod", {"kube-system": "*"}),
        ("restricted", "container", {"openshift-monitoring": "prometheus-*", "default": "debug"}),
        ("best-effort", "container", {}),
    ],
)
def test_render_unrender_roundtrip(policy, scope, pod_excludes):
    """Unrendering a rendered configuration gives back the same settings."""
    conf = unrender(render(policy, scope, pod_excludes))

    assert conf == DerivedConfig(
        topology_manager_policy=policy,
        topology_manager_scope=scope,
        pod_excludes=pod_excludes or None,
    )


def test_render_omits_empty_pod_excludes():
    data = render("single-numa-node", "pod", {})

    assert "podExcludes" not in data
    assert "topologyManagerPolicy: single-numa-node" in data
    assert "topologyManagerScope: pod" in data
    assert unrender(data).pod_excludes is None


def test_render_omits_empty_topology_settings():
    data = render(None, "", None)

    assert "topologyManagerPolicy" not in data
    assert "topologyManagerScope" not in data
    assert unrender(data) == DerivedConfig()


def test_render_keys_are_sorted():
    data = render("single-numa-node", "pod", {"kube-system": "*"})

    keys = [line.split(":")[0] for line in data.splitlines() if not line.startswith(" ")]
    assert keys == ["podExcludes", "topologyManagerPolicy", "topologyManagerScope"]


def test_render_emitter_failure_raises_serialization_error():
    from ruamel.yaml.representer import RepresenterError

    with patch("topoconf.core.codec.YAML.dump", side_effect=RepresenterError("cannot represent")):
        with pytest.raises(SerializationError):
            render("single-numa-node", "pod", {})


def test_unrender_full_configuration():
    data = """
excludeList:
  '*':
  - hugepages-1Gi
  node-1:
  - memory
podExcludes:
  kube-system: '*'
topologyManagerPolicy: single-numa-node
topologyManagerScope: container
"""
    conf = unrender(data)

    assert conf.exclude_list == {"*": ["hugepages-1Gi"], "node-1": ["memory"]}
    assert conf.pod_excludes == {"kube-system": "*"}
    assert conf.topology_manager_policy == "single-numa-node"
    assert conf.topology_manager_scope == "container"


def test_unrender_empty_text_gives_empty_configuration():
    assert unrender("") == DerivedConfig()


def test_unrender_ignores_unknown_fields():
    conf = unrender("topologyManagerPolicy: restricted\nsomethingElse: 42\n")

    assert conf.topology_manager_policy == "restricted"


@pytest.mark.parametrize(
    "data",
    [
        "topologyManagerPolicy: [unclosed",
        "- just\n- a list\n",
        "podExcludes: not-a-mapping\n",
    ],
)
def test_unrender_malformed_raises_parse_error(data):
    with pytest.raises(ParseError):
        unrender(data)


def test_read_file_missing_returns_empty_configuration(tmp_path, caplog):
    path = tmp_path / "missing.yaml"

    with caplog.at_level("WARNING"):
        conf = read_file(str(path))

    assert conf == DerivedConfig()
    assert "couldn't find configuration" in caplog.text


def test_read_file_valid(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("podExcludes:\n  kube-system: '*'\nexcludeList:\n  '*':\n  - memory\n")

    conf = read_file(str(path))

    assert conf.pod_excludes == {"kube-system": "*"}
    assert conf.exclude_list == {"*": ["memory"]}


def test_read_file_malformed_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("excludeList: [\n")

    with pytest.raises(ParseError):
        read_file(str(path))


def test_read_file_unreadable_propagates():
    with patch("builtins.open", side_effect=PermissionError("Permission denied")):
        with pytest.raises(PermissionError):
            read_file("/etc/topoconf/config.yaml")


def test_decode_kubelet_config():
    payload = json.dumps(
        {
            "kind": "KubeletConfiguration",
            "topologyManagerPolicy": "single-numa-node",
            "topologyManagerScope": "pod",
            "reservedMemory": [{"numaNode": 0, "limits": {"memory": "1100Mi"}}],
            "cpuManagerPolicy": "static",
        }
    ).encode("utf-8")

    kl_config = decode_kubelet_config(payload)

    assert kl_config.topology_manager_policy == "single-numa-node"
    assert kl_config.topology_manager_scope == "pod"
    assert kl_config.reserved_memory == [MemoryReservation(numa_node=0, limits={"memory": "1100Mi"})]


@pytest.mark.parametrize("payload", [None, b"", b"{not json", b"[1, 2]", b'{"reservedMemory": "oops"}'])
def test_decode_kubelet_config_invalid(payload):
    with pytest.raises(KubeletConfigDecodeError):
        decode_kubelet_config(payload)


def test_find_reserved_memory_ignores_other_resources():
    kl_config = KubeletConfiguration(
        reserved_memory=[
            MemoryReservation(numa_node=0, limits={"memory": "1024"}),
            MemoryReservation(numa_node=1, limits={"cpu": "4"}),
        ]
    )

    assert find_reserved_memory(kl_config) == {0: 1024}


def test_find_reserved_memory_parses_quantities():
    kl_config = KubeletConfiguration(
        reserved_memory=[
            MemoryReservation(numa_node=0, limits={"memory": "1Gi", "hugepages-2Mi": "64Mi"}),
            MemoryReservation(numa_node=1, limits={"memory": 2048}),
        ]
    )

    assert find_reserved_memory(kl_config) == {0: 1024**3, 1: 2048}


def test_find_reserved_memory_skips_non_integral_quantities():
    kl_config = KubeletConfiguration(
        reserved_memory=[
            MemoryReservation(numa_node=0, limits={"memory": "100m"}),
            MemoryReservation(numa_node=1, limits={"memory": "garbage"}),
            MemoryReservation(numa_node=2, limits={"memory": "512Mi"}),
        ]
    )

    assert find_reserved_memory(kl_config) == {2: 512 * 1024**2}


def test_find_reserved_memory_last_entry_wins():
    kl_config = KubeletConfiguration(
        reserved_memory=[
            MemoryReservation(numa_node=0, limits={"memory": "1Gi"}),
            MemoryReservation(numa_node=0, limits={"memory": "2Gi"}),
        ]
    )

    assert find_reserved_memory(kl_config) == {0: 2 * 1024**3}


def test_find_reserved_memory_empty():
    assert find_reserved_memory(KubeletConfiguration()) == {}


def test_find_reserved_memory_skips_overflowing_quantities():
    kl_config = KubeletConfiguration(
        reserved_memory=[
            MemoryReservation(numa_node=0, limits={"memory": "1e1000000"}),
            MemoryReservation(numa_node=1, limits={"memory": "9e999999Ei"}),
            MemoryReservation(numa_node=2, limits={"memory": "1Gi"}),
        ]
    )

    assert find_reserved_memory(kl_config) == {2: 1024**3}
