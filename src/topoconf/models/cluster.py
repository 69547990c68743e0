# src/topoconf/models/cluster.py
"""
Pydantic models for the cluster objects the reconciler reads.

Field aliases follow the Kubernetes wire names so the models can be built
directly from the dictionaries returned by the CustomObjectsApi.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

NRO_GROUP = "nodetopology.openshift.io"
NRO_VERSION = "v1alpha1"
NRO_PLURAL = "numaresourcesoperators"
NRO_KIND = "NUMAResourcesOperator"

MCO_GROUP = "machineconfiguration.openshift.io"
MCO_VERSION = "v1"
MCP_PLURAL = "machineconfigpools"
KUBELETCONFIG_PLURAL = "kubeletconfigs"
KUBELETCONFIG_KIND = "KubeletConfig"


class LabelSelectorRequirement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str
    operator: str
    values: List[str] = Field(default_factory=list)


class LabelSelector(BaseModel):
    """A Kubernetes label selector."""

    model_config = ConfigDict(populate_by_name=True)

    match_labels: Dict[str, str] = Field(default_factory=dict, alias="matchLabels")
    match_expressions: List[LabelSelectorRequirement] = Field(default_factory=list, alias="matchExpressions")


class NodeGroupConfig(BaseModel):
    """Optional per-group override settings, carried as declared."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    pods_fingerprinting: Optional[str] = Field(None, alias="podsFingerprinting")
    info_refresh_mode: Optional[str] = Field(None, alias="infoRefreshMode")
    info_refresh_period: Optional[str] = Field(None, alias="infoRefreshPeriod")


class NodeGroup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    machine_config_pool_selector: Optional[LabelSelector] = Field(None, alias="machineConfigPoolSelector")
    group_config: Optional[NodeGroupConfig] = Field(None, alias="config")


class ObjectRef(BaseModel):
    """Reference to a cluster object, used as the subject of events."""

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(..., alias="apiVersion")
    kind: str
    name: str
    namespace: str = ""
    uid: Optional[str] = None


class ResourceAwarenessDeclaration(BaseModel):
    """
    The cluster-scoped NUMAResourcesOperator object.

    Attributes:
        name: Object name
        uid: Object UID, used for owner references when known
        node_groups: Ordered list of participating node groups
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    uid: Optional[str] = None
    node_groups: List[NodeGroup] = Field(default_factory=list, alias="nodeGroups")

    @classmethod
    def from_k8s(cls, obj: Dict[str, Any]) -> "ResourceAwarenessDeclaration":
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        return cls(
            name=metadata.get("name", ""),
            uid=metadata.get("uid"),
            node_groups=[NodeGroup.model_validate(ng) for ng in spec.get("nodeGroups") or []],
        )

    def ref(self) -> ObjectRef:
        return ObjectRef(api_version=f"{NRO_GROUP}/{NRO_VERSION}", kind=NRO_KIND, name=self.name, uid=self.uid)


class WorkerPool(BaseModel):
    """A MachineConfigPool: a named, labeled group of worker nodes."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    labels: Dict[str, str] = Field(default_factory=dict)
    machine_config_selector: Optional[LabelSelector] = Field(None, alias="machineConfigSelector")
    node_selector: Optional[LabelSelector] = Field(None, alias="nodeSelector")

    @classmethod
    def from_k8s(cls, obj: Dict[str, Any]) -> "WorkerPool":
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        return cls(
            name=metadata.get("name", ""),
            labels=metadata.get("labels") or {},
            machine_config_selector=spec.get("machineConfigSelector"),
            node_selector=spec.get("nodeSelector"),
        )


class KubeletConfigObject(BaseModel):
    """
    A KubeletConfig object.

    The embedded kubelet configuration is kept as raw JSON bytes; it is only
    decoded when a reconciliation needs it.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    namespace: str = ""
    uid: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    machine_config_pool_selector: Optional[LabelSelector] = Field(None, alias="machineConfigPoolSelector")
    payload: Optional[bytes] = None

    @classmethod
    def from_k8s(cls, obj: Dict[str, Any]) -> "KubeletConfigObject":
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        raw = spec.get("kubeletConfig")
        if raw is None:
            payload = None
        elif isinstance(raw, (bytes, bytearray)):
            payload = bytes(raw)
        elif isinstance(raw, str):
            payload = raw.encode("utf-8")
        else:
            payload = json.dumps(raw).encode("utf-8")
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace") or "",
            uid=metadata.get("uid"),
            labels=metadata.get("labels") or {},
            machine_config_pool_selector=spec.get("machineConfigPoolSelector"),
            payload=payload,
        )

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name

    def ref(self) -> ObjectRef:
        return ObjectRef(
            api_version=f"{MCO_GROUP}/{MCO_VERSION}",
            kind=KUBELETCONFIG_KIND,
            name=self.name,
            namespace=self.namespace,
            uid=self.uid,
        )
