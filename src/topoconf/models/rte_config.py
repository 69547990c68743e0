# src/topoconf/models/rte_config.py

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DerivedConfig(BaseModel):
    """
    Configuration published for the node-local resource-topology agent.

    Attributes:
        exclude_list: Resources to hide from the agent, keyed by node name or '*'
        topology_manager_policy: Kubelet topology manager policy
        topology_manager_scope: Kubelet topology manager scope
        pod_excludes: Pods to ignore, as namespace -> name patterns
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    exclude_list: Optional[Dict[str, List[str]]] = Field(None, alias="excludeList")
    topology_manager_policy: Optional[str] = Field(None, alias="topologyManagerPolicy")
    topology_manager_scope: Optional[str] = Field(None, alias="topologyManagerScope")
    pod_excludes: Optional[Dict[str, str]] = Field(None, alias="podExcludes")

    def to_wire(self) -> dict:
        """Returns the wire mapping with every empty field left out, keys sorted."""
        data = self.model_dump(by_alias=True)
        return {key: data[key] for key in sorted(data) if data[key]}
