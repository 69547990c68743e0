# src/topoconf/models/kubelet.py

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MemoryReservation(BaseModel):
    """Memory reserved for system use on one NUMA node."""

    model_config = ConfigDict(populate_by_name=True)

    numa_node: int = Field(..., alias="numaNode")
    limits: Dict[str, Union[str, int, float]] = Field(default_factory=dict)


class KubeletConfiguration(BaseModel):
    """
    The subset of the kubelet configuration the controller cares about.
    Unknown fields are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    topology_manager_policy: Optional[str] = Field(None, alias="topologyManagerPolicy")
    topology_manager_scope: Optional[str] = Field(None, alias="topologyManagerScope")
    reserved_memory: List[MemoryReservation] = Field(default_factory=list, alias="reservedMemory")
