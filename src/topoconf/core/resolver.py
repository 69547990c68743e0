# src/topoconf/core/resolver.py
"""
Label-selector matching and the lookups built on it: which node group of the
declaration covers a pool, and which pools a KubeletConfig applies to.
"""

from typing import List, Mapping, Optional, Tuple

from ..models.cluster import (
    KubeletConfigObject,
    LabelSelector,
    LabelSelectorRequirement,
    NodeGroup,
    ResourceAwarenessDeclaration,
    WorkerPool,
)

OP_IN = "In"
OP_NOT_IN = "NotIn"
OP_EXISTS = "Exists"
OP_DOES_NOT_EXIST = "DoesNotExist"


def matches(selector: Optional[LabelSelector], labels: Optional[Mapping[str, str]]) -> bool:
    """
    Reports whether the labels satisfy the selector.

    A missing selector selects nothing, an empty one selects everything.
    """
    if selector is None:
        return False
    labels = labels or {}

    for key in sorted(selector.match_labels):
        if key not in labels or labels[key] != selector.match_labels[key]:
            return False

    for requirement in selector.match_expressions:
        if not _requirement_matches(requirement, labels):
            return False

    return True


def _requirement_matches(requirement: LabelSelectorRequirement, labels: Mapping[str, str]) -> bool:
    if requirement.operator == OP_IN:
        return requirement.key in labels and labels[requirement.key] in requirement.values
    if requirement.operator == OP_NOT_IN:
        return requirement.key not in labels or labels[requirement.key] not in requirement.values
    if requirement.operator == OP_EXISTS:
        return requirement.key in labels
    if requirement.operator == OP_DOES_NOT_EXIST:
        return requirement.key not in labels
    return False


def resolve(
    declaration: Optional[ResourceAwarenessDeclaration], pool: WorkerPool
) -> Tuple[Optional[NodeGroup], bool]:
    """Returns the first node group of the declaration whose selector matches the pool."""
    if declaration is None:
        return None, False
    for node_group in declaration.node_groups:
        if matches(node_group.machine_config_pool_selector, pool.labels):
            return node_group, True
    return None, False


def find_pools_for_kubelet_config(kubelet_config: KubeletConfigObject, pools: List[WorkerPool]) -> List[WorkerPool]:
    """Returns, in input order, the pools selected by the KubeletConfig."""
    return [pool for pool in pools if matches(kubelet_config.machine_config_pool_selector, pool.labels)]
