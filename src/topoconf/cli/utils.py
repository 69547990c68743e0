# src/topoconf/cli/utils.py
"""
Helpers shared by the CLI commands.
"""

import logging
from typing import Dict, List, Optional

import typer

from ..core.codec import read_file
from ..core.config import Config
from ..core.events import EventRecorder
from ..core.reconciler import KubeletConfigReconciler
from ..storage.base_store import ClusterStore

logger = logging.getLogger(__name__)


def parse_pod_excludes(values: Optional[List[str]]) -> Dict[str, str]:
    """
    Parses '--pod-exclude' values of the form 'namespace=name-pattern'.

    Raises:
        typer.BadParameter: If a value has no '='.
    """
    excludes: Dict[str, str] = {}
    for value in values or []:
        namespace, sep, name = value.partition("=")
        if not sep or not namespace:
            raise typer.BadParameter(f"invalid pod exclude {value!r}, expected 'namespace=name'")
        excludes[namespace] = name
    return excludes


def build_reconciler(config: Config, store: ClusterStore, recorder: EventRecorder) -> KubeletConfigReconciler:
    """
    Creates a reconciler publishing the pod excludes from the optional
    configuration file.
    """
    file_config = read_file(config.RTE_CONFIG_FILE)
    pod_excludes = file_config.pod_excludes or {}
    if pod_excludes:
        logger.info("Loaded %d pod exclude(s) from %s", len(pod_excludes), config.RTE_CONFIG_FILE)
    return KubeletConfigReconciler(store=store, recorder=recorder, config=config, pod_excludes=pod_excludes)
