# src/topoconf/core/codec.py
"""
Conversion between the structured agent configuration and its YAML form,
plus the helpers that read the kubelet settings it is derived from.
"""

import json
import logging
from io import StringIO
from typing import Dict, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..models.kubelet import KubeletConfiguration
from ..models.rte_config import DerivedConfig
from ..utils.k8s_utils import quantity_as_int64
from .exceptions import KubeletConfigDecodeError, ParseError, SerializationError

logger = logging.getLogger(__name__)

MEMORY_RESOURCE = "memory"


def _yaml() -> YAML:
    # YAML instances keep emitter state, so each call gets its own
    yaml = YAML(typ="safe", pure=True)
    yaml.default_flow_style = False
    return yaml


def render(policy: Optional[str], scope: Optional[str], pod_excludes: Optional[Dict[str, str]] = None) -> str:
    """
    Serializes the agent configuration for the given topology manager settings.

    podExcludes is left out entirely when no excludes are supplied.

    Raises:
        SerializationError: If the YAML emitter fails.
    """
    conf = DerivedConfig(
        topology_manager_policy=policy or None,
        topology_manager_scope=scope or None,
        pod_excludes=dict(pod_excludes) if pod_excludes else None,
    )
    stream = StringIO()
    try:
        _yaml().dump(conf.to_wire(), stream)
    except YAMLError as e:
        raise SerializationError(f"cannot serialize configuration: {e}") from e
    return stream.getvalue()


def unrender(data: str) -> DerivedConfig:
    """
    Parses serialized configuration text.

    Raises:
        ParseError: If the text is not valid YAML or does not describe a configuration.
    """
    try:
        raw = _yaml().load(data)
    except YAMLError as e:
        raise ParseError(f"malformed configuration: {e}") from e

    if raw is None:
        return DerivedConfig()
    if not isinstance(raw, dict):
        raise ParseError(f"malformed configuration: expected a mapping, got {type(raw).__name__}")

    try:
        return DerivedConfig.model_validate(raw)
    except ValidationError as e:
        raise ParseError(f"invalid configuration: {e}") from e


def read_file(config_path: str) -> DerivedConfig:
    """
    Loads the optional configuration file.

    A missing file is not an error: an empty configuration is returned.

    Raises:
        ParseError: If the file content is malformed.
        OSError: If the file exists but cannot be read.
    """
    try:
        with open(config_path, "r") as f:
            data = f.read()
    except FileNotFoundError:
        logger.warning("couldn't find configuration in %r", config_path)
        return DerivedConfig()

    logger.debug("Loaded configuration from %s", config_path)
    return unrender(data)


def decode_kubelet_config(payload: Optional[bytes]) -> KubeletConfiguration:
    """
    Decodes the raw JSON kubelet configuration embedded in a KubeletConfig.

    Raises:
        KubeletConfigDecodeError: If the payload is missing, empty or malformed.
    """
    if not payload:
        raise KubeletConfigDecodeError("missing kubelet configuration payload")
    try:
        raw = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise KubeletConfigDecodeError(f"cannot decode kubelet configuration: {e}") from e
    if not isinstance(raw, dict):
        raise KubeletConfigDecodeError(f"kubelet configuration must be an object, got {type(raw).__name__}")
    try:
        return KubeletConfiguration.model_validate(raw)
    except ValidationError as e:
        raise KubeletConfigDecodeError(f"invalid kubelet configuration: {e}") from e


def find_reserved_memory(kubelet_config: KubeletConfiguration) -> Dict[int, int]:
    """
    Maps NUMA node index to the memory (bytes) the kubelet reserves on it.

    Only the 'memory' resource is considered. Quantities that are not exact
    integers are skipped. When several entries target the same NUMA node the
    last one wins.
    """
    res: Dict[int, int] = {}
    for mem_res in kubelet_config.reserved_memory:
        for res_name, res_qty in mem_res.limits.items():
            if res_name != MEMORY_RESOURCE:
                continue
            value = quantity_as_int64(res_qty)
            if value is None:
                logger.debug(
                    "skipping non-integral memory reservation %r on NUMA node %d", res_qty, mem_res.numa_node
                )
                continue
            res[mem_res.numa_node] = value
    return res
