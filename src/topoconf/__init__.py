# src/topoconf/__init__.py
"""
topoconf keeps the resource-topology agent configuration of each worker pool
in sync with the pool's KubeletConfig.
"""

__version__ = "0.1.0"
