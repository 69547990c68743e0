# src/topoconf/core/config.py

import logging
import os
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv

from ..utils.date_utils import parse_duration
from .exceptions import ConfigurationError

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "numaresources"
DEFAULT_DECLARATION_NAME = "numaresourcesoperator"
DEFAULT_KUBELETCONFIG_RETRY_PERIOD = "30s"
DEFAULT_RESYNC_INTERVAL = "10m"
DEFAULT_RTE_CONFIG_FILE = "/etc/topoconf/config.yaml"


class Config:
    """
    Controller settings.

    Values are resolved from environment variables when the object is built,
    so each component receives an explicit instance instead of reading
    process-wide state. Keyword arguments take precedence over the
    environment.
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        declaration_name: Optional[str] = None,
        kubeletconfig_retry_period: Optional[str] = None,
        resync_interval: Optional[str] = None,
        rte_config_file: Optional[str] = None,
        log_level: Optional[str] = None,
    ):
        # --- Logging variables ---
        self.LOG_LEVEL = log_level or os.getenv("LOG_LEVEL", "INFO")

        # --- Published artifact variables ---
        self.NAMESPACE = namespace or os.getenv("NAMESPACE", DEFAULT_NAMESPACE)
        self.DECLARATION_NAME = declaration_name or os.getenv("DECLARATION_NAME", DEFAULT_DECLARATION_NAME)
        self.RTE_CONFIG_FILE = rte_config_file or os.getenv("RTE_CONFIG_FILE", DEFAULT_RTE_CONFIG_FILE)

        # --- Timing variables ---
        self.KUBELETCONFIG_RETRY_PERIOD = kubeletconfig_retry_period or os.getenv(
            "KUBELETCONFIG_RETRY_PERIOD", DEFAULT_KUBELETCONFIG_RETRY_PERIOD
        )
        self.RESYNC_INTERVAL = resync_interval or os.getenv("RESYNC_INTERVAL", DEFAULT_RESYNC_INTERVAL)

    @property
    def kubeletconfig_retry_period(self) -> timedelta:
        """Delay before reconciling again while the declaration does not exist yet."""
        return self._duration("KUBELETCONFIG_RETRY_PERIOD", DEFAULT_KUBELETCONFIG_RETRY_PERIOD)

    @property
    def resync_interval(self) -> timedelta:
        return self._duration("RESYNC_INTERVAL", DEFAULT_RESYNC_INTERVAL)

    def _duration(self, attr: str, default: str) -> timedelta:
        raw = getattr(self, attr)
        try:
            return parse_duration(raw)
        except ValueError as e:
            logger.error("cannot parse %s=%r (fallback to default: %s): %s", attr, raw, default, e)
            return parse_duration(default)

    def validate(self):
        """
        Validates the settings.

        Raises:
            ConfigurationError: If a value cannot be used.
        """
        if not self.NAMESPACE:
            raise ConfigurationError("NAMESPACE must not be empty.")
        if not self.DECLARATION_NAME:
            raise ConfigurationError("DECLARATION_NAME must not be empty.")
        for attr in ("KUBELETCONFIG_RETRY_PERIOD", "RESYNC_INTERVAL"):
            try:
                delta = parse_duration(getattr(self, attr))
            except ValueError as e:
                raise ConfigurationError(f"{attr} format is invalid. Use 's', 'm', or 'h'.") from e
            if delta.total_seconds() <= 0:
                raise ConfigurationError(f"{attr} must be greater than zero.")
        if self.LOG_LEVEL.upper() not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ConfigurationError(f"LOG_LEVEL '{self.LOG_LEVEL}' is not a valid logging level.")
        return self

