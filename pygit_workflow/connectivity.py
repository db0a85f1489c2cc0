"""Network reachability probe."""

from __future__ import annotations

import logging
import socket

from pygit_workflow.models import WorkflowConfig

logger = logging.getLogger(__name__)


def is_network_available(host: str = 'github.com', port: int = 443, timeout: float = 2.0) -> bool:
    """Return True if a TCP connection to host:port opens within `timeout` seconds."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError as e:
        logger.warning("Network check against %s:%d failed: %s", host, port, e)
        return False


def probe_from_config(config: WorkflowConfig):
    """Build a zero-argument probe bound to the configured host, port and timeout."""
    def probe() -> bool:
        return is_network_available(config.network_host, config.network_port, config.network_timeout)
    return probe
