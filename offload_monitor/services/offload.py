"""
Offload Probe - Detect whether the process runs in an offloaded container.

The result is a heuristic. A process counts as offloaded when it runs in a
container (the marker file exists) and at least one of these holds:

- DOCKER_OFFLOAD or OFFLOAD_ENABLED is set to a non-empty value
- the hostname is exactly 12 characters long
- an accelerator visibility variable is set

Container runtimes name containers after the first 12 hex characters of the
container id, so any such container passes the hostname check. False
positives are expected.
"""

import logging
import os
import socket
from typing import Mapping, Optional

from offload_monitor.models.status import OffloadStatus
from offload_monitor.services.accelerator import visible_devices

logger = logging.getLogger(__name__)

OFFLOAD_ENV_VARS = ("DOCKER_OFFLOAD", "OFFLOAD_ENABLED")
CONTAINER_HOSTNAME_LENGTH = 12
UNKNOWN_HOSTNAME = "unknown"


def current_hostname() -> str:
    try:
        return socket.gethostname() or UNKNOWN_HOSTNAME
    except OSError as e:
        logger.warning(f"Failed to read hostname: {e}")
        return UNKNOWN_HOSTNAME


class MarkerReadError(Exception):
    """The container marker exists in an unknown state (e.g. permission denied)."""
    pass


def marker_exists(path: str) -> bool:
    """
    Check for the container marker file.

    Raises:
        MarkerReadError: If the filesystem refuses the lookup
    """
    try:
        os.stat(path)
        return True
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise MarkerReadError(f"Cannot check {path}: {e}") from e


class EnvironmentProbe:
    """Detect cloud offload from the container marker, hostname and environment."""

    def __init__(
        self,
        marker_path: str = "/.dockerenv",
        environ: Optional[Mapping[str, str]] = None,
        hostname_reader=current_hostname,
    ):
        self.marker_path = marker_path
        self.environ = os.environ if environ is None else environ
        self.hostname_reader = hostname_reader

    def _read_hostname(self) -> str:
        try:
            return self.hostname_reader()
        except Exception:
            logger.exception("Hostname lookup error")
            return UNKNOWN_HOSTNAME

    def probe(self) -> OffloadStatus:
        try:
            hostname = self._read_hostname()

            try:
                containerized = marker_exists(self.marker_path)
            except MarkerReadError as e:
                logger.warning(f"Container detection degraded: {e}")
                return OffloadStatus(enabled=False, hostname=hostname, is_containerized=False)

            has_offload_env = any(self.environ.get(name) for name in OFFLOAD_ENV_VARS)
            container_hostname = len(hostname) == CONTAINER_HOSTNAME_LENGTH
            has_accelerator_env = visible_devices(self.environ) is not None

            enabled = containerized and (has_offload_env or container_hostname or has_accelerator_env)

            return OffloadStatus(enabled=enabled, hostname=hostname, is_containerized=containerized)
        except Exception:
            logger.exception("Offload detection error")
            return OffloadStatus(enabled=False, hostname=UNKNOWN_HOSTNAME, is_containerized=False)
