"""
Status Aggregator - Compose accelerator, offload and host state per request.

Nothing is cached between calls: every snapshot probes again, so a failed
probe is never retried within a request and never smoothed over.
"""

import logging
import time
from typing import Callable

from offload_monitor.middleware import record_accelerator_detection, record_probe_duration
from offload_monitor.models.status import AcceleratorInfo, StatusResponse, SystemSnapshot
from offload_monitor.services.accelerator import HardwareProbe
from offload_monitor.services.clock import ProcessClock
from offload_monitor.services.offload import EnvironmentProbe
from offload_monitor.services.system_info import collect_system_snapshot

logger = logging.getLogger(__name__)


class StatusAggregator:
    """Build StatusResponse snapshots from the probes and host metrics."""

    def __init__(
        self,
        hardware_probe: HardwareProbe,
        environment_probe: EnvironmentProbe,
        clock: ProcessClock,
        system_collector: Callable[[ProcessClock], SystemSnapshot] = collect_system_snapshot,
    ):
        self.hardware_probe = hardware_probe
        self.environment_probe = environment_probe
        self.clock = clock
        self.system_collector = system_collector

    def probe_accelerator(self) -> AcceleratorInfo:
        """Run the hardware probe once and record its duration and outcome."""
        start_time = time.time()
        accelerator = self.hardware_probe.probe()
        record_probe_duration("accelerator", time.time() - start_time)
        record_accelerator_detection(accelerator.method.value)
        return accelerator

    def snapshot(self) -> StatusResponse:
        accelerator = self.probe_accelerator()

        start_time = time.time()
        offload = self.environment_probe.probe()
        record_probe_duration("offload", time.time() - start_time)

        system = self.system_collector(self.clock)

        logger.debug(
            f"Snapshot: gpu={accelerator.method.value} offload={offload.enabled} "
            f"memory={system.memory_usage_percent}%"
        )

        return StatusResponse(accelerator=accelerator, offload=offload, system=system)
