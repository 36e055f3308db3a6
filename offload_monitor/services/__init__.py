from .accelerator import HardwareProbe
from .offload import EnvironmentProbe
from .clock import ProcessClock
from .aggregator import StatusAggregator
from offload_monitor.config import settings

# Create singleton instances of the services
process_clock = ProcessClock.start()
hardware_probe = HardwareProbe(settings.GPU_QUERY_COMMAND, settings.GPU_QUERY_TIMEOUT)
environment_probe = EnvironmentProbe(settings.CONTAINER_MARKER_PATH)
status_aggregator = StatusAggregator(hardware_probe, environment_probe, process_clock)
