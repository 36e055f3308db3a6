"""FastAPI dependencies shared by the routers."""

from offload_monitor.config import Settings, settings
from offload_monitor.services import process_clock, status_aggregator
from offload_monitor.services.aggregator import StatusAggregator
from offload_monitor.services.clock import ProcessClock


def get_settings() -> Settings:
    return settings


def get_process_clock() -> ProcessClock:
    return process_clock


def get_aggregator() -> StatusAggregator:
    return status_aggregator
