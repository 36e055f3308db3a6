"""
Pytest configuration and fixtures for all tests
"""
import pytest
from fastapi.testclient import TestClient

from offload_monitor.main import app
from offload_monitor.config import Settings
from offload_monitor.deps import get_aggregator, get_process_clock, get_settings
from offload_monitor.services.accelerator import HardwareProbe, ToolFailureKind, ToolResult
from offload_monitor.services.aggregator import StatusAggregator
from offload_monitor.services.clock import ProcessClock
from offload_monitor.services.offload import EnvironmentProbe


def tool_missing(command, timeout):
    return ToolResult.failed(ToolFailureKind.NOT_FOUND, "nvidia-smi not found")


@pytest.fixture
def test_settings():
    """Override settings for testing"""
    return Settings(
        APP_ENV="test",
        PORT=3000,
        GPU_QUERY_TIMEOUT=1.0,
        DASHBOARD_REFRESH_SECONDS=15,
    )


@pytest.fixture
def process_clock():
    return ProcessClock.start()


@pytest.fixture
def missing_marker(tmp_path):
    """Path of a container marker that does not exist"""
    return str(tmp_path / "dockerenv")


@pytest.fixture
def present_marker(tmp_path):
    """Path of a container marker that exists"""
    marker = tmp_path / "dockerenv"
    marker.touch()
    return str(marker)


@pytest.fixture
def status_aggregator(process_clock, missing_marker):
    """Aggregator with no GPU tool, no accelerator variables and no container"""
    return StatusAggregator(
        HardwareProbe("nvidia-smi", 1.0, environ={}, runner=tool_missing),
        EnvironmentProbe(missing_marker, environ={}, hostname_reader=lambda: "test-host"),
        process_clock,
    )


@pytest.fixture
def client(test_settings, status_aggregator, process_clock):
    """Create test client with overridden settings and services"""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_aggregator] = lambda: status_aggregator
    app.dependency_overrides[get_process_clock] = lambda: process_clock
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
