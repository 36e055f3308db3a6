"""
Unit tests for host metrics collection
"""

import psutil
import pytest
from unittest.mock import Mock, patch

from offload_monitor.services.system_info import (
    BYTES_PER_GB,
    collect_system_snapshot,
    memory_usage_percent,
    read_cpu_count,
    read_memory_gb,
)


class TestMemoryUsagePercent:

    @pytest.mark.parametrize("used,total,expected", [
        (4.0, 16.0, 25),
        (12.0, 16.0, 75),
        (1.0, 3.0, 33),
        (2.0, 3.0, 67),
        (16.0, 16.0, 100),
        (0.0, 16.0, 0),
    ])
    def test_rounded_share(self, used, total, expected):
        assert memory_usage_percent(used, total) == expected
        assert memory_usage_percent(used, total) == round(used / total * 100)

    def test_zero_total(self):
        """Test an unknown total never divides by zero"""
        assert memory_usage_percent(0.0, 0.0) == 0
        assert memory_usage_percent(3.0, 0.0) == 0


class TestReadMemory:

    def test_read_memory(self):
        memory = Mock(total=16 * BYTES_PER_GB, available=12 * BYTES_PER_GB)
        with patch("offload_monitor.services.system_info.psutil.virtual_memory", return_value=memory):
            assert read_memory_gb() == (16.0, 12.0, 4.0)

    def test_read_memory_failure(self):
        """Test a psutil failure degrades to zeros"""
        with patch("offload_monitor.services.system_info.psutil.virtual_memory", side_effect=psutil.Error("boom")):
            assert read_memory_gb() == (0.0, 0.0, 0.0)

    def test_read_memory_os_error(self):
        with patch("offload_monitor.services.system_info.psutil.virtual_memory", side_effect=PermissionError("denied")):
            assert read_memory_gb() == (0.0, 0.0, 0.0)


class TestReadCpuCount:

    def test_psutil_count(self):
        with patch("offload_monitor.services.system_info.psutil.cpu_count", return_value=8):
            assert read_cpu_count() == 8

    def test_never_below_one(self):
        """Test the count stays positive when nothing reports a value"""
        with patch("offload_monitor.services.system_info.psutil.cpu_count", return_value=None), \
             patch("offload_monitor.services.system_info.os.cpu_count", return_value=None):
            assert read_cpu_count() == 1


class TestCollectSystemSnapshot:

    def test_snapshot_fields(self, process_clock):
        memory = Mock(total=16 * BYTES_PER_GB, available=4 * BYTES_PER_GB)
        with patch("offload_monitor.services.system_info.psutil.virtual_memory", return_value=memory):
            snapshot = collect_system_snapshot(process_clock, hostname_reader=lambda: "test-host")

        assert snapshot.hostname == "test-host"
        assert snapshot.total_memory_gb == 16.0
        assert snapshot.free_memory_gb == 4.0
        assert snapshot.used_memory_gb == 12.0
        assert snapshot.memory_usage_percent == 75
        assert snapshot.cpu_core_count >= 1
        assert snapshot.started_at == process_clock.started_at
        assert snapshot.process_uptime_seconds >= 0
        assert snapshot.runtime_version

    def test_snapshot_survives_metric_failures(self, process_clock):
        """Test the snapshot is returned when every psutil call fails"""
        with patch("offload_monitor.services.system_info.psutil.virtual_memory", side_effect=psutil.Error("boom")), \
             patch("offload_monitor.services.system_info.psutil.cpu_count", side_effect=psutil.Error("boom")), \
             patch("offload_monitor.services.system_info.psutil.boot_time", side_effect=psutil.Error("boom")):
            snapshot = collect_system_snapshot(process_clock, hostname_reader=lambda: "test-host")

        assert snapshot.total_memory_gb == 0.0
        assert snapshot.memory_usage_percent == 0
        assert snapshot.host_uptime_seconds == 0.0
        assert snapshot.cpu_core_count >= 1
