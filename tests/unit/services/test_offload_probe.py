"""
Unit tests for the offload probe
"""

import pytest
from unittest.mock import patch

from offload_monitor.services.offload import EnvironmentProbe, MarkerReadError, marker_exists

CONTAINER_HOSTNAME = "3f4e8a1b9c2d"
LONG_HOSTNAME = "developer-laptop"


def make_probe(marker, environ=None, hostname=LONG_HOSTNAME):
    return EnvironmentProbe(marker, environ=environ or {}, hostname_reader=lambda: hostname)


class TestMarkerExists:

    def test_present(self, present_marker):
        assert marker_exists(present_marker) is True

    def test_absent(self, missing_marker):
        assert marker_exists(missing_marker) is False

    def test_permission_denied(self, present_marker):
        with patch("offload_monitor.services.offload.os.stat", side_effect=PermissionError("denied")):
            with pytest.raises(MarkerReadError):
                marker_exists(present_marker)


class TestEnvironmentProbe:
    """Test offload detection"""

    @pytest.mark.parametrize("environ,hostname", [
        ({}, LONG_HOSTNAME),
        ({"DOCKER_OFFLOAD": "1"}, LONG_HOSTNAME),
        ({"OFFLOAD_ENABLED": "true", "NVIDIA_VISIBLE_DEVICES": "all"}, CONTAINER_HOSTNAME),
    ])
    def test_not_containerized_never_enabled(self, missing_marker, environ, hostname):
        """Test the container marker is a precondition of offload"""
        status = make_probe(missing_marker, environ, hostname).probe()

        assert status.enabled is False
        assert status.is_containerized is False
        assert status.hostname == hostname

    def test_container_with_short_hex_hostname(self, present_marker):
        """Test the 12 character hostname heuristic"""
        status = make_probe(present_marker, hostname=CONTAINER_HOSTNAME).probe()
        assert status.enabled is True
        assert status.is_containerized is True

    def test_any_twelve_character_hostname_counts(self, present_marker):
        """Test the heuristic only looks at length"""
        assert make_probe(present_marker, hostname="build-server").probe().enabled is True

    def test_container_without_evidence(self, present_marker):
        """Test a local container with a regular hostname"""
        status = make_probe(present_marker).probe()
        assert status.enabled is False
        assert status.is_containerized is True

    @pytest.mark.parametrize("variable", ["DOCKER_OFFLOAD", "OFFLOAD_ENABLED"])
    def test_container_with_offload_flag(self, present_marker, variable):
        assert make_probe(present_marker, {variable: "1"}).probe().enabled is True

    def test_container_with_accelerator_variable(self, present_marker):
        assert make_probe(present_marker, {"CUDA_VISIBLE_DEVICES": "0"}).probe().enabled is True

    def test_empty_offload_flag_ignored(self, present_marker):
        assert make_probe(present_marker, {"DOCKER_OFFLOAD": ""}).probe().enabled is False

    def test_marker_read_error_degrades(self, present_marker):
        """Test permission errors disable offload but keep the hostname"""
        probe = make_probe(present_marker, {"DOCKER_OFFLOAD": "1"}, CONTAINER_HOSTNAME)
        with patch("offload_monitor.services.offload.os.stat", side_effect=PermissionError("denied")):
            status = probe.probe()

        assert status.enabled is False
        assert status.is_containerized is False
        assert status.hostname == CONTAINER_HOSTNAME

    def test_hostname_error_degrades(self, present_marker):
        """Test a failing hostname lookup does not escape the probe"""
        def broken_reader():
            raise RuntimeError("boom")

        probe = EnvironmentProbe(present_marker, environ={"DOCKER_OFFLOAD": "1"}, hostname_reader=broken_reader)
        status = probe.probe()

        assert status.hostname == "unknown"
        assert status.is_containerized is True
        assert status.enabled is True

    def test_unusable_hostname_degrades(self, present_marker):
        """Test a hostname reader returning a non-string value does not escape the probe"""
        probe = EnvironmentProbe(present_marker, environ={"DOCKER_OFFLOAD": "1"}, hostname_reader=lambda: None)
        status = probe.probe()

        assert status.enabled is False
        assert status.is_containerized is False
        assert status.hostname == "unknown"

    def test_idempotent(self, present_marker):
        probe = make_probe(present_marker, {"DOCKER_OFFLOAD": "1"})
        assert probe.probe() == probe.probe()
