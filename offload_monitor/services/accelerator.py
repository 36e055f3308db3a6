"""
Accelerator Probe - Tiered GPU detection.

Detection runs in strict priority order and the first tier that succeeds
decides the reported method:

1. The GPU query tool (nvidia-smi by default), bounded by a timeout.
2. Accelerator visibility environment variables (NVIDIA_VISIBLE_DEVICES,
   CUDA_VISIBLE_DEVICES), reported with placeholder metrics.
3. No accelerator.

The probe never raises. Any unexpected error degrades to DETECTION_FAILED.
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Sequence, Union

from offload_monitor.models.status import AcceleratorInfo, DetectionMethod

logger = logging.getLogger(__name__)

VISIBILITY_ENV_VARS = ("NVIDIA_VISIBLE_DEVICES", "CUDA_VISIBLE_DEVICES")

# Readings nvidia-smi prints when a sensor is missing on the device
UNAVAILABLE_READINGS = frozenset({"", "n/a", "[n/a]", "[not supported]", "[unknown error]"})

QUERY_FIELD_COUNT = 5

DEFAULT_TOOL_GPU_NAME = "NVIDIA GPU"

# Placeholder metrics reported when only the environment shows a GPU
ENV_GPU_NAME = "NVIDIA L4"
ENV_GPU_MEMORY_TOTAL_MB = 23034
ENV_GPU_TEMPERATURE_C = 42

NO_GPU_NAME = "No GPU"
FAILED_GPU_NAME = "Unknown"


class ToolFailureKind(str, Enum):
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    EXIT_STATUS = "exit_status"
    EMPTY_OUTPUT = "empty_output"
    MALFORMED_OUTPUT = "malformed_output"
    OS_ERROR = "os_error"


@dataclass(frozen=True)
class GPURecord:
    """One parsed line of GPU query output."""
    name: str
    memory_total_mb: int
    memory_used_mb: int
    temperature_c: int
    utilization_percent: int


@dataclass(frozen=True)
class ToolFailure:
    kind: ToolFailureKind
    message: str


@dataclass(frozen=True)
class ToolResult:
    """Outcome of running the GPU query tool: a record or a failure, never both."""
    record: Optional[GPURecord] = None
    failure: Optional[ToolFailure] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @classmethod
    def failed(cls, kind: ToolFailureKind, message: str) -> "ToolResult":
        return cls(failure=ToolFailure(kind=kind, message=message))


QueryRunner = Callable[[Union[str, Sequence[str]], float], ToolResult]


def _parse_reading(token: str) -> Optional[int]:
    """
    Parse a numeric reading.

    Returns 0 for readings the tool marks as unavailable and None when the
    token is not a number at all.
    """
    value = token.strip()
    if value.lower() in UNAVAILABLE_READINGS:
        return 0
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return None


def parse_query_output(output: str) -> ToolResult:
    """
    Parse the CSV output of the GPU query, first line only.

    Args:
        output: Raw stdout of the query command

    Returns:
        ToolResult with a GPURecord, or a MALFORMED_OUTPUT / EMPTY_OUTPUT failure
    """
    lines = [line for line in output.strip().splitlines() if line.strip()]
    if not lines:
        return ToolResult.failed(ToolFailureKind.EMPTY_OUTPUT, "GPU query returned no output")

    fields = [field.strip() for field in lines[0].split(",")]
    if len(fields) < QUERY_FIELD_COUNT:
        return ToolResult.failed(
            ToolFailureKind.MALFORMED_OUTPUT,
            f"Expected {QUERY_FIELD_COUNT} fields, got {len(fields)}: {lines[0]!r}"
        )

    name = fields[0]
    if name.lower() in UNAVAILABLE_READINGS:
        name = DEFAULT_TOOL_GPU_NAME

    readings = []
    for label, token in zip(("memory.total", "memory.used", "temperature", "utilization"), fields[1:5]):
        value = _parse_reading(token)
        if value is None:
            return ToolResult.failed(
                ToolFailureKind.MALFORMED_OUTPUT,
                f"Non-numeric {label} reading: {token!r}"
            )
        readings.append(value)

    memory_total, memory_used, temperature, utilization = readings
    return ToolResult(record=GPURecord(
        name=name,
        memory_total_mb=max(memory_total, 0),
        memory_used_mb=max(memory_used, 0),
        temperature_c=temperature,
        utilization_percent=min(max(utilization, 0), 100),
    ))


def run_query_tool(command: Union[str, Sequence[str]], timeout: float) -> ToolResult:
    """
    Run the GPU query command and parse its output.

    Spawns exactly one subprocess and never waits longer than `timeout`.
    All expected failures are returned, not raised.
    """
    args = shlex.split(command) if isinstance(command, str) else list(command)
    if not args:
        return ToolResult.failed(ToolFailureKind.NOT_FOUND, "GPU query command is empty")

    try:
        completed = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        return ToolResult.failed(ToolFailureKind.NOT_FOUND, f"{args[0]} not found")
    except subprocess.TimeoutExpired:
        return ToolResult.failed(ToolFailureKind.TIMEOUT, f"{args[0]} timed out after {timeout}s")
    except UnicodeDecodeError as e:
        return ToolResult.failed(ToolFailureKind.MALFORMED_OUTPUT, f"{args[0]} printed undecodable output: {e}")
    except OSError as e:
        return ToolResult.failed(ToolFailureKind.OS_ERROR, f"{args[0]} could not be started: {e}")

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        return ToolResult.failed(
            ToolFailureKind.EXIT_STATUS,
            f"{args[0]} exited with status {completed.returncode}: {stderr}"
        )

    return parse_query_output(completed.stdout or "")


def visible_devices(environ: Mapping[str, str]) -> Optional[str]:
    """Return the first non-empty accelerator visibility variable."""
    for name in VISIBILITY_ENV_VARS:
        value = environ.get(name)
        if value:
            return value
    return None


def not_detected() -> AcceleratorInfo:
    return AcceleratorInfo(
        detected=False,
        method=DetectionMethod.NOT_DETECTED,
        details="No GPU detected",
        name=NO_GPU_NAME,
    )


def detection_failed() -> AcceleratorInfo:
    return AcceleratorInfo(
        detected=False,
        method=DetectionMethod.DETECTION_FAILED,
        details="GPU detection encountered an error",
        name=FAILED_GPU_NAME,
    )


class HardwareProbe:
    """Detect GPU presence and metrics."""

    def __init__(
        self,
        command: Union[str, Sequence[str]],
        timeout: float,
        environ: Optional[Mapping[str, str]] = None,
        runner: QueryRunner = run_query_tool,
    ):
        """
        Initialize the probe.

        Args:
            command: GPU query command, as a string or argument list
            timeout: Query timeout in seconds
            environ: Environment mapping to read, defaults to os.environ
            runner: Callable executing the query, replaceable in tests
        """
        self.command = command
        self.timeout = timeout
        self.environ = os.environ if environ is None else environ
        self.runner = runner

    def probe(self) -> AcceleratorInfo:
        try:
            devices = visible_devices(self.environ)
            result = self.runner(self.command, self.timeout)

            if result.ok:
                record = result.record
                return AcceleratorInfo(
                    detected=True,
                    method=DetectionMethod.EXTERNAL_TOOL,
                    details="Full GPU access available",
                    name=record.name,
                    memory_total_mb=record.memory_total_mb,
                    memory_used_mb=record.memory_used_mb,
                    temperature_c=record.temperature_c,
                    utilization_percent=record.utilization_percent,
                    visible_devices=devices,
                )

            logger.debug(f"GPU query unavailable ({result.failure.kind.value}): {result.failure.message}")

            if devices:
                return AcceleratorInfo(
                    detected=True,
                    method=DetectionMethod.ENVIRONMENT_VARIABLE,
                    details="Runtime Detection",
                    name=ENV_GPU_NAME,
                    memory_total_mb=ENV_GPU_MEMORY_TOTAL_MB,
                    memory_used_mb=0,
                    temperature_c=ENV_GPU_TEMPERATURE_C,
                    utilization_percent=0,
                    visible_devices=devices,
                )

            return not_detected()
        except Exception:
            logger.exception("GPU detection error")
            return detection_failed()
