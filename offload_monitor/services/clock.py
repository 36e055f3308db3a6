import time
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ProcessClock:
    """Process start time, captured once at boot and never changed."""
    started_at: datetime
    _monotonic_start: float = field(repr=False, compare=False)

    @classmethod
    def start(cls) -> "ProcessClock":
        return cls(started_at=datetime.now(timezone.utc), _monotonic_start=time.monotonic())

    def uptime_seconds(self) -> float:
        return max(time.monotonic() - self._monotonic_start, 0.0)
