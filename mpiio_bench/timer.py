import logging
import time
from dataclasses import dataclass

from .errors import TimerError

logger = logging.getLogger(__name__)

# Ticks per second of the default cycle source (perf_counter_ns).
CLOCK_RATE = 1_000_000_000


@dataclass(frozen=True)
class TimingWindow:
    start_cycles: int
    end_cycles: int

    @property
    def elapsed(self):
        return self.end_cycles - self.start_cycles


class CycleTimer:
    """Start/end marks on a monotonic cycle source."""

    def __init__(self, source=time.perf_counter_ns, clock_rate=CLOCK_RATE):
        self.source = source
        self.clock_rate = clock_rate
        self.start_cycles = None
        self.end_cycles = None

    def mark_start(self):
        self.start_cycles = self.source()
        self.end_cycles = None

    def mark_end(self):
        if self.start_cycles is None:
            raise TimerError("mark_end() called before mark_start()")
        self.end_cycles = self.source()
        return TimingWindow(self.start_cycles, self.end_cycles)

    def elapsed(self):
        if self.start_cycles is None or self.end_cycles is None:
            raise TimerError("Timing window is not closed")
        return self.end_cycles - self.start_cycles


def total_bytes(block_size, blocks_per_worker, group_size):
    return blocks_per_worker * group_size * block_size


def bandwidth_mbps(elapsed_cycles, clock_rate_hz, nbytes):
    if elapsed_cycles < 0:
        logger.warning(f"Negative elapsed cycle count {elapsed_cycles}, reporting 0")
        elapsed_cycles = 0
    return elapsed_cycles / float(clock_rate_hz) * nbytes / 1e6
