from .config import BLOCK_SIZES, BLOCKS_PER_WORKER, SENTINEL, Settings, TestRun, WorkerIdentity, load_settings
from .errors import BenchmarkError
from .iotest import Mismatch, PhaseResult, find_first_mismatch, read_test, write_test
from .partition import rank_offset
from .sweep import SweepRow, run_sweep
from .timer import CLOCK_RATE, CycleTimer, bandwidth_mbps

__version__ = "0.1.0"
