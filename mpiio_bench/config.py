import os
from dataclasses import dataclass

from .errors import ConfigError

K = 1024
BLOCKS_PER_WORKER = 32
SENTINEL = ord("1")
BLOCK_SIZES = (128 * K, 256 * K, 512 * K, 1024 * K, 2048 * K, 4096 * K, 8192 * K, 2 * 8192 * K)
OFFSET_MODES = ("fixed", "advancing")


def parse_size_to_bytes(size_str):
    units = {"K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}
    size_str = size_str.strip().upper()
    try:
        if size_str and size_str[-1] in units:
            return int(float(size_str[:-1]) * units[size_str[-1]])
        return int(size_str)
    except (ValueError, OverflowError):
        raise ConfigError(f"Invalid size '{size_str}'") from None


@dataclass(frozen=True)
class WorkerIdentity:
    rank: int
    group_size: int


@dataclass(frozen=True)
class Settings:
    block_sizes: tuple = BLOCK_SIZES
    blocks_per_worker: int = BLOCKS_PER_WORKER
    offset_mode: str = "fixed"


@dataclass(frozen=True)
class TestRun:
    """One sweep iteration: the block size under test and where it goes."""

    __test__ = False

    path: str
    block_size: int
    blocks_per_worker: int = BLOCKS_PER_WORKER
    offset_mode: str = "fixed"


def load_settings(environ=None):
    """Read sweep overrides from MPIIO_BENCH_* environment variables.

    Only rank 0 should call this; the result is broadcast so that every
    worker computes offsets from the same sweep.
    """
    environ = os.environ if environ is None else environ

    block_sizes = BLOCK_SIZES
    raw = environ.get("MPIIO_BENCH_BLOCK_SIZES")
    if raw:
        block_sizes = tuple(parse_size_to_bytes(s) for s in raw.split(",") if s.strip())
        if not block_sizes:
            raise ConfigError("MPIIO_BENCH_BLOCK_SIZES is empty")
    if any(b <= 0 for b in block_sizes):
        raise ConfigError(f"Block sizes must be positive, got {block_sizes}")

    raw = environ.get("MPIIO_BENCH_BLOCKS")
    blocks = BLOCKS_PER_WORKER
    if raw:
        try:
            blocks = int(raw)
        except ValueError:
            raise ConfigError(f"MPIIO_BENCH_BLOCKS must be an integer, got '{raw}'") from None
        if blocks <= 0:
            raise ConfigError(f"MPIIO_BENCH_BLOCKS must be positive, got {blocks}")

    offset_mode = environ.get("MPIIO_BENCH_OFFSET_MODE", "fixed").strip().lower()
    if offset_mode not in OFFSET_MODES:
        raise ConfigError(f"Unknown offset mode '{offset_mode}', expected one of {OFFSET_MODES}")

    return Settings(block_sizes=block_sizes, blocks_per_worker=blocks, offset_mode=offset_mode)
