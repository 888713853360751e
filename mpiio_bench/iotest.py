import logging
from dataclasses import dataclass

import numpy as np

from . import report
from .config import SENTINEL
from .partition import get_offset_fn
from .timer import CycleTimer, bandwidth_mbps, total_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mismatch:
    rank: int
    offset: int
    value: int


@dataclass(frozen=True)
class PhaseResult:
    phase: str
    block_size: int
    elapsed_cycles: int
    total_bytes: int
    bandwidth_mbps: float
    short_transfers: int = 0
    mismatches: tuple = ()


def find_first_mismatch(buf, rank, expected=SENTINEL):
    """Return the first byte of ``buf`` that is not ``expected``, or None."""
    bad = buf != expected
    if not bad.any():
        return None
    offset = int(bad.argmax())
    return Mismatch(rank=rank, offset=offset, value=int(buf[offset]))


def _finish_phase(phase, worker, run, timer, short_transfers, mismatches=()):
    nbytes = total_bytes(run.block_size, run.blocks_per_worker, worker.group_size)
    elapsed = timer.elapsed()
    result = PhaseResult(
        phase=phase,
        block_size=run.block_size,
        elapsed_cycles=elapsed,
        total_bytes=nbytes,
        bandwidth_mbps=bandwidth_mbps(elapsed, timer.clock_rate, nbytes),
        short_transfers=short_transfers,
        mismatches=tuple(mismatches),
    )
    if short_transfers:
        logger.warning(
            f"Rank {worker.rank}: {short_transfers} of {run.blocks_per_worker} {phase}s of "
            f"{run.block_size} bytes to {run.path} transferred fewer bytes than requested"
        )
    return result


def write_test(group, run, timer=None, sentinel=SENTINEL):
    """Time ``blocks_per_worker`` positioned writes of one block on every worker."""
    timer = CycleTimer() if timer is None else timer
    worker = group.identity
    offset_fn = get_offset_fn(run.offset_mode)

    group.barrier()  # nobody opens while the previous phase still holds the file
    fh = group.open(run.path, "w")
    buf = np.full(run.block_size, sentinel, dtype=np.uint8)

    short = 0
    timer.mark_start()
    for i in range(run.blocks_per_worker):
        offset = offset_fn(worker.rank, run.block_size, run.blocks_per_worker, i)
        if fh.write_at(offset, buf) != run.block_size:
            short += 1
    group.barrier()
    fh.close()
    timer.mark_end()

    result = _finish_phase("write", worker, run, timer, short)
    if worker.rank == 0:
        report.print_phase(result)
    del buf
    return result


def read_test(group, run, timer=None, sentinel=SENTINEL):
    """Time the matching positioned reads, then check every byte read back."""
    timer = CycleTimer() if timer is None else timer
    worker = group.identity
    offset_fn = get_offset_fn(run.offset_mode)

    group.barrier()
    fh = group.open(run.path, "r")
    # Zero-filled so bytes a short read never delivered cannot pass as sentinel.
    buf = np.zeros(run.block_size * run.blocks_per_worker, dtype=np.uint8)

    short = 0
    timer.mark_start()
    for i in range(run.blocks_per_worker):
        offset = offset_fn(worker.rank, run.block_size, run.blocks_per_worker, i)
        view = buf[i * run.block_size:(i + 1) * run.block_size]
        if fh.read_at(offset, view) != run.block_size:
            short += 1
    group.barrier()
    fh.close()
    timer.mark_end()

    mismatch = find_first_mismatch(buf, worker.rank, sentinel)
    del buf

    # Sanity check results are collected on rank 0
    gathered = group.gather(mismatch, root=0)
    if worker.rank == 0:
        mismatches = [m for m in gathered if m is not None]
    else:
        mismatches = [mismatch] if mismatch is not None else []

    result = _finish_phase("read", worker, run, timer, short, mismatches)
    if worker.rank == 0:
        report.print_phase(result)
        for m in mismatches:
            report.print_mismatch(m)
    return result
