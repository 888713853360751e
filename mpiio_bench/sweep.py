import logging
from dataclasses import dataclass
from typing import Optional

from . import report
from .config import Settings, TestRun
from .iotest import PhaseResult, read_test, write_test
from .timer import CycleTimer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepRow:
    block_size: int
    write: PhaseResult
    read: PhaseResult
    # Only rank 0 deletes the file; None everywhere else.
    deleted: Optional[bool] = None


def run_sweep(group, path, settings=None, timer_factory=CycleTimer):
    """Write then read ``path`` once per block size, in lock-step on every worker."""
    settings = Settings() if settings is None else settings
    worker = group.identity

    if worker.rank == 0:
        report.print_run_header(worker.group_size)

    rows = []
    for block_size in settings.block_sizes:
        run = TestRun(
            path=path,
            block_size=block_size,
            blocks_per_worker=settings.blocks_per_worker,
            offset_mode=settings.offset_mode,
        )
        if worker.rank == 0:
            report.print_block_header(block_size)

        # WRITE
        write = write_test(group, run, timer_factory())
        # READ
        read = read_test(group, run, timer_factory())

        deleted = None
        if worker.rank == 0:
            deleted = group.delete(path)
            if not deleted:
                logger.warning(f"{path} was not deleted, block size {block_size} leaves stale data behind")
        rows.append(SweepRow(block_size=block_size, write=write, read=read, deleted=deleted))

    if worker.rank == 0:
        report.print_summary(rows)
    return rows
