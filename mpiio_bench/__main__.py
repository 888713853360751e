import logging
import os
import sys

from .config import load_settings
from .errors import BenchmarkError
from .group import MPIGroup
from .sweep import run_sweep

logger = logging.getLogger("mpiio_bench")


def setup_logging(rank):
    level = os.environ.get("MPIIO_BENCH_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=f"%(asctime)s [rank {rank}] %(levelname)s %(name)s: %(message)s",
    )


def main(argv=None):
    argv = sys.argv if argv is None else argv
    group = MPIGroup()
    setup_logging(group.rank)

    if len(argv) < 2:
        if group.rank == 0:
            print(f"Usage: mpiexec -n <workers> {os.path.basename(argv[0])} <path to shared file>")
        return 1
    path = argv[1]

    try:
        settings = load_settings() if group.rank == 0 else None
        settings = group.bcast(settings, root=0)
        run_sweep(group, path, settings)
    except BenchmarkError as e:
        logger.error(f"Rank {group.rank}: {e}")
        group.abort(1)
    except Exception:
        # The other ranks are blocked in a collective; only an abort releases them.
        logger.exception(f"Rank {group.rank}: unexpected error")
        group.abort(1)

    group.barrier()
    if group.rank == 0:
        print("\n=== MPI-IO benchmark complete ===", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
