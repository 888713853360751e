"""An in-process worker group: one thread per rank, POSIX positioned I/O."""

import os
import threading

import pytest

from mpiio_bench.config import WorkerIdentity
from mpiio_bench.errors import FileOpenError


class PosixSharedFile:
    def __init__(self, fd):
        self.fd = fd

    def write_at(self, offset, buf):
        return os.pwrite(self.fd, buf, offset)

    def read_at(self, offset, buf):
        return os.preadv(self.fd, [buf], offset)

    def close(self):
        os.close(self.fd)


class ThreadWorld:
    def __init__(self, size):
        self.size = size
        self.barrier = threading.Barrier(size, timeout=30)
        self.slots = [None] * size
        self.shared = None


class ThreadGroup:
    file_cls = PosixSharedFile

    def __init__(self, world, rank):
        self.world = world
        self.rank = rank
        self.size = world.size

    @property
    def identity(self):
        return WorkerIdentity(rank=self.rank, group_size=self.size)

    def barrier(self):
        self.world.barrier.wait()

    def bcast(self, obj, root=0):
        if self.rank == root:
            self.world.shared = obj
        self.world.barrier.wait()
        value = self.world.shared
        self.world.barrier.wait()
        return value

    def gather(self, obj, root=0):
        self.world.slots[self.rank] = obj
        self.world.barrier.wait()
        result = list(self.world.slots) if self.rank == root else None
        self.world.barrier.wait()
        return result

    def open(self, path, mode):
        flags = os.O_CREAT | os.O_WRONLY if mode == "w" else os.O_RDONLY
        try:
            fd = os.open(path, flags, 0o644)
        except OSError as e:
            raise FileOpenError(f"Rank {self.rank} failed to open {path}: {e}") from e
        return self.file_cls(fd)

    def delete(self, path):
        try:
            os.remove(path)
        except OSError:
            return False
        return True

    def abort(self, code=1):
        raise RuntimeError(f"abort({code})")


def run_ranks(size, fn, group_cls=ThreadGroup):
    """Run ``fn(group)`` on ``size`` ranks at once and return results by rank."""
    world = ThreadWorld(size)
    results = [None] * size
    errors = []

    def worker(rank):
        try:
            results[rank] = fn(group_cls(world, rank))
        except BaseException as e:
            errors.append(e)
            world.barrier.abort()

    threads = [threading.Thread(target=worker, args=(r,)) for r in range(size)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    if errors:
        raise errors[0]
    return results


@pytest.fixture
def shared_path(tmp_path):
    return str(tmp_path / "shared.dat")
