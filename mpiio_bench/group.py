import logging

from mpi4py import MPI

from .config import WorkerIdentity
from .errors import FileCloseError, FileIOError, FileOpenError

logger = logging.getLogger(__name__)

_AMODES = {
    "w": MPI.MODE_CREATE | MPI.MODE_WRONLY,
    "r": MPI.MODE_RDONLY,
}


class MPISharedFile:
    """Positioned I/O on a collectively opened MPI file."""

    def __init__(self, fh, path):
        self.fh = fh
        self.path = path
        self.status = MPI.Status()

    def write_at(self, offset, buf):
        try:
            self.fh.Write_at(offset, [buf, MPI.BYTE], self.status)
        except MPI.Exception as e:
            raise FileIOError(f"Write of {len(buf)} bytes at {offset} in {self.path} failed: {e.Get_error_string()}") from e
        return self.status.Get_count(MPI.BYTE)

    def read_at(self, offset, buf):
        try:
            self.fh.Read_at(offset, [buf, MPI.BYTE], self.status)
        except MPI.Exception as e:
            raise FileIOError(f"Read of {len(buf)} bytes at {offset} in {self.path} failed: {e.Get_error_string()}") from e
        return self.status.Get_count(MPI.BYTE)

    def close(self):
        try:
            self.fh.Close()
        except MPI.Exception as e:
            raise FileCloseError(f"Failed to close {self.path}: {e.Get_error_string()}") from e


class MPIGroup:
    """The fixed group of workers sharing one communicator."""

    def __init__(self, comm=None):
        self.comm = MPI.COMM_WORLD if comm is None else comm
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()

    @property
    def identity(self):
        return WorkerIdentity(rank=self.rank, group_size=self.size)

    def barrier(self):
        self.comm.Barrier()

    def bcast(self, obj, root=0):
        return self.comm.bcast(obj, root=root)

    def gather(self, obj, root=0):
        return self.comm.gather(obj, root=root)

    def open(self, path, mode):
        try:
            amode = _AMODES[mode]
        except KeyError:
            raise ValueError(f"Unsupported open mode '{mode}'") from None
        try:
            fh = MPI.File.Open(self.comm, path, amode, MPI.INFO_NULL)
        except MPI.Exception as e:
            raise FileOpenError(f"Rank {self.rank} failed to open {path} ({mode}): {e.Get_error_string()}") from e
        return MPISharedFile(fh, path)

    def delete(self, path):
        try:
            MPI.File.Delete(path, MPI.INFO_NULL)
        except MPI.Exception as e:
            logger.warning(f"Rank {self.rank} failed to delete {path}: {e.Get_error_string()}")
            return False
        return True

    def abort(self, code=1):
        self.comm.Abort(code)
