import os

from conftest import ThreadGroup, run_ranks
from mpiio_bench import sweep
from mpiio_bench.config import Settings
from mpiio_bench.iotest import Mismatch
from mpiio_bench.report import summary_frame
from mpiio_bench.sweep import run_sweep

SMALL = Settings(block_sizes=(1024, 4096, 8192), blocks_per_worker=4)


class NoDeleteGroup(ThreadGroup):
    def delete(self, path):
        return False


class TestRunSweep:
    def test_single_worker(self, shared_path, capsys):
        [rows] = run_ranks(1, lambda group: run_sweep(group, shared_path, SMALL))
        assert [row.block_size for row in rows] == [1024, 4096, 8192]
        assert all(row.deleted for row in rows)
        assert all(row.read.mismatches == () for row in rows)
        assert not os.path.exists(shared_path)

        out = capsys.readouterr().out
        assert "[Run 1 Tasks]" in out
        for b in SMALL.block_sizes:
            assert f"Performing test with block size {b}" in out
        assert "=== Summary ===" in out

    def test_only_rank_zero_deletes(self, shared_path):
        results = run_ranks(4, lambda group: run_sweep(group, shared_path, SMALL))
        assert all(row.deleted is True for row in results[0])
        for rows in results[1:]:
            assert all(row.deleted is None for row in rows)
        assert not os.path.exists(shared_path)

    def test_volumes_are_repeatable(self, shared_path):
        def volumes():
            [rows] = run_ranks(1, lambda group: run_sweep(group, shared_path, SMALL))
            return [(row.write.total_bytes, row.read.total_bytes) for row in rows]

        first = volumes()
        assert first == volumes()
        assert first == [(4 * b, 4 * b) for b in SMALL.block_sizes]

    def test_failed_delete_is_reported(self, shared_path, caplog):
        rows = run_ranks(2, lambda group: run_sweep(group, shared_path, SMALL), group_cls=NoDeleteGroup)[0]
        assert all(row.deleted is False for row in rows)
        assert "was not deleted" in caplog.text
        assert os.path.exists(shared_path)

    def test_summary_frame(self, shared_path):
        [rows] = run_ranks(1, lambda group: run_sweep(group, shared_path, SMALL))
        frame = summary_frame(rows)
        assert list(frame["block_size"]) == list(SMALL.block_sizes)
        assert list(frame["total_bytes"]) == [4 * b for b in SMALL.block_sizes]
        assert (frame["mismatched_ranks"] == 0).all()
        assert (frame["write_MBps"] >= 0).all()


class TestMismatchDoesNotStopSweep:
    def test_next_block_size_runs_clean(self, shared_path, monkeypatch):
        settings = Settings(block_sizes=(1024, 2048), blocks_per_worker=4)
        clean_read = sweep.read_test

        def truncating_read(group, run, timer=None):
            if run.block_size == 1024 and group.rank == 0:
                os.truncate(shared_path, 0)
            group.barrier()
            return clean_read(group, run, timer)

        monkeypatch.setattr(sweep, "read_test", truncating_read)
        rows = run_ranks(2, lambda group: run_sweep(group, shared_path, settings))[0]

        assert [row.block_size for row in rows] == [1024, 2048]
        assert rows[0].read.mismatches == (Mismatch(0, 0, 0), Mismatch(1, 0, 0))
        assert rows[1].read.mismatches == ()
        assert rows[1].write.short_transfers == rows[1].read.short_transfers == 0
        assert all(row.deleted for row in rows)
