"""Console output. Everything here is printed by rank 0 only."""

import pandas as pd


def print_run_header(group_size):
    print(f"[Run {group_size} Tasks]", flush=True)


def print_block_header(block_size):
    print(f"\nPerforming test with block size {block_size}\n--------------", flush=True)


def print_phase(result):
    print(f"[{result.phase}] {result.elapsed_cycles} cycles elapsed, {result.total_bytes} bytes", flush=True)
    print(f"[{result.phase}] > Bandwidth = {result.bandwidth_mbps:f} MB/s", flush=True)


def print_mismatch(m):
    print(
        f"[Error] Rank {m.rank} failed to read/write at relative position {m.offset}, "
        f"got char 0x{m.value:02x} instead!",
        flush=True,
    )


def summary_frame(rows):
    records = []
    for row in rows:
        records.append({
            "block_size": row.block_size,
            "total_bytes": row.write.total_bytes,
            "write_cycles": row.write.elapsed_cycles,
            "write_MBps": row.write.bandwidth_mbps,
            "read_cycles": row.read.elapsed_cycles,
            "read_MBps": row.read.bandwidth_mbps,
            "short_transfers": row.write.short_transfers + row.read.short_transfers,
            "mismatched_ranks": len(row.read.mismatches),
            "deleted": row.deleted,
        })
    return pd.DataFrame.from_records(records)


def print_summary(rows):
    if not rows:
        return
    print("\n=== Summary ===", flush=True)
    print(summary_frame(rows).to_string(index=False), flush=True)
