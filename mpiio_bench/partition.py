"""Byte layout of the shared file.

Worker ``rank`` owns ``[rank * block_size * blocks_per_worker,
(rank + 1) * block_size * blocks_per_worker)``.
"""


def rank_offset(rank, block_size, blocks_per_worker):
    return rank * block_size * blocks_per_worker


def fixed_offset(rank, block_size, blocks_per_worker, index):
    # Every repetition hits the first block of the worker's region.
    return rank_offset(rank, block_size, blocks_per_worker)


def advancing_offset(rank, block_size, blocks_per_worker, index):
    return rank_offset(rank, block_size, blocks_per_worker) + index * block_size


_OFFSET_FNS = {
    "fixed": fixed_offset,
    "advancing": advancing_offset,
}


def get_offset_fn(mode):
    try:
        return _OFFSET_FNS[mode]
    except KeyError:
        raise ValueError(f"Unknown offset mode '{mode}'") from None
