"""Disk cache of captured test output

Each run's console output is stored under a run ID so it can be parsed again later.
Output is transparently compressed and decompressed.
"""

import os
import re

from wtrexplorer import config

import zstd


COMPRESS_EXT = '.zst'
# Files are always assumed to be using this character map
CHARMAP = 'UTF-8'

# Run IDs become file names so they are limited to a safe set of characters
RUN_ID_RE = re.compile(r'^[\w.-]+$')


def cache_path(run_id: str) -> str:
    if not RUN_ID_RE.search(run_id) or run_id.startswith('.'):
        raise RuntimeError(f'Invalid run ID: {run_id}')
    return os.path.join(config.expand('output_cache_path'), run_id + '.log')


def in_cache(run_id: str) -> bool:
    """Returns true if the output of the run exists in the cache

    The file may optionally be compressed.
    """
    path = cache_path(run_id)
    return os.path.exists(path) or os.path.exists(path + COMPRESS_EXT)


def store_output(run_id: str, output: str):
    """Store captured output in the cache, replacing any earlier output for the run

    Don't compress it if it's too small.
    """
    os.makedirs(config.expand('output_cache_path'), exist_ok=True)
    path = cache_path(run_id)
    data = output.encode(CHARMAP)
    # Remove the other form so a stale copy isn't read back instead
    for stale in (path, path + COMPRESS_EXT):
        if os.path.exists(stale):
            os.unlink(stale)

    if len(data) <= config.get('compress_threshold_bytes'):
        # zstd has trouble with zero-length input and compressing a tiny file isn't worth it
        with open(path, 'wb') as out_file:
            out_file.write(data)
        return

    with open(path + COMPRESS_EXT, 'wb') as out_file:
        out_file.write(zstd.compress(data))


def load_output(run_id: str) -> str:
    """Read captured output back from the cache

    Raises FileNotFoundError if the run is not in the cache.
    """
    path = cache_path(run_id)
    try:
        with open(path + COMPRESS_EXT, 'rb') as compress_file:
            return zstd.decompress(compress_file.read()).decode(CHARMAP)
    except FileNotFoundError:
        with open(path, 'rb') as f:
            return f.read().decode(CHARMAP)
