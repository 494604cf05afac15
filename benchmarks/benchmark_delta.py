from __future__ import annotations

import argparse
import os
import random
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from blocksync.engine import SyncEngine
from blocksync.index import build_index
from blocksync.patch import apply_to_path
from blocksync.signature import file_checksums
from blocksync.stats import SyncStats


def _write_pattern(path: Path, size_bytes: int, *, chunk_size: int = 4 * 1024 * 1024) -> None:
  path.parent.mkdir(parents=True, exist_ok=True)
  pattern = os.urandom(chunk_size)
  remaining = size_bytes

  with path.open('wb') as fh:
    while remaining > 0:
      to_write = min(chunk_size, remaining)
      fh.write(pattern[:to_write])
      remaining -= to_write


def _mutate_offsets(
  size_bytes: int, mutation_count: int, *, chunk_len: int, rng: random.Random
) -> Iterable[int]:
  if mutation_count <= 0 or size_bytes == 0:
    return []
  max_offset = max(size_bytes - chunk_len, 0)
  return (rng.randint(0, max_offset) for _ in range(mutation_count))


def _mutate_file(path: Path, offsets: Iterable[int], *, chunk_size: int = 64) -> None:
  with path.open('r+b') as fh:
    for offset in offsets:
      fh.seek(offset)
      fh.write(os.urandom(chunk_size))


@dataclass(slots=True)
class BenchmarkResult:
  index_time: float
  delta_time: float
  stats: SyncStats


def run_benchmark(
  *,
  size_mb: int,
  mutation_count: int,
  chunk_size: int,
  block_size: int,
  seed: int,
) -> BenchmarkResult:
  size_bytes = size_mb * 1024 * 1024

  with tempfile.TemporaryDirectory() as workspace:
    workspace_path = Path(workspace)
    remote = workspace_path / 'remote.bin'
    local = workspace_path / 'local.bin'
    rebuilt = workspace_path / 'rebuilt.bin'

    _write_pattern(remote, size_bytes, chunk_size=chunk_size)
    local.write_bytes(remote.read_bytes())

    rng = random.Random(seed)
    mutation_chunk = min(64, max(size_bytes // 1024, 1))
    offsets = list(_mutate_offsets(size_bytes, mutation_count, chunk_len=mutation_chunk, rng=rng))
    if offsets:
      _mutate_file(local, offsets, chunk_size=mutation_chunk)

    start = time.perf_counter()
    index, _ = build_index(file_checksums(remote, block_size))
    index_time = time.perf_counter() - start

    engine = SyncEngine(block_size=block_size)

    start = time.perf_counter()
    with local.open('rb') as fh:
      stats = apply_to_path(remote, engine.sync(fh, index), rebuilt, block_size)
    delta_time = time.perf_counter() - start

    if rebuilt.read_bytes() != local.read_bytes():
      raise RuntimeError('Rebuilt file does not match the local file')

  return BenchmarkResult(index_time=index_time, delta_time=delta_time, stats=stats)


def _format_bytes(value: int) -> str:
  return f'{value / (1024 * 1024):.2f} MiB'


def main() -> None:
  parser = argparse.ArgumentParser(description='Benchmark index building and block diffing.')
  parser.add_argument('--size-mb', type=int, default=64, help='Size of the remote file in MiB')
  parser.add_argument(
    '--mutations', type=int, default=4, help='Number of small mutations applied to the local copy'
  )
  parser.add_argument(
    '--pattern-chunk',
    type=int,
    default=4 * 1024 * 1024,
    help='Chunk size to use when materialising the remote file (bytes)',
  )
  parser.add_argument(
    '--block-size',
    type=int,
    default=6 * 1024,
    help='Block size for checksums and diffing (bytes)',
  )
  parser.add_argument('--seed', type=int, default=1337, help='Seed for mutation placement')

  args = parser.parse_args()

  result = run_benchmark(
    size_mb=args.size_mb,
    mutation_count=args.mutations,
    chunk_size=args.pattern_chunk,
    block_size=args.block_size,
    seed=args.seed,
  )

  print('=== Block Diff Benchmark ===')
  print(f'File size        : {args.size_mb} MiB')
  print(f'Block size       : {args.block_size} bytes')
  print(f'Mutations applied: {args.mutations}')
  print()
  print(f'Index build time : {result.index_time:.2f}s')
  print(f'Diff + patch time: {result.delta_time:.2f}s')
  print(f'  Transferred    : {_format_bytes(result.stats.bytes_transferred)}')
  print(f'  Reused         : {_format_bytes(result.stats.bytes_reused)}')


if __name__ == '__main__':
  main()
