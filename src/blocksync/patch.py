from __future__ import annotations

import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import IO, BinaryIO, Iterable

from .error import PatchAborted, SyncError, wrap
from .operation import DEFAULT_BLOCK_SIZE, BlockOperation
from .stats import SyncStats


def apply(
  remote: BinaryIO,
  operations: Iterable[BlockOperation],
  output: IO[bytes],
  block_size: int = DEFAULT_BLOCK_SIZE,
) -> SyncStats:
  """
  Rebuild the local file into ``output`` from ``remote`` and an operation stream.

  Raises ``PatchAborted`` at the first fault operation; whatever was written to ``output``
  up to that point must be discarded.
  """
  if block_size <= 0:
    raise ValueError('block_size must be positive')

  copies = literals = transferred = reused = 0

  for op in operations:
    if op.kind == 'fault':
      raise wrap(PatchAborted, f'sync failed at block {op.ordinal}; full resync required', op.error)

    if op.kind == 'literal':
      if op.data is None:
        raise SyncError(f'literal operation at block {op.ordinal} carries no data')
      output.write(op.data)
      literals += 1
      transferred += len(op.data)
      continue

    reused += _copy_block(remote, output, op.ordinal, block_size)
    copies += 1

  return SyncStats(
    copies=copies, literals=literals, bytes_transferred=transferred, bytes_reused=reused
  )


def apply_to_path(
  remote: Path | str,
  operations: Iterable[BlockOperation],
  destination: Path | str,
  block_size: int = DEFAULT_BLOCK_SIZE,
) -> SyncStats:
  """
  Rebuild into ``destination`` atomically.

  Output goes to a temporary file beside ``destination`` that replaces it only once every
  operation has been applied. ``remote`` and ``destination`` may be the same file.
  """
  remote_path = Path(remote)
  dest_path = Path(destination)

  if dest_path.is_symlink():
    raise SyncError(f'Refusing to write through symbolic link: {dest_path}')

  temp_path = ''

  try:
    with remote_path.open('rb') as src:
      with tempfile.NamedTemporaryFile(delete=False, dir=dest_path.parent) as tmp:
        temp_path = tmp.name
        stats = apply(src, operations, tmp, block_size)

    os.replace(temp_path, dest_path)
  except Exception:
    if temp_path:
      with suppress(FileNotFoundError):
        os.unlink(temp_path)
    raise

  return stats


def _copy_block(remote: BinaryIO, writer: IO[bytes], ordinal: int, block_size: int) -> int:
  remote.seek(ordinal * block_size)
  block = remote.read(block_size)
  writer.write(block)
  return len(block)
