from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Iterator

from .checksum import StrongHashFactory, default_strong_hash, fast_checksum, strong_digest
from .error import ChecksumFault, wrap
from .operation import DEFAULT_BLOCK_SIZE, BlockChecksum


def checksums(
  source: BinaryIO,
  block_size: int = DEFAULT_BLOCK_SIZE,
  strong_hash: StrongHashFactory | None = None,
) -> Iterator[BlockChecksum]:
  """
  Describe ``source`` as a lazy sequence of block checksums, in block order.

  A failed read produces one record whose ``fault`` is set and ends the sequence.
  """
  if block_size <= 0:
    raise ValueError('block_size must be positive')

  hasher = strong_hash or default_strong_hash
  ordinal = 0

  while True:
    try:
      block = source.read(block_size)
    except OSError as exc:
      yield BlockChecksum(
        ordinal=ordinal, fast=0, strong=b'', fault=wrap(ChecksumFault, 'failed reading block', exc)
      )
      return

    if block is None:
      fault = wrap(ChecksumFault, 'failed reading block: source returned no data', None)
      yield BlockChecksum(ordinal=ordinal, fast=0, strong=b'', fault=fault)
      return

    if len(block) == 0:
      return

    yield BlockChecksum(
      ordinal=ordinal, fast=fast_checksum(block), strong=strong_digest(block, hasher)
    )
    ordinal += 1


def file_checksums(
  path: Path | str,
  block_size: int = DEFAULT_BLOCK_SIZE,
  strong_hash: StrongHashFactory | None = None,
) -> Iterator[BlockChecksum]:
  with Path(path).open('rb') as fh:
    yield from checksums(fh, block_size, strong_hash)
