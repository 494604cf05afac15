from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, Mapping

from .cancel import CancelToken
from .error import SyncCancelled, wrap
from .operation import BlockChecksum

logger = logging.getLogger(__name__)

FaultReporter = Callable[[BlockChecksum], None]


def log_fault(record: BlockChecksum) -> None:
  logger.warning('checksum error at block %d: %r', record.ordinal, record.fault)


class BlockIndex(Mapping[int, tuple[BlockChecksum, ...]]):
  """
  Read-only lookup table from a fast checksum to the remote blocks sharing it.

  Buckets keep the order in which records arrived. Instances are only produced by
  ``build_index`` and expose no way to change them, so one index can back any number of
  concurrent sync runs.
  """

  __slots__ = ('_buckets', '_block_count')

  def __init__(self, buckets: Mapping[int, tuple[BlockChecksum, ...]]) -> None:
    self._buckets = MappingProxyType(dict(buckets))
    self._block_count = sum(len(bucket) for bucket in self._buckets.values())

  def __getitem__(self, fast: int) -> tuple[BlockChecksum, ...]:
    return self._buckets[fast]

  def __iter__(self) -> Iterator[int]:
    return iter(self._buckets)

  def __len__(self) -> int:
    return len(self._buckets)

  def __repr__(self) -> str:
    return f'BlockIndex(buckets={len(self)}, blocks={self._block_count})'

  @property
  def block_count(self) -> int:
    return self._block_count

  def candidates(self, fast: int) -> tuple[BlockChecksum, ...]:
    return self._buckets.get(fast, ())

  def match(self, fast: int, strong: bytes) -> BlockChecksum | None:
    """First candidate, in arrival order, whose strong digest equals ``strong``."""
    for candidate in self.candidates(fast):
      if candidate.strong == strong:
        return candidate

    return None


def build_index(
  checksums: Iterable[BlockChecksum],
  cancel: CancelToken | None = None,
  reporter: FaultReporter | None = None,
) -> tuple[BlockIndex, SyncCancelled | None]:
  """
  Index remote block checksums by their fast checksum.

  Faulty records are handed to ``reporter`` (by default, logged as warnings) and skipped.
  When ``cancel`` is observed the records consumed so far are returned together with a
  ``SyncCancelled`` error.
  """
  report = reporter or log_fault
  buckets: dict[int, list[BlockChecksum]] = {}
  error: SyncCancelled | None = None

  for record in checksums:
    if cancel is not None and cancel.cancelled:
      error = wrap(SyncCancelled, 'failed building lookup table', cancel.error)
      break

    if record.fault is not None:
      report(record)
      continue

    buckets.setdefault(record.fast, []).append(record)

  index = BlockIndex({fast: tuple(bucket) for fast, bucket in buckets.items()})

  return index, error
