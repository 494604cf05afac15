from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

BlockOperationKind = Literal['copy', 'literal', 'fault']

DEFAULT_BLOCK_SIZE = 6 * 1024


@dataclass(frozen=True)
class BlockChecksum:
  """
  Checksums of one block of the remote file.

  ``ordinal`` counts blocks, not bytes. A record carrying ``fault`` is malformed and must
  not be indexed.
  """

  ordinal: int
  fast: int
  strong: bytes
  fault: Exception | None = None


@dataclass(frozen=True)
class BlockOperation:
  """
  One instruction for rebuilding the local stream on the remote side.

  ``copy``: reuse remote block ``ordinal``. ``literal``: write ``data`` verbatim; ``ordinal``
  is the local block number. ``fault``: the stream ended abnormally at local block ``ordinal``.
  """

  kind: BlockOperationKind
  ordinal: int
  data: bytes | None = None
  error: Exception | None = None

  @classmethod
  def copy(cls, ordinal: int) -> BlockOperation:
    return cls('copy', ordinal)

  @classmethod
  def literal(cls, ordinal: int, data: bytes) -> BlockOperation:
    return cls('literal', ordinal, data=data)

  @classmethod
  def fault(cls, ordinal: int, error: Exception) -> BlockOperation:
    return cls('fault', ordinal, error=error)
