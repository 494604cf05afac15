from __future__ import annotations

import logging
import queue
import threading
from typing import Any, BinaryIO, Iterator

from .cancel import CancelToken
from .checksum import StrongHashFactory, default_strong_hash, fast_checksum, strong_digest
from .error import BlockReadError, SyncCancelled, SyncError, wrap
from .index import BlockIndex
from .operation import DEFAULT_BLOCK_SIZE, BlockOperation

logger = logging.getLogger(__name__)

_END = object()


class OperationStream(Iterator[BlockOperation]):
  """
  Operations produced by one sync run, in the order their blocks were read.

  The producing thread hands over one operation at a time and blocks until it is taken,
  so the stream must be drained to completion for the worker to exit.
  """

  def __init__(self, channel: queue.Queue[Any], worker: threading.Thread) -> None:
    self._channel = channel
    self._worker = worker
    self._closed = False

  def __iter__(self) -> OperationStream:
    return self

  def __next__(self) -> BlockOperation:
    if self._closed:
      raise StopIteration

    item = self._channel.get()

    if item is _END:
      self._closed = True
      raise StopIteration

    return item

  @property
  def closed(self) -> bool:
    return self._closed

  def join(self, timeout: float | None = None) -> bool:
    """Wait for the worker thread; returns whether it has finished."""
    self._worker.join(timeout)
    return not self._worker.is_alive()


class SyncEngine:
  """
  Diff a local stream against the block checksums of a remote file.

  Every block of the source turns into one operation: a copy of a remote block when both
  the fast checksum and the strong digest match, a literal carrying the block otherwise.

  When a fast checksum hits but no candidate's strong digest matches, the engine emits a
  copy whose ordinal is the local block number and which carries no data. Set
  ``literal_fallback`` to send such blocks as literals instead.
  """

  def __init__(
    self,
    block_size: int = DEFAULT_BLOCK_SIZE,
    *,
    strong_hash: StrongHashFactory | None = None,
    literal_fallback: bool = False,
  ):
    if block_size <= 0:
      raise ValueError('block_size must be positive')
    self.block_size = block_size
    self.strong_hash = strong_hash or default_strong_hash
    self.literal_fallback = literal_fallback

  def sync(
    self,
    source: BinaryIO | None,
    remote: BlockIndex,
    *,
    strong_hash: StrongHashFactory | None = None,
    cancel: CancelToken | None = None,
  ) -> OperationStream:
    """
    Start diffing ``source`` against ``remote`` on a background thread.

    Cancellation is checked before each read, never during one. A cancelled run, a read
    failure or any other error ends the stream with a single ``fault`` operation. ``remote``
    must not change until the stream is exhausted.
    """
    if source is None:
      raise SyncError('reader required')

    channel: queue.Queue[Any] = queue.Queue(maxsize=1)
    worker = threading.Thread(
      target=self._run,
      args=(source, remote, strong_hash or self.strong_hash, cancel, channel),
      name='blocksync-engine',
      daemon=True,
    )
    stream = OperationStream(channel, worker)
    worker.start()

    return stream

  def _run(
    self,
    source: BinaryIO,
    remote: BlockIndex,
    strong_hash: StrongHashFactory,
    cancel: CancelToken | None,
    channel: queue.Queue[Any],
  ) -> None:
    index = 0
    logger.debug(
      'sync started: block size %d, %d remote blocks', self.block_size, remote.block_count
    )

    try:
      while True:
        if cancel is not None and cancel.cancelled:
          logger.debug('sync cancelled at block %d', index)
          error = wrap(SyncCancelled, 'sync cancelled', cancel.error)
          channel.put(BlockOperation.fault(index, error))
          return

        try:
          block = source.read(self.block_size)
        except Exception as exc:
          # The source may be corrupt from here on; callers restart from scratch.
          logger.debug('read failed at block %d: %s', index, exc)
          error = wrap(BlockReadError, 'failed reading block', exc)
          channel.put(BlockOperation.fault(index, error))
          return

        if block is None:
          # Non-blocking sources return None when no data is ready; that is not EOF.
          logger.debug('read returned no data at block %d', index)
          error = wrap(BlockReadError, 'failed reading block: source returned no data', None)
          channel.put(BlockOperation.fault(index, error))
          return

        if len(block) == 0:
          logger.debug('sync finished after %d blocks', index)
          return

        channel.put(self._operation(index, bytes(block), remote, strong_hash))
        index += 1
    except Exception as exc:
      logger.debug('sync failed at block %d: %s', index, exc)
      channel.put(BlockOperation.fault(index, wrap(SyncError, 'sync failed', exc)))
    finally:
      channel.put(_END)

  def _operation(
    self, index: int, block: bytes, remote: BlockIndex, strong_hash: StrongHashFactory
  ) -> BlockOperation:
    fast = fast_checksum(block)

    if fast not in remote:
      return BlockOperation.literal(index, block)

    match = remote.match(fast, strong_digest(block, strong_hash))

    if match is not None:
      return BlockOperation.copy(match.ordinal)

    if self.literal_fallback:
      return BlockOperation.literal(index, block)

    return BlockOperation.copy(index)
