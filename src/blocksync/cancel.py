from __future__ import annotations

import threading
import time

from .error import DeadlineExceeded, OperationCancelled, SyncError


class CancelToken:
  """
  Cooperative cancellation signal shared between a caller and a running build or sync.

  Cancellation is sampled: work in progress (a pending read, for instance) is never
  interrupted, the token is only consulted at iteration boundaries.
  """

  def __init__(self, timeout: float | None = None) -> None:
    if timeout is not None and timeout < 0:
      raise ValueError('timeout must not be negative')

    self._event = threading.Event()
    self._deadline = None if timeout is None else time.monotonic() + timeout

  def cancel(self) -> None:
    self._event.set()

  @property
  def cancelled(self) -> bool:
    return self.error is not None

  @property
  def error(self) -> SyncError | None:
    if self._event.is_set():
      return OperationCancelled('operation cancelled')

    if self._deadline is not None and time.monotonic() >= self._deadline:
      return DeadlineExceeded('deadline exceeded')

    return None
