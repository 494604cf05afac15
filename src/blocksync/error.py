from typing import TypeVar


class SyncError(Exception):
  """Base class for every error raised or reported by blocksync."""


class OperationCancelled(SyncError):
  """The cancellation token was cancelled explicitly."""


class DeadlineExceeded(SyncError):
  """The cancellation token's deadline passed."""


class SyncCancelled(SyncError):
  """A build or sync run stopped because cancellation was observed."""


class BlockReadError(SyncError):
  """Reading a block from a source stream failed."""


class ChecksumFault(SyncError):
  """A checksum record could not be produced."""


class PatchAborted(SyncError):
  """Reconstruction stopped at a fault operation; partial output is invalid."""


_E = TypeVar('_E', bound=SyncError)


def wrap(error_type: type[_E], message: str, cause: BaseException | None) -> _E:
  """Build ``error_type(message)`` chained to ``cause`` without raising it."""
  error = error_type(message)
  error.__cause__ = cause
  return error
