from .cancel import CancelToken
from .checksum import StrongHash, StrongHashFactory, fast_checksum, strong_digest
from .engine import OperationStream, SyncEngine
from .error import (
  BlockReadError,
  ChecksumFault,
  DeadlineExceeded,
  OperationCancelled,
  PatchAborted,
  SyncCancelled,
  SyncError,
)
from .index import BlockIndex, FaultReporter, build_index
from .operation import DEFAULT_BLOCK_SIZE, BlockChecksum, BlockOperation, BlockOperationKind
from .patch import apply, apply_to_path
from .signature import checksums, file_checksums
from .stats import SyncStats

__all__ = [
  'DEFAULT_BLOCK_SIZE',
  'BlockChecksum',
  'BlockIndex',
  'BlockOperation',
  'BlockOperationKind',
  'BlockReadError',
  'CancelToken',
  'ChecksumFault',
  'DeadlineExceeded',
  'FaultReporter',
  'OperationCancelled',
  'OperationStream',
  'PatchAborted',
  'StrongHash',
  'StrongHashFactory',
  'SyncCancelled',
  'SyncEngine',
  'SyncError',
  'SyncStats',
  'apply',
  'apply_to_path',
  'build_index',
  'checksums',
  'fast_checksum',
  'file_checksums',
  'strong_digest',
]
