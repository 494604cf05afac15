import hashlib
from typing import Callable, Protocol

_MOD = 1 << 16


class StrongHash(Protocol):
  """The subset of the ``hashlib`` hash interface the engine relies on."""

  def update(self, data: bytes, /) -> None: ...

  def digest(self) -> bytes: ...


# Called once per digest, so every call must return a hasher in its empty state.
StrongHashFactory = Callable[[], StrongHash]

default_strong_hash: StrongHashFactory = hashlib.sha256


def fast_checksum(block: bytes) -> int:
  """
  Weak rsync checksum of a whole block, as an unsigned 32-bit value.

  The weighting uses the length of ``block`` itself so a short tail block hashes the
  same way on both sides. See https://rsync.samba.org/tech_report/node3.html.
  """
  size = len(block)
  s1 = sum(block) % _MOD
  s2 = sum((size - idx + 1) * byte for idx, byte in enumerate(block, start=1)) % _MOD
  return (s2 << 16) | s1


def strong_digest(block: bytes, strong_hash: StrongHashFactory = default_strong_hash) -> bytes:
  hasher = strong_hash()
  hasher.update(block)
  return hasher.digest()
