from __future__ import annotations

import hashlib

from blocksync.checksum import fast_checksum, strong_digest


def _reference_digest(block: bytes, block_size: int) -> int:
  mod = 1 << 16
  s1 = sum(block) % mod
  s2 = sum((block_size - idx + 1) * byte for idx, byte in enumerate(block, start=1)) % mod
  return (s2 << 16) | s1


def test_fast_checksum_matches_reference_implementation() -> None:
  block = bytes([1, 2, 3, 4])
  assert fast_checksum(block) == _reference_digest(block, len(block))


def test_fast_checksum_fits_in_32_bits() -> None:
  # Large enough for both internal sums to overflow the 16-bit modulus.
  block = bytes([255]) * 4096
  digest = fast_checksum(block)

  assert 0 <= digest < 1 << 32
  assert digest == _reference_digest(block, len(block))


def test_fast_checksum_weights_by_position() -> None:
  assert fast_checksum(b'ab') != fast_checksum(b'ba')


def test_fast_checksum_of_empty_block_is_zero() -> None:
  assert fast_checksum(b'') == 0


def test_strong_digest_defaults_to_sha256() -> None:
  assert strong_digest(b'block') == hashlib.sha256(b'block').digest()


def test_strong_digest_uses_a_fresh_hasher_each_call() -> None:
  first = strong_digest(b'one', hashlib.md5)
  second = strong_digest(b'one', hashlib.md5)

  assert first == second == hashlib.md5(b'one').digest()
