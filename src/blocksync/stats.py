from dataclasses import dataclass


@dataclass(frozen=True)
class SyncStats:
  """What a reconstruction wrote, split by where the bytes came from."""

  copies: int
  literals: int
  bytes_transferred: int
  bytes_reused: int

  @property
  def total_bytes(self) -> int:
    return self.bytes_transferred + self.bytes_reused

  @property
  def operations(self) -> int:
    return self.copies + self.literals
