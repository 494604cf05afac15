from __future__ import annotations

import argparse
import typing as t
from dataclasses import dataclass
from pathlib import Path

from .operation import DEFAULT_BLOCK_SIZE


@dataclass
class Arguments:
  """
  A wrapper class providing concrete types for parsed command-line arguments.
  """

  remote: Path
  local: Path
  block_size: int
  output: t.Optional[Path]
  literal_fallback: bool
  verbose: bool

  @staticmethod
  def from_args(argv: t.Optional[t.Sequence[str]] = None) -> Arguments:
    parser = argparse.ArgumentParser(
      prog='blocksync',
      description='Diff a local file against the block checksums of a remote one.',
      formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument('remote', type=Path, help='Path to the remote (old) version of the file')

    parser.add_argument('local', type=Path, help='Path to the local (new) version of the file')

    parser.add_argument(
      '--block-size',
      type=int,
      default=DEFAULT_BLOCK_SIZE,
      help='Block size (bytes) shared by checksums and diffing.',
    )

    parser.add_argument(
      '--output',
      type=Path,
      help='Rebuild the local file here from the remote file and the operations.',
    )

    parser.add_argument(
      '--literal-fallback',
      action='store_true',
      help='Send blocks whose strong digest matches no candidate as literals.',
    )

    parser.add_argument(
      '-v',
      '--verbose',
      action='store_true',
      help='Log each operation as it is produced.',
    )

    return Arguments(**vars(parser.parse_args(argv)))
