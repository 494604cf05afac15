from __future__ import annotations

import io
import logging
from pathlib import Path

from rich.console import Console

from blocksync.__main__ import _make_console_reporter
from blocksync.error import BlockReadError
from blocksync.operation import BlockOperation


def _write_pair(tmp_path: Path, remote: bytes, local: bytes) -> tuple[Path, Path]:
  (tmp_path / 'remote.bin').write_bytes(remote)
  (tmp_path / 'local.bin').write_bytes(local)
  # run_cli works inside tmp_path, so relative names keep the output table narrow.
  return Path('remote.bin'), Path('local.bin')


def test_cli_reports_stats(tmp_path: Path, run_cli) -> None:
  remote, local = _write_pair(tmp_path, b'abcdBBBB', b'abcdZzzz')

  result = run_cli(tmp_path, remote, local, '--block-size', '4')

  assert result.exit_code == 0
  assert 'local.bin' in result.stdout
  assert 'Total: transferred 4 bytes | reused 4 bytes | 2 operations' in result.stdout
  assert 'Rebuilt' not in result.stdout


def test_cli_rebuilds_output(tmp_path: Path, run_cli) -> None:
  remote, local = _write_pair(tmp_path, b'AAAABBBBCCCC', b'CCCCAAAAxy')

  result = run_cli(tmp_path, remote, local, '--block-size', '4', '--output', 'out.bin')

  assert result.exit_code == 0
  assert (tmp_path / 'out.bin').read_bytes() == b'CCCCAAAAxy'
  assert 'Rebuilt' in result.stdout


def test_cli_verbose_lists_operations(tmp_path: Path, run_cli) -> None:
  remote, local = _write_pair(tmp_path, b'AAAA', b'AAAAQRST')

  result = run_cli(tmp_path, remote, local, '--block-size', '4', '--verbose')

  assert result.exit_code == 0
  assert 'copy block: 0' in result.stdout
  assert 'literal block: 1 (4 B)' in result.stdout


def test_cli_rejects_non_positive_block_size(tmp_path: Path, run_cli) -> None:
  remote, local = _write_pair(tmp_path, b'AAAA', b'AAAA')

  result = run_cli(tmp_path, remote, local, '--block-size', '0')

  assert result.exit_code == 1
  assert 'error:' in result.stderr
  assert '--block-size must be a positive integer' in result.stderr


def test_cli_reports_missing_local_file(tmp_path: Path, run_cli) -> None:
  (tmp_path / 'remote.bin').write_bytes(b'AAAA')

  result = run_cli(tmp_path, 'remote.bin', 'missing.bin')

  assert result.exit_code == 1
  assert 'error:' in result.stderr


def test_console_reporter_formats_each_operation_kind() -> None:
  stream = io.StringIO()
  console = Console(file=stream, force_terminal=False, color_system=None, highlight=False)
  reporter = _make_console_reporter(console)

  for op in [
    BlockOperation.copy(3),
    BlockOperation.literal(1, b'abcd'),
    BlockOperation.fault(2, BlockReadError('failed reading block')),
  ]:
    reporter(op)

  assert stream.getvalue().strip().splitlines() == [
    'copy block: 3',
    'literal block: 1 (4 B)',
    'fault at block: 2 (failed reading block)',
  ]


def test_cli_logging_does_not_propagate_to_root(tmp_path: Path, run_cli) -> None:
  remote, local = _write_pair(tmp_path, b'AAAA', b'AAAA')

  result = run_cli(tmp_path, remote, local, '--block-size', '4')

  logger = logging.getLogger('blocksync')
  assert result.exit_code == 0
  assert logger.propagate is False
  assert len(logger.handlers) == 1
