from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from blocksync.arguments import Arguments
from blocksync.engine import SyncEngine
from blocksync.error import SyncError
from blocksync.index import build_index
from blocksync.operation import BlockOperation
from blocksync.patch import apply, apply_to_path
from blocksync.signature import file_checksums
from blocksync.stats import SyncStats

OperationReporter = Callable[[BlockOperation], None]


def _configure_logging(console: Console, verbose: bool) -> None:
  logger = logging.getLogger('blocksync')
  logger.handlers[:] = [RichHandler(console=console, show_path=False, show_time=False)]
  logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
  logger.propagate = False


def _build_engine(args: Arguments) -> SyncEngine:
  if args.block_size <= 0:
    raise SyncError('--block-size must be a positive integer')

  return SyncEngine(block_size=args.block_size, literal_fallback=args.literal_fallback)


def _make_console_reporter(console: Console) -> OperationReporter:
  def reporter(op: BlockOperation) -> None:
    if op.kind == 'copy':
      console.print(f'copy block: {op.ordinal}')
    elif op.kind == 'literal':
      size = len(op.data or b'')
      console.print(f'literal block: {op.ordinal} ({size:,} B)')
    else:
      console.print(f'fault at block: {op.ordinal} ({op.error})')

  return reporter


def _reported(
  operations: Iterable[BlockOperation], reporter: Optional[OperationReporter]
) -> Iterator[BlockOperation]:
  for op in operations:
    if reporter is not None:
      reporter(op)
    yield op


def _diff(args: Arguments, engine: SyncEngine, reporter: Optional[OperationReporter]) -> SyncStats:
  index, _ = build_index(file_checksums(args.remote, engine.block_size))

  with args.local.open('rb') as local:
    operations = _reported(engine.sync(local, index), reporter)

    if args.output is not None:
      return apply_to_path(args.remote, operations, args.output, engine.block_size)

    with args.remote.open('rb') as remote, open(os.devnull, 'wb') as sink:
      return apply(remote, operations, sink, engine.block_size)


def _print_stats(stats: SyncStats, local: Path, console: Console) -> None:
  table = Table(show_lines=True)
  table.add_column('File', overflow='fold')
  table.add_column('Copies')
  table.add_column('Literals')
  table.add_column('Transferred')
  table.add_column('Reused')

  table.add_row(
    str(local),
    f'{stats.copies:,}',
    f'{stats.literals:,}',
    f'{stats.bytes_transferred:,} B',
    f'{stats.bytes_reused:,} B',
  )

  console.print(table)

  console.print(
    '[bold green]Total:[/] '
    f'transferred {stats.bytes_transferred:,} bytes | '
    f'reused {stats.bytes_reused:,} bytes | '
    f'{stats.operations:,} operations'
  )


def main(argv: Optional[Sequence[str]] = None) -> int:
  arguments = Arguments.from_args(argv)

  console, err_console = Console(), Console(stderr=True)

  _configure_logging(err_console, arguments.verbose)

  try:
    engine = _build_engine(arguments)
    reporter = _make_console_reporter(console) if arguments.verbose else None
    stats = _diff(arguments, engine, reporter)
  except SyncError as exc:
    err_console.print(f'[bold red]error:[/] {exc}')
    return 1
  except Exception as exc:  # pragma: no cover - CLI guardrail
    err_console.print(f'[bold red]error:[/] {exc}')
    return 1

  _print_stats(stats, arguments.local, console)

  if arguments.output is not None:
    console.print(f'[bold cyan]Rebuilt:[/] {arguments.output}')

  return 0


if __name__ == '__main__':
  raise SystemExit(main())
