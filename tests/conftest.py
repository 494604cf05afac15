from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

import pytest

from blocksync.__main__ import main as cli_main


@dataclass(slots=True)
class CompletedRun:
  exit_code: int
  stdout: str
  stderr: str


@pytest.fixture
def run_cli(
  monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> Callable[..., CompletedRun]:
  """
  Execute the CLI with arguments while capturing output.

  The first argument should be a working directory (typically ``tmp_path``) so tests may control
  the execution environment. Additional positional arguments are passed to the CLI after being
  converted to strings, allowing ``Path`` instances to be supplied directly.
  """

  def _run_cli(working_dir: Path, *args: object) -> CompletedRun:
    monkeypatch.chdir(working_dir)

    exit_code = cli_main([str(arg) for arg in args])
    captured = capsys.readouterr()

    return CompletedRun(exit_code=exit_code, stdout=captured.out, stderr=captured.err)

  return _run_cli


class ScriptedSource:
  """
  Binary source that returns pre-recorded reads.

  Each entry is what one ``read`` call returns (bytes, or ``None`` like a non-blocking
  stream with nothing ready) or an exception it raises; once the script runs out every read
  returns ``b''``.
  """

  def __init__(
    self, *script: bytes | None | BaseException, on_read: Callable[[int], None] | None = None
  ):
    self.script = list(script)
    self.reads = 0
    self.on_read = on_read

  def read(self, size: int = -1) -> bytes | None:
    call = self.reads
    self.reads += 1

    if self.on_read is not None:
      self.on_read(call)

    if not self.script:
      return b''

    item = self.script.pop(0)

    if isinstance(item, BaseException):
      raise item

    return item


@pytest.fixture
def scripted_source() -> type[ScriptedSource]:
  return ScriptedSource


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
  # The CLI reconfigures the package logger; keep that from leaking between tests.
  logger = logging.getLogger('blocksync')
  handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate

  yield

  logger.handlers[:] = handlers
  logger.setLevel(level)
  logger.propagate = propagate
