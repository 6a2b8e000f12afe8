#!/usr/bin/env python3
"""
External process execution.

All components hand argv lists to ``CommandRunner.run``. The child inherits
stdin/stdout/stderr unless output is captured or stdout is redirected to a
file. Children get the resolved environment (process environment overlaid
with .env) when one is given. A SIGTERM received while the child runs is
forwarded to it, and an operator interrupt terminates it instead of leaving
it orphaned.
"""

from __future__ import annotations

import logging
import signal
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, Iterable, Mapping, Optional, Sequence

from .compose import format_command
from .errors import ExternalToolFailure

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130
EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Run argument vectors synchronously; never through a shell."""

    def __init__(self, dry_run: bool = False, env: Optional[Mapping[str, str]] = None) -> None:
        self.dry_run = dry_run
        # None inherits os.environ; otherwise the exact environment handed to children
        self.env = env

    def run(
        self,
        argv: Sequence[str],
        *,
        stdout: Optional[IO[bytes]] = None,
        capture: bool = False,
        secrets: Iterable[Optional[str]] = (),
    ) -> CommandResult:
        argv = list(argv)
        display = format_command(argv, secrets)

        if self.dry_run:
            print(f"[DRY-RUN] {display}", flush=True)
            return CommandResult(0)

        logger.debug(f"Running: {display}")
        stdout_target = subprocess.PIPE if capture else stdout
        stderr_target = subprocess.PIPE if capture else None

        try:
            proc = subprocess.Popen(
                argv,
                stdout=stdout_target,
                stderr=stderr_target,
                env=dict(self.env) if self.env is not None else None,
            )
        except FileNotFoundError as e:
            raise ExternalToolFailure(
                f"Executable not found: {argv[0]}", EXIT_NOT_FOUND, argv
            ) from e

        previous_handler = self._forward_sigterm(proc)
        try:
            out, err = proc.communicate()
        except KeyboardInterrupt:
            print("\n[WARN] Interrupted, stopping child process...", flush=True)
            self._terminate(proc)
            return CommandResult(EXIT_INTERRUPTED)
        finally:
            self._restore_sigterm(previous_handler)

        logger.debug(f"Exit code {proc.returncode}: {display}")
        return CommandResult(
            proc.returncode,
            out.decode('utf-8', errors='replace') if out else '',
            err.decode('utf-8', errors='replace') if err else '',
        )

    @staticmethod
    def _terminate(proc: subprocess.Popen) -> None:
        try:
            proc.terminate()
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

    @staticmethod
    def _forward_sigterm(proc: subprocess.Popen):
        # signal handlers can only be installed from the main thread
        if threading.current_thread() is not threading.main_thread():
            return None

        def _handler(signum, _frame):
            logger.debug(f"Forwarding signal {signum} to pid {proc.pid}")
            proc.send_signal(signum)

        return signal.signal(signal.SIGTERM, _handler)

    @staticmethod
    def _restore_sigterm(previous_handler) -> None:
        if previous_handler is not None:
            signal.signal(signal.SIGTERM, previous_handler)
