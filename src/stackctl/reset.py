#!/usr/bin/env python3
"""
Destructive operations behind an interactive confirmation gate.

One synchronous read decides between proceeding and aborting. Only an exact
``y`` proceeds; empty input, ``n``, anything else and EOF abort. There is no
re-prompt.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Sequence

from .compose import compose_command
from .modes import ModeContext
from .runner import CommandRunner
from .settings import Settings

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], str]

AFFIRMATIVE = 'y'


class ResetOutcome(str, Enum):
    COMPLETED = 'completed'
    ABORTED = 'aborted'


def confirm(prompt: str, input_func: InputFunc = input) -> bool:
    try:
        answer = input_func(prompt)
    except EOFError:
        return False
    return answer.strip() == AFFIRMATIVE


def run_guarded(
    prompt: str,
    commands: Sequence[Sequence[str]],
    runner: CommandRunner,
    input_func: InputFunc = input,
) -> tuple[ResetOutcome, int]:
    """
    Ask once, then run ``commands`` in order, stopping at the first failure.

    Returns the outcome and the exit code of the last command run (0 when
    aborted).
    """
    if not confirm(prompt, input_func):
        print("[INFO] Aborted, nothing was changed.", flush=True)
        return ResetOutcome.ABORTED, 0

    returncode = 0
    for argv in commands:
        returncode = runner.run(argv).returncode
        if returncode != 0:
            logger.error(f"Command failed with exit code {returncode}")
            break
    return ResetOutcome.COMPLETED, returncode


def teardown_command(context: ModeContext, settings: Settings) -> list[str]:
    return compose_command(context, 'down', default_args=('--volumes',),
                           compose_prefix=settings.compose_command)


def run_reset(
    context: ModeContext,
    settings: Settings,
    runner: CommandRunner,
    input_func: InputFunc = input,
) -> tuple[ResetOutcome, int]:
    """Tear down the stack and volumes of one mode after confirmation."""
    prompt = (
        f"WARNING: This will destroy the {context.mode.value} database volume. "
        "Are you sure? [y/N] "
    )
    outcome, returncode = run_guarded(
        prompt, [teardown_command(context, settings)], runner, input_func
    )
    if outcome is ResetOutcome.COMPLETED and returncode == 0:
        print("[SUCCESS] Database reset complete.", flush=True)
    return outcome, returncode
