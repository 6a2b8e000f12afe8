#!/usr/bin/env python3
"""
stackctl engine: dispatch one invocation to the composer or a native handler.

Flow:
1. Resolve the mode once (compose file + project namespace)
2. Verb-bound actions: compose argv -> CommandRunner, exit code passed through
3. Native actions (backup, reset, health, ...): dedicated handlers

Error mapping happens here and nowhere else:
- ConfigurationError  -> exit 1, nothing executed
- ExternalToolFailure -> the tool's own exit code
- BackupError         -> exit 1
- aborted confirmation -> exit 0
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Dict

from .actions import Invocation, build_action_command, mongo_shell_command
from .backup import run_backup
from .cleanup import run_clean_all, run_clean_volumes
from .compose import format_command
from .errors import BackupError, ConfigurationError, ExternalToolFailure
from .health import format_report, probe
from .modes import ModeContext, resolve_mode
from .reset import InputFunc, run_reset
from .runner import CommandRunner
from .settings import Settings, settings_to_toml
from .usage import render_usage

logger = logging.getLogger(__name__)

Handler = Callable[[Invocation, ModeContext, Settings, CommandRunner, InputFunc], int]


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure logging module with specified level.
    """
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR
    }

    level = level_map.get(log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='[%(levelname)s] %(message)s',
        force=True
    )
    logging.getLogger('stackctl').setLevel(level)
    logger.debug(f"Logging configured: {log_level.upper()}")


def _run_compose_action(invocation, context, settings, runner, input_func) -> int:
    spec = invocation.spec
    if spec.banner:
        print(
            "[INFO] " + spec.banner.format(mode=context.mode.value, service=invocation.service or 'all'),
            flush=True,
        )
    argv = build_action_command(invocation, context, settings)
    logger.debug(f"Project {context.project_name}, compose file {context.compose_file}")
    return runner.run(argv).returncode


def _run_mongo_shell(invocation, context, settings, runner, input_func) -> int:
    argv = mongo_shell_command(context, settings, invocation.extra_args)
    print(f"[INFO] {invocation.spec.banner}", flush=True)
    return runner.run(argv, secrets=(settings.db_username, settings.db_password)).returncode


def _run_backup(invocation, context, settings, runner, input_func) -> int:
    run_backup(context, settings, runner)
    return 0


def _run_reset(invocation, context, settings, runner, input_func) -> int:
    _, returncode = run_reset(context, settings, runner, input_func)
    return returncode


def _run_clean_all(invocation, context, settings, runner, input_func) -> int:
    _, returncode = run_clean_all(settings, runner, input_func)
    return returncode


def _run_clean_volumes(invocation, context, settings, runner, input_func) -> int:
    _, returncode = run_clean_volumes(settings, runner, input_func)
    return returncode


def _run_health(invocation, context, settings, runner, input_func) -> int:
    print("[INFO] Checking Gateway and Backend health...", flush=True)
    for line in format_report(probe(settings)):
        print(f"  {line}", flush=True)
    return 0


def _run_config(invocation, context, settings, runner, input_func) -> int:
    print(f"# active mode: {context.mode.value} (project {context.project_name})")
    print(settings_to_toml(settings), end='')
    return 0


def _run_help(invocation, context, settings, runner, input_func) -> int:
    print(render_usage(color=sys.stdout.isatty()), end='')
    return 0


HANDLERS: Dict[str, Handler] = {
    'mongo-shell': _run_mongo_shell,
    'backup': _run_backup,
    'reset': _run_reset,
    'clean-all': _run_clean_all,
    'clean-volumes': _run_clean_volumes,
    'health': _run_health,
    'config': _run_config,
    'help': _run_help,
}


def execute(
    invocation: Invocation,
    settings: Settings,
    runner: CommandRunner,
    input_func: InputFunc = input,
) -> int:
    """Run one invocation and return the process exit code."""
    context = resolve_mode(invocation.mode, settings)
    logger.debug(
        f"Action {invocation.name}: mode={context.mode.value} "
        f"service={invocation.service or '(all)'} extra={format_command(invocation.extra_args)}"
    )

    spec = invocation.spec
    handler = HANDLERS[spec.handler] if spec.is_native else _run_compose_action

    try:
        return handler(invocation, context, settings, runner, input_func)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except ExternalToolFailure as e:
        logger.error(str(e))
        return e.returncode
    except BackupError as e:
        logger.error(str(e))
        return 1
