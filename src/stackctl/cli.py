#!/usr/bin/env python3
"""stackctl CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from . import config_constants as const
from .actions import resolve_invocation
from .cli_utils import env_value, get_cli_version, split_args_variable
from .engine import configure_logging, execute
from .errors import ConfigurationError
from .runner import CommandRunner
from .settings import load_settings

logger = logging.getLogger(__name__)

EXAMPLES = """
Examples:
  stackctl up                          # start all dev services
  stackctl up -m prod -- --build       # start prod, rebuilding images
  stackctl logs -s gateway             # follow gateway logs
  stackctl dev-shell -s gateway        # alias with an overridden service
  MODE=prod stackctl backup            # dump the prod database
"""


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse command-line arguments for stackctl.

    Supports arguments:
    1. action - Action or alias name (see 'stackctl help')
    2. -m, --mode <dev|prod> - Deployment mode (default: $MODE, then dev)
    3. -s, --service <name> - Target service (default: $SERVICE, then all)
    4. --root <path> - Repository root holding .env and stackctl.toml
    5. --env-file <path> - Local override file (default: <root>/.env)
    6. --config <path> - Project config (default: <root>/stackctl.toml)
    7. --dry-run - Print commands instead of running them
    8. --log-level <level> - DEBUG, INFO, WARNING or ERROR
    9. -- EXTRA... - Passed through to docker compose before the service
    """
    parser = argparse.ArgumentParser(
        prog='stackctl',
        description='Mode-aware docker compose dispatcher (dev/prod)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog=EXAMPLES,
    )

    parser.add_argument(
        'action',
        nargs='?',
        default='help',
        metavar='ACTION',
        help="Action or alias to run (default: help)"
    )

    parser.add_argument(
        '-m', '--mode',
        default=None,
        metavar='MODE',
        help='Deployment mode: dev or prod (default: $MODE, then dev)'
    )

    parser.add_argument(
        '-s', '--service',
        default=None,
        metavar='NAME',
        help='Target service (default: $SERVICE, then all services)'
    )

    parser.add_argument(
        '--root',
        type=Path,
        default=Path.cwd(),
        metavar='PATH',
        help='Repository root (default: current directory)'
    )

    parser.add_argument(
        '--env-file',
        type=Path,
        default=None,
        metavar='PATH',
        help=f'Local override file (default: <root>/{const.LOCAL_ENV_FILE})'
    )

    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        metavar='PATH',
        help=f'Project config (default: <root>/{const.PROJECT_CONFIG_FILE})'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print commands instead of executing them'
    )

    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        type=str.upper,
        help=f'Log level (default: ${const.ENV_LOG_LEVEL}, then config, then INFO)'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {get_cli_version()}'
    )

    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    # everything after '--' is passed through untouched
    extra_args: list[str] = []
    if '--' in argv:
        split_at = argv.index('--')
        argv, extra_args = argv[:split_at], argv[split_at + 1:]

    args = parser.parse_args(argv)
    args.extra_args = extra_args
    return args


def main(argv: Optional[list] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.log_level or const.DEFAULT_LOG_LEVEL)

    try:
        settings = load_settings(
            args.root,
            environ=os.environ if environ is None else environ,
            env_file=args.env_file,
            config_file=args.config,
        )
        configure_logging(args.log_level or settings.log_level)

        env = settings.environ
        extra_args = args.extra_args or split_args_variable(env, const.ENV_ARGS)
        invocation = resolve_invocation(
            args.action,
            mode=args.mode,
            service=args.service,
            extra_args=extra_args,
            env_mode=env_value(env, const.ENV_MODE),
            env_service=env_value(env, const.ENV_SERVICE),
        )
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        # shlex on a malformed ARGS value
        logger.error(f"Invalid {const.ENV_ARGS}: {e}")
        return 1

    return execute(invocation, settings, CommandRunner(dry_run=args.dry_run, env=settings.environ))


if __name__ == '__main__':
    sys.exit(main())
