#!/usr/bin/env python3
"""
Database backup.

Runs mongodump inside the database container of the selected mode and
streams the gzipped archive to ``backups/mongo_backup_<mode>_<UTC stamp>.gz``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import config_constants as const
from .compose import compose_command
from .errors import BackupError, ExternalToolFailure
from .modes import ModeContext
from .runner import CommandRunner
from .settings import Settings

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'


def backup_filename(mode: str, when: datetime) -> str:
    stamp = when.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
    return f"mongo_backup_{mode}_{stamp}.gz"


def next_artifact_path(backup_dir: Path, mode: str, when: datetime) -> Path:
    """
    Return a path that does not exist yet.

    Two backups of one mode within the same second get ``_1``, ``_2``, ...
    suffixes instead of overwriting each other.
    """
    base = backup_filename(mode, when)
    candidate = backup_dir / base
    stem = base[:-len('.gz')]
    counter = 1
    while candidate.exists():
        candidate = backup_dir / f"{stem}_{counter}.gz"
        counter += 1
    return candidate


def dump_command(context: ModeContext, settings: Settings) -> list[str]:
    creds = settings.credentials()
    return compose_command(
        context,
        'exec',
        service=settings.database_service,
        default_args=('-T',),
        command=(
            const.DATABASE_DUMP_TOOL,
            '--username', creds.username,
            '--password', creds.password,
            '--authenticationDatabase', const.DATABASE_AUTH_DB,
            '--archive',
            '--gzip',
        ),
        compose_prefix=settings.compose_command,
    )


def run_backup(
    context: ModeContext,
    settings: Settings,
    runner: CommandRunner,
    now: Optional[datetime] = None,
) -> Path:
    """
    Create one backup artifact and return its path.

    Raises:
        ConfigurationError: credentials are not set (nothing executed)
        ExternalToolFailure: mongodump/compose exited nonzero
        BackupError: the artifact could not be written
    """
    argv = dump_command(context, settings)
    creds = settings.credentials()

    try:
        settings.backup_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BackupError(f"Cannot create backup directory {settings.backup_dir}: {e}") from e

    when = now or datetime.now(timezone.utc)
    artifact = next_artifact_path(settings.backup_dir, context.mode.value, when)

    print(f"[INFO] Creating backup for {context.mode.value} database...", flush=True)
    if runner.dry_run:
        runner.run(argv, secrets=(creds.username, creds.password))
        return artifact

    try:
        handle = open(artifact, 'xb')
    except FileExistsError as e:
        raise BackupError(f"Backup {artifact} already exists; refusing to overwrite it") from e
    except OSError as e:
        raise BackupError(f"Cannot create backup {artifact}: {e}") from e

    # from here on the artifact is ours to remove on failure
    try:
        with handle:
            result = runner.run(argv, stdout=handle, secrets=(creds.username, creds.password))
    except OSError as e:
        artifact.unlink(missing_ok=True)
        raise BackupError(f"Failed to write backup {artifact}: {e}") from e

    if result.returncode != 0:
        artifact.unlink(missing_ok=True)
        raise ExternalToolFailure(
            f"Backup failed (exit {result.returncode}); is the {settings.database_service} "
            f"container running in project {context.project_name}?",
            result.returncode,
            argv,
        )

    print(f"[SUCCESS] Backup saved to {artifact}", flush=True)
    return artifact
