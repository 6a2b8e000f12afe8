"""Shared fixtures for stackctl tests."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from stackctl.runner import CommandResult, CommandRunner
from stackctl.settings import ModeConfig, Settings


class RecordingRunner(CommandRunner):
    """Runner double: records argv lists, writes canned stdout, returns canned exit codes."""

    def __init__(self, returncodes=(), output: bytes = b'', dry_run: bool = False, env=None) -> None:
        super().__init__(dry_run=dry_run, env=env)
        self.returncodes = list(returncodes)
        self.output = output
        self.calls: list[list[str]] = []
        self.secrets: list[tuple] = []

    def run(self, argv, *, stdout=None, capture=False, secrets=()):
        self.calls.append(list(argv))
        self.secrets.append(tuple(secrets))
        if stdout is not None and self.output:
            stdout.write(self.output)
        returncode = self.returncodes.pop(0) if self.returncodes else 0
        return CommandResult(returncode)


def make_settings(root: Path, **overrides) -> Settings:
    base = Settings(
        root=root,
        modes={
            'dev': ModeConfig('docker/compose.development.yaml', 'ecommerce_dev', ('mongo-data-dev',)),
            'prod': ModeConfig('docker/compose.production.yaml', 'ecommerce_prod', ('mongo-data-prod',)),
        },
        backup_dir=root / 'backups',
        gateway_port=8080,
        db_username='root',
        db_password='s3cret',
    )
    return replace(base, **overrides)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def runner():
    return RecordingRunner()
