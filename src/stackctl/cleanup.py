"""Cleanup actions spanning both modes."""

from __future__ import annotations

from .compose import compose_command
from .modes import Mode, resolve_mode
from .reset import InputFunc, ResetOutcome, run_guarded
from .runner import CommandRunner
from .settings import Settings


def clean_all_commands(settings: Settings) -> list[list[str]]:
    commands = []
    for mode in Mode:
        context = resolve_mode(mode.value, settings)
        commands.append(compose_command(
            context,
            'down',
            default_args=('--volumes', '--rmi', 'local', '--remove-orphans'),
            compose_prefix=settings.compose_command,
        ))
    return commands


def clean_volumes_command(settings: Settings) -> list[str]:
    volumes = [volume for mode in Mode for volume in settings.mode_config(mode.value).volumes]
    docker = settings.compose_command[0]
    return [docker, 'volume', 'rm', *volumes]


def run_clean_all(
    settings: Settings,
    runner: CommandRunner,
    input_func: InputFunc = input,
) -> tuple[ResetOutcome, int]:
    prompt = (
        "WARNING: This removes containers, networks, local images and volumes "
        "for BOTH dev and prod. Are you sure? [y/N] "
    )
    return run_guarded(prompt, clean_all_commands(settings), runner, input_func)


def run_clean_volumes(
    settings: Settings,
    runner: CommandRunner,
    input_func: InputFunc = input,
) -> tuple[ResetOutcome, int]:
    argv = clean_volumes_command(settings)
    if len(argv) == 3:
        print("[INFO] No data volumes configured, nothing to remove.", flush=True)
        return ResetOutcome.COMPLETED, 0

    prompt = f"WARNING: This deletes volumes {', '.join(argv[3:])}. Are you sure? [y/N] "
    return run_guarded(prompt, [argv], runner, input_func)
