"""Error types raised by stackctl components."""

from __future__ import annotations

from typing import Sequence


class StackctlError(Exception):
    """Base class for all stackctl failures."""


class ConfigurationError(StackctlError):
    """Required configuration is missing or invalid; nothing was executed."""


class UnknownActionError(ConfigurationError):
    """The requested action or alias is not in the catalog."""


class ExternalToolFailure(StackctlError):
    """An external command exited nonzero (or could not be started)."""

    def __init__(self, message: str, returncode: int, argv: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.argv = list(argv)


class BackupError(StackctlError):
    """The backup artifact could not be written."""
