"""Subprocess helpers for invoking JuiceFS.

The provider never calls the ``juicefs`` binary directly from a resource
handler. It re-invokes its own entry point with the ``juicefs`` subcommand
(delegate mode), which in turn runs the wrapped binary and exits with its
status code.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

DELEGATE_SUBCOMMAND = "juicefs"

# Exit code a shell reports for a command that cannot be found
EXIT_NOT_FOUND = 127


class JuiceFSCommandError(RuntimeError):
    """A JuiceFS invocation could not be started or exited non-zero."""

    def __init__(
        self, args: Sequence[str], returncode: Optional[int], output: str = ""
    ):
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        if returncode is None:
            message = "could not start juicefs command"
        else:
            message = f"juicefs command exited with status {returncode}"
        super().__init__(f"{message}; output: {output.strip()}")


def default_self_command() -> List[str]:
    return [sys.executable, "-m", "terraform_provider_juicefs", DELEGATE_SUBCOMMAND, "--"]


@dataclass
class JuiceFSCommands:
    """Thin wrapper to allow mocking in tests."""

    self_command: List[str] = field(default_factory=default_self_command)

    def build_command(self, args: Sequence[str]) -> List[str]:
        return [*self.self_command, *args]

    def build_env(self, env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        merged = dict(os.environ)
        if env:
            merged.update(env)
        return merged

    def run(
        self, args: Sequence[str], env: Optional[Mapping[str, str]] = None
    ) -> subprocess.CompletedProcess:
        cmd = self.build_command(args)
        logger.debug("running %s", " ".join(cmd))
        return subprocess.run(
            cmd,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            env=self.build_env(env),
        )

    def run_checked(
        self, args: Sequence[str], env: Optional[Mapping[str, str]] = None
    ) -> str:
        """Run JuiceFS and return its combined output, raising on failure."""
        try:
            result = self.run(args, env=env)
        except OSError as exc:
            raise JuiceFSCommandError(args, None, str(exc)) from exc
        output = result.stdout or ""
        if result.returncode != 0:
            logger.warning(
                "juicefs %s failed with status %s",
                args[0] if args else "",
                result.returncode,
            )
            raise JuiceFSCommandError(args, result.returncode, output)
        return output


def delegate(args: Sequence[str], binary: str = "juicefs") -> int:
    """Run the wrapped binary with ``args``, inheriting stdio."""
    cmd = [binary, *args]
    logger.debug("delegating to %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, check=False)
    except FileNotFoundError:
        print(f"Error: juicefs binary '{binary}' not found", file=sys.stderr)
        return EXIT_NOT_FOUND
    return result.returncode
