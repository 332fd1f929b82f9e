#!/usr/bin/env python3
"""Lyrebird Supervisor

Runs the worker as a child process and restarts it on request:
- Reads ``config.toml`` for the active profile (token, worker binary) and owner id
- Forwards every line the worker prints on stdout
- On a ``!restart,path=<file>`` line, kills the worker and relaunches it with
  ``RESTART_RECOVER_PATH=<file>`` so it replays the sessions it handed over
- Exits with the worker's exit code once the worker exits on its own
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TextIO

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from lyrebird.application.services.restart_service import RESTART_SIGNAL_PREFIX
from lyrebird.domain.shared.messages import ErrorMessages, LogTemplates
from lyrebird.domain.shared.types import DiscordSnowflake, NonEmptyStr
from lyrebird.main import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("./config.toml")


class RunnerConfigError(Exception):
    """Raised when the supervisor configuration cannot be loaded or is incomplete."""


class Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: SecretStr
    binary_path: NonEmptyStr | None = None


class RunnerConfig(BaseModel):
    """Parsed ``config.toml``.

    ``mode`` names the active entry of ``profiles``.
    """

    model_config = ConfigDict(frozen=True)

    mode: NonEmptyStr
    owner_id: DiscordSnowflake
    profiles: dict[str, Profile] = Field(default_factory=dict)

    @property
    def profile(self) -> Profile:
        try:
            return self.profiles[self.mode]
        except KeyError:
            raise RunnerConfigError(ErrorMessages.RUNNER_PROFILE_MISSING.format(mode=self.mode)) from None

    @property
    def binary_path(self) -> str:
        return self.profile.binary_path or f"./.venv-{self.mode}/bin/lyrebird"


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> RunnerConfig:
    """Read and validate the supervisor configuration.

    Args:
        path: TOML file to read.

    Returns:
        The validated configuration, with its active profile present.

    Raises:
        RunnerConfigError: the file is unreadable, not TOML, or fails validation.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise RunnerConfigError(ErrorMessages.RUNNER_CONFIG_UNREADABLE.format(path=path, error=e)) from e
    except tomllib.TOMLDecodeError as e:
        raise RunnerConfigError(ErrorMessages.RUNNER_CONFIG_INVALID.format(path=path, error=e)) from e

    try:
        config = RunnerConfig.model_validate(data)
    except ValidationError as e:
        raise RunnerConfigError(ErrorMessages.RUNNER_CONFIG_INVALID.format(path=path, error=e)) from e

    _ = config.profile
    return config


def build_command(config: RunnerConfig) -> list[str]:
    return [config.binary_path]


def build_env(
    config: RunnerConfig,
    recover_path: str | None = None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Environment for one worker launch.

    Args:
        config: Supervisor configuration.
        recover_path: Transfer file from the previous worker, if this is a restart.
        base: Environment to start from (defaults to the supervisor's own).

    Returns:
        A fresh environment mapping; ``base`` is not modified.
    """
    env = dict(os.environ if base is None else base)
    env.pop("RESTART_RECOVER_PATH", None)
    env["DISCORD_TOKEN"] = config.profile.token.get_secret_value()
    env["BOT_OWNER_ID"] = str(config.owner_id)
    env["IS_RUN_BY_RUNNER"] = "1"
    if recover_path is not None:
        env["RESTART_RECOVER_PATH"] = recover_path
    return env


def parse_signal(line: str) -> str | None:
    """Return the transfer-file path if *line* is a restart signal, else None."""
    line = line.rstrip("\r\n")
    if line.startswith(RESTART_SIGNAL_PREFIX):
        return line[len(RESTART_SIGNAL_PREFIX):]
    return None


def spawn_worker(command: list[str], env: dict[str, str]) -> subprocess.Popen[str]:
    """Launch the worker with a line-buffered stdout pipe; stderr is inherited."""
    return subprocess.Popen(
        command,
        env=env,
        stdout=subprocess.PIPE,
        text=True,
        bufsize=1,
    )


def supervise(
    config: RunnerConfig,
    *,
    spawn: Callable[[list[str], dict[str, str]], subprocess.Popen[str]] = spawn_worker,
    output: TextIO | None = None,
) -> int:
    """Run the worker until it exits without asking for a restart.

    Args:
        config: Supervisor configuration.
        spawn: Launches one worker; injectable for tests.
        output: Where forwarded worker lines go (defaults to stdout).

    Returns:
        The exit code of the last worker.
    """
    recover_path: str | None = None

    while True:
        command = build_command(config)
        child = spawn(command, build_env(config, recover_path))
        logger.info(LogTemplates.RUNNER_SPAWNED, command[0], child.pid, recover_path)

        out = output or sys.stdout
        restart_path: str | None = None
        if child.stdout is None:
            child.kill()
            child.wait()
            raise OSError(ErrorMessages.RUNNER_NO_STDOUT_PIPE)
        for line in child.stdout:
            restart_path = parse_signal(line)
            if restart_path is not None:
                break
            out.write(line if line.endswith("\n") else f"{line}\n")
            out.flush()

        if restart_path is None:
            code = child.wait()
            logger.info(LogTemplates.RUNNER_CHILD_EXITED, code)
            return code

        child.kill()
        child.wait()
        logger.info(LogTemplates.RUNNER_RESTARTING, restart_path)
        recover_path = restart_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the Lyrebird worker and relaunch it when it asks to restart.",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"supervisor configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="log level for supervisor messages (default: INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = load_config(args.config)
    except RunnerConfigError as e:
        logger.error(LogTemplates.RUNNER_CONFIG_FAILED, e)
        return 1

    try:
        return supervise(config)
    except OSError as e:
        logger.error(LogTemplates.RUNNER_SPAWN_FAILED, config.binary_path, e)
        return 1
    except KeyboardInterrupt:
        return 130


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
