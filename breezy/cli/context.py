from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from breezy.core.config import ReleaseConfig, load_config
from breezy.core.errors import ErrorCode
from breezy.core.inputs import RunSettings, SettingsOverrides, resolve_settings
from breezy.core.result import Err
from breezy.output.console import ConsoleProtocol, RichConsole, Style


@dataclass(frozen=True, slots=True)
class CLIContext:
    settings: RunSettings
    config: ReleaseConfig | None
    console: ConsoleProtocol
    repo_root: Path


def exit_with(
    console: ConsoleProtocol,
    message: str,
    *,
    code: ErrorCode,
    hint: str | None = None,
) -> NoReturn:
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))


def build_context(
    overrides: SettingsOverrides,
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    console: ConsoleProtocol | None = None,
) -> CLIContext:
    if env is None:
        env = os.environ
    if cwd is None:
        cwd = Path.cwd()
    if console is None:
        console = RichConsole()

    settings = resolve_settings(env, overrides)
    if isinstance(settings, Err):
        exit_with(
            console, settings.error.message, code=ErrorCode.USER_ERROR, hint=settings.error.hint
        )

    home = env.get("HOME")
    config = load_config(
        settings.value.config_file, cwd, Path(home) if home else None
    )
    if isinstance(config, Err):
        path = config.error.path
        exit_with(
            console,
            config.error.message,
            code=ErrorCode.CONFIG_ERROR,
            hint=str(path) if path is not None else None,
        )

    return CLIContext(
        settings=settings.value,
        config=config.value,
        console=console,
        repo_root=cwd,
    )
