from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import typer

from relsync.backends import select_backend
from relsync.backends.http import HttpClient, RealHttpClient
from relsync.core.config import ActionConfig, load_config
from relsync.core.errors import ErrorCode
from relsync.core.result import Err
from relsync.output.console import ConsoleProtocol, RichConsole
from relsync.release.backend import ReleaseBackend


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ActionConfig
    backend: ReleaseBackend
    console: ConsoleProtocol


def build_context(
    env: Mapping[str, str] | None = None,
    *,
    console: ConsoleProtocol | None = None,
    http: HttpClient | None = None,
) -> CLIContext:
    """Resolve config and backend from the environment, or exit."""
    out = console or RichConsole()

    config_result = load_config(os.environ if env is None else env)
    if isinstance(config_result, Err):
        out.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
    config = config_result.value

    backend_result = select_backend(config, http or RealHttpClient(), out)
    if isinstance(backend_result, Err):
        out.error(backend_result.error.pretty())
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    return CLIContext(config=config, backend=backend_result.value, console=out)
