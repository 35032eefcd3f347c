# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line entry points invoked by the staging platform."""

from __future__ import annotations

from pathlib import Path

import typer

from .detect import detect_application
from .errors import BuildpackError
from .lifecycle import Lifecycle, read_release
from .logging import fail, info, ok

app = typer.Typer(
    help="Stage Java applications in two phases: supply, then finalize.",
    add_completion=False,
    no_args_is_help=True,
)

BUILD_DIR = typer.Argument(..., exists=True, file_okay=False, help="Application directory.")
CACHE_DIR = typer.Argument(..., file_okay=False, help="Download cache directory.")
DEPS_DIR = typer.Argument(..., file_okay=False, help="Shared dependency root.")
INDEX = typer.Argument(..., help="Index of this buildpack's dependency slot.")


@app.command("detect")
def detect_command(build_dir: Path = BUILD_DIR) -> None:
    """Exit 0 when BUILD_DIR holds a Java application."""

    evidence = detect_application(build_dir.resolve())
    if evidence is None:
        fail("no Java application detected")
        raise typer.Exit(code=1)
    info(f"java ({evidence})")


@app.command("supply")
def supply_command(
    build_dir: Path = BUILD_DIR,
    cache_dir: Path = CACHE_DIR,
    deps_dir: Path = DEPS_DIR,
    index: str = INDEX,
) -> None:
    """Install the runtime, agents and container dependencies."""

    try:
        lifecycle = Lifecycle.create(build_dir.resolve(), cache_dir.resolve(), deps_dir.resolve(), index)
        record = lifecycle.supply()
    except BuildpackError as exc:
        fail(str(exc))
        raise typer.Exit(code=1) from exc
    ok(f"Supplied {record.container_identifier} on {record.runtime_identifier}")


@app.command("finalize")
def finalize_command(
    build_dir: Path = BUILD_DIR,
    cache_dir: Path = CACHE_DIR,
    deps_dir: Path = DEPS_DIR,
    index: str = INDEX,
) -> None:
    """Configure supplied dependencies and write the release descriptor."""

    try:
        lifecycle = Lifecycle.create(build_dir.resolve(), cache_dir.resolve(), deps_dir.resolve(), index)
        lifecycle.finalize()
    except BuildpackError as exc:
        fail(str(exc))
        raise typer.Exit(code=1) from exc
    ok("Finalize complete")


@app.command("release")
def release_command(build_dir: Path = BUILD_DIR) -> None:
    """Print the release descriptor written by finalize."""

    try:
        document = read_release(build_dir.resolve())
    except BuildpackError as exc:
        fail(str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(document, nl=False)


__all__ = ["app"]
