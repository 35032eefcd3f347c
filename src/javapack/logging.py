# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Staging log output and user-facing console helpers."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.text import Text

from .console import detect_tty, get_console_manager

STEP_PREFIX = "-----> "
INDENT = "       "


class BuildLog:
    """Staging output in the platform's conventional step/indent format.

    Every line is also forwarded to the ``javapack`` stdlib logger so that
    embedding applications can capture it.
    """

    def __init__(
        self,
        *,
        console: Console | None = None,
        debug: bool = False,
        use_color: bool | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Create a build log.

        Args:
            console: Console to print to; defaults to a managed Rich console.
            debug: Whether ``debug`` lines are printed as well as logged.
            use_color: Force colour on or off; detected from the terminal when ``None``.
            logger: Stdlib logger receiving every line; defaults to ``javapack``.

        """

        color = detect_tty() if use_color is None else use_color
        self._console = console or get_console_manager().get(color=color)
        self._debug = debug
        self._logger = logger or logging.getLogger("javapack")

    @property
    def console(self) -> Console:
        """Return the Rich console lines are printed to."""

        return self._console

    def begin_step(self, message: str, *args: object) -> None:
        """Print a ``-----> `` step header.

        Args:
            message: ``%``-style format string.
            *args: Format arguments.

        """

        text = _format(message, args)
        self._emit(f"{STEP_PREFIX}{text}", style="bold")
        self._logger.info(text)

    def info(self, message: str, *args: object) -> None:
        """Print an indented detail line.

        Args:
            message: ``%``-style format string.
            *args: Format arguments.

        """

        text = _format(message, args)
        self._emit(f"{INDENT}{text}", style=None)
        self._logger.info(text)

    def warning(self, message: str, *args: object) -> None:
        """Print an indented ``**WARNING**`` line.

        Args:
            message: ``%``-style format string.
            *args: Format arguments.

        """

        text = _format(message, args)
        self._emit(f"{INDENT}**WARNING** {text}", style="yellow")
        self._logger.warning(text)

    def error(self, message: str, *args: object) -> None:
        """Print an indented ``**ERROR**`` line.

        Args:
            message: ``%``-style format string.
            *args: Format arguments.

        """

        text = _format(message, args)
        self._emit(f"{INDENT}**ERROR** {text}", style="red")
        self._logger.error(text)

    def debug(self, message: str, *args: object) -> None:
        """Log a debug line, printing it only when debug output is enabled.

        Args:
            message: ``%``-style format string.
            *args: Format arguments.

        """

        text = _format(message, args)
        self._logger.debug(text)
        if self._debug:
            self._emit(f"{INDENT}DEBUG: {text}", style="dim")

    def _emit(self, line: str, *, style: str | None) -> None:
        rendered = Text(line)
        if style:
            rendered.stylize(style)
        self._console.print(rendered)


def _format(message: str, args: tuple[object, ...]) -> str:
    return message % args if args else message


def _print_line(msg: str, *, style: str, use_color: bool | None, stderr: bool = False) -> None:
    """Print ``msg`` through a managed console.

    Args:
        msg: Message to print.
        style: Rich style applied when colour is enabled.
        use_color: Force colour on or off; detected when ``None``.
        stderr: Whether to print to standard error.

    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, stderr=stderr)
    text = Text(msg)
    if color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _print_line(msg, style="cyan", use_color=use_color)


def ok(msg: str, *, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(msg, style="green", use_color=use_color)


def warn(msg: str, *, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _print_line(msg, style="yellow", use_color=use_color, stderr=True)


def fail(msg: str, *, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _print_line(msg, style="red", use_color=use_color, stderr=True)


__all__ = ["BuildLog", "INDENT", "STEP_PREFIX", "fail", "info", "ok", "warn"]
