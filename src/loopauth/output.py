"""Terminal output for the loopauth CLI.

Data (config dumps, the credentials table, the login URL) goes to stdout.
Every diagnostic goes to stderr. Rich rendering is used only on an
interactive terminal with colour enabled. ``NO_COLOR``, ``TERM=dumb`` and
``--no-color`` all switch colour off.

The module-level functions forward to the :class:`OutputManager` installed
by :func:`~loopauth.app.main_callback`.
"""

from __future__ import annotations

import functools
import json
import os
import sys
from enum import Enum
from typing import Any, Callable, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to any value, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


class OutputManager:
    """Output preferences for one CLI invocation.

    Args:
        format: ``AUTO`` becomes ``RICH`` on a colour terminal and ``PLAIN``
            everywhere else.
        no_color: Turn off colour and markup.
        quiet: Hide ``info``, ``success`` and ``suggest`` messages.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        if format == OutputFormat.AUTO:
            use_rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
        self._format = format
        self._quiet = quiet
        self._verbose = verbose
        self._console = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._err_console = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # Data (stdout)

    def print_data(self, text: str) -> None:
        """Write *text* to stdout as is. Long URLs stay on one line."""
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Print a dict, list or scalar.

        Plain output prints a dict as ``key<TAB>value`` lines (``None`` as an
        empty value) and a list one item per line.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.RICH:
            self._console.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        elif isinstance(data, dict):
            for key, value in data.items():
                self.print_data(f"{key}\t{'' if value is None else value}")
        elif isinstance(data, list):
            for item in data:
                self.print_data(str(item))
        else:
            self.print_data(str(data))

    def print_table(
        self, headers: list[str], rows: list[list[str]], title: Optional[str] = None
    ) -> None:
        """Print *rows* as a table, a JSON list of objects, or tab-separated lines."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
        elif self._format == OutputFormat.RICH:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._console.print(table)
        else:
            for line in (headers, *rows):
                self.print_data("\t".join(line))

    # Diagnostics (stderr)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def suggest(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {message}[/dim]")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._err_console.print(markup)


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, or a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def _forward(method: Callable[..., None]) -> Callable[..., None]:
    @functools.wraps(method)
    def forward(*args: Any, **kwargs: Any) -> None:
        method(get_output(), *args, **kwargs)

    return forward


print_data = _forward(OutputManager.print_data)
format_response = _forward(OutputManager.format_response)
print_table = _forward(OutputManager.print_table)
info = _forward(OutputManager.info)
success = _forward(OutputManager.success)
warning = _forward(OutputManager.warning)
error = _forward(OutputManager.error)
suggest = _forward(OutputManager.suggest)
debug = _forward(OutputManager.debug)
