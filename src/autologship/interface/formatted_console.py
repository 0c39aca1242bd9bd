"""
Formatted Console Output - Rich Renderer for CLI.

Centralizes how the CLI prints headers, status lines, the planned
procedure call and the run summary.
"""

import os

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from autologship.application.command_builder import ProcedureCall
from autologship.domain.enums import RestoreMode


class Icons:
    """UTF-8 Icons."""

    CHECK = "✅"
    CROSS = "❌"
    WARN = "⚠️"
    INFO = "ℹ️"
    DB = "🗄️"
    ARROW = "➜"


class ConsoleRenderer:
    """Renders formatted output to the console."""

    def __init__(self, use_color: bool = True, console: Console | None = None):
        # NO_COLOR disables color regardless of the flag
        if os.environ.get("NO_COLOR"):
            use_color = False
        self.use_color = use_color
        self.console = console or Console(no_color=not use_color, highlight=False)

    def header(self, title: str):
        """Render a major section header."""
        self.console.print()
        self.console.print(f"[bold cyan]{escape(title)}[/bold cyan]")
        self.console.print(f"[dim]{'━' * 60}[/dim]")

    def info(self, message: str):
        self.console.print(f"[blue]{Icons.INFO} {escape(message)}[/blue]")

    def success(self, message: str):
        self.console.print(f"[green]{Icons.CHECK} {escape(message)}[/green]")

    def warning(self, message: str):
        self.console.print(f"[yellow]{Icons.WARN} {escape(message)}[/yellow]")

    def error(self, message: str):
        self.console.print(f"[red]{Icons.CROSS} {escape(message)}[/red]")

    def step(self, message: str):
        self.console.print(f"[cyan]{Icons.ARROW} {escape(message)}[/cyan]")

    def render_command(self, command: str, title: str = "Command"):
        """Render T-SQL text in a panel."""
        self.console.print(
            Panel(
                Syntax(command, "sql", word_wrap=True, theme="ansi_dark"),
                title=title,
                border_style="dim",
                box=box.ROUNDED,
            )
        )

    def render_call_summary(self, instance: str, call: ProcedureCall):
        """
        Render the procedure arguments as a table.

        Args:
            instance: Secondary instance the call targets
            call: Procedure call to summarize
        """
        table = Table(
            title=f"{Icons.DB} {escape(instance)}",
            show_header=True,
            header_style="bold magenta",
            box=box.SIMPLE,
            padding=(0, 2),
        )
        table.add_column("Parameter", style="bright_cyan")
        table.add_column("Value", style="white")

        for name, value in call.arguments:
            shown = str(value)
            if name == "restore_mode":
                shown = f"{value} ({RestoreMode(value).label})"
            table.add_row(f"@{name}", escape(shown))

        self.console.print(table)
