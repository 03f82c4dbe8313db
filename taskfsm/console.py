"""Shared Rich console with custom theme for consistent CLI output."""

from rich.console import Console
from rich.theme import Theme

# Named styles for semantic consistency
custom_theme = Theme({
    "heading": "bold cyan",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
    "muted": "dim",
    "path": "cyan",
    "state": "magenta",
    "event": "bold blue",
})

# Singleton console instance
console = Console(theme=custom_theme)


def print_success(text: str) -> None:
    """Print text with success style."""
    console.print(f"[success]✓[/success] {text}")


def print_error(text: str) -> None:
    """Print text with error style."""
    console.print(f"[error]✗[/error] {text}")
