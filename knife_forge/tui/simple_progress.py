"""Simple line-by-line progress display for non-interactive environments.

Prints one line per status change instead of redrawing in place, so it works
in pipes, CI logs and plain shells.

All output goes to stderr to not interfere with JSON output on stdout.
"""

from rich.console import Console

from ..models import Completed, Failed, GenerationStatus
from .views import render_view

# Progress console writes to stderr (visible to user, doesn't interfere with JSON)
_console = Console(stderr=True)


def print_header(prompt: str, mesh_provider: str):
    """Print the generation header with prompt preview."""
    _console.print()
    _console.print("━" * 55, style="cyan")
    _console.print(" 🗡  KNIFE FORGE", style="bold cyan")
    _console.print("━" * 55, style="cyan")
    _console.print()

    # Truncate long prompts
    display_prompt = prompt[:50] + "..." if len(prompt) > 50 else prompt
    _console.print(f" [dim]Prompt:[/dim] {display_prompt}")
    _console.print(f" [dim]Mesh:[/dim]   {mesh_provider}")
    _console.print()


def format_bar(percent: int, width: int = 20) -> str:
    """Render a percent bar, `width` blocks for 100%."""
    filled = int(percent * width / 100)
    return "█" * filled + "░" * (width - filled)


def print_status(status: GenerationStatus):
    """Print one progress line for a status change. Idle prints nothing."""
    view = render_view(status)

    if isinstance(status, Failed):
        print_error(status.error)
        return
    if not view.message:
        return

    indicator = "[green]✓[/green]" if isinstance(status, Completed) else "[yellow]⏳[/yellow]"
    _console.print(f" [cyan]{format_bar(view.percent)}[/cyan]  {view.percent:>3}%  {indicator} {view.message}")


def print_error(message: str):
    """Print an error message."""
    _console.print()
    _console.print("━" * 55, style="red")
    _console.print(" ❌ ERROR", style="bold red")
    _console.print("━" * 55, style="red")
    _console.print()
    _console.print(f" {message}", style="red")
    _console.print()


def print_result(image_path: str = None, model_path: str = None, model_url: str = None,
                 placeholder: bool = False):
    """Print the final success result.

    Args:
        image_path: Saved concept image (optional)
        model_path: Saved GLB file (optional)
        model_url: Remote model URL when nothing was downloaded (optional)
        placeholder: True when the model is the offline placeholder
    """
    _console.print()
    _console.print("━" * 55, style="green")
    _console.print(" ✨ FORGE COMPLETE", style="bold green")
    _console.print("━" * 55, style="green")
    _console.print()

    if model_path:
        _console.print(f" [bold cyan]📦 Model:[/bold cyan]  {model_path}")
    elif model_url:
        _console.print(f" [bold cyan]🌐 Model:[/bold cyan]  {model_url}")
    if image_path:
        _console.print(f" [dim]📁 Image:[/dim]  {image_path}")

    if placeholder:
        _console.print()
        _console.print(" [yellow]HUGGINGFACE_API_KEY not set - this is the placeholder model.[/yellow]")

    _console.print()
