"""
CLI for Knife Forge.

`knife-forge generate` runs one prompt non-interactively, `knife-forge app`
opens the interactive TUI.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from knife_forge import __version__
from knife_forge.config import Config, GLOBAL_CONFIG_FILE
from knife_forge.data_uri import encode_data_uri
from knife_forge.display import display
from knife_forge.download import save_concept_image, save_model
from knife_forge.models import Completed, ModelReference
from knife_forge.orchestrator import ForgeSession, build_session
from knife_forge.tui import simple_progress
from knife_forge.viewer import ViewerPage

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _print_key_status(cfg: Config) -> None:
    console.print("[bold]API Key Status:[/bold]")
    console.print(f"  Google (Gemini): {'[green]configured[/green]' if cfg.api_keys.google else '[red]missing[/red]'}")
    if cfg.api_keys.huggingface:
        console.print("  Hugging Face: [green]configured[/green]")
    else:
        console.print("  Hugging Face: [yellow]missing (placeholder meshes)[/yellow]")


def _exit_on_config_issues(cfg: Config) -> None:
    issues = cfg.validate()
    if issues:
        console.print("[red]Configuration issues:[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
        sys.exit(1)


def load_model_reference(model: str) -> ModelReference:
    """Turn a CLI argument (local GLB path or http(s) URL) into a ModelReference."""
    if model.startswith(("http://", "https://")):
        return ModelReference(url=model)
    path = Path(model)
    if not path.is_file():
        raise click.BadParameter(f"No such file: {model}", param_hint="MODEL")
    return ModelReference(content=path.read_bytes())


def _show_in_viewer(image_ref: Optional[str], model_ref: ModelReference) -> None:
    """Open the viewer page and keep it alive until the user presses a key."""
    with ViewerPage() as viewer:
        page = viewer.show(image_ref, model_ref)
        viewer.open()
        err_console.print(f"[blue]Viewer:[/blue] {page.as_uri()}")
        click.pause("Press any key to close the viewer...")


async def _run_generate(session: ForgeSession, prompt: str, output_dir: Path,
                        product: str, no_download: bool) -> dict:
    async with session:
        status = await session.generate(prompt)

        result = {k: v for k, v in status.to_dict().items() if k != "image_ref"}
        result["prompt"] = prompt
        result["mesh_provider"] = session.mesh_converter.name()

        if isinstance(status, Completed) and not no_download:
            result["image_path"] = str(save_concept_image(status.image_ref, output_dir, product))
            model_path = await save_model(status.model_ref, output_dir, product)
            result["model_path"] = str(model_path) if model_path else None

        return result


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """Knife Forge - Roblox-style 3D knives from text prompts."""
    configure_logging(verbose)


@main.command()
@click.argument("prompt", nargs=-1, required=True)
@click.option("--output", "-o", type=click.Path(file_okay=False), default=None, help="Directory for the GLB and concept image")
@click.option("--no-download", is_flag=True, help="Don't save the GLB and concept image")
@click.option("--open-viewer", is_flag=True, help="Open the 3D viewer in the browser when done")
@click.option("--json", "json_output", is_flag=True, help="Output the final status as JSON")
def generate(prompt: tuple, output: Optional[str], no_download: bool, open_viewer: bool, json_output: bool):
    """Generate a concept image and 3D mesh from a prompt."""
    prompt_text = " ".join(prompt)
    if not prompt_text.strip():
        raise click.UsageError("Prompt must not be empty")

    config = Config.load()
    _exit_on_config_issues(config)

    output_dir = Path(output or config.defaults.output_dir)
    session = build_session(config)

    if not json_output:
        simple_progress.print_header(prompt_text, session.mesh_converter.name())
        session.subscribe(simple_progress.print_status)

    result = asyncio.run(_run_generate(
        session, prompt_text, output_dir, config.defaults.product, no_download,
    ))

    status = session.status
    if isinstance(status, Completed):
        if json_output:
            click.echo(json.dumps(result, indent=2))
        else:
            if result.get("image_path"):
                display.show_concept(Path(result["image_path"]))
            simple_progress.print_result(
                image_path=result.get("image_path"),
                model_path=result.get("model_path"),
                model_url=status.model_ref.url,
                placeholder=config.fallback_mode,
            )

        if open_viewer:
            _show_in_viewer(status.image_ref, status.model_ref)
        return

    if json_output:
        click.echo(json.dumps(result, indent=2))
    sys.exit(1)


@main.command()
@click.option("--output", "-o", type=click.Path(file_okay=False), default=None, help="Directory for downloaded GLB files")
def app(output: Optional[str]):
    """Open the interactive forge."""
    from textual.logging import TextualHandler

    from knife_forge.tui import ForgeTUI

    config = Config.load()
    _exit_on_config_issues(config)

    # Rich output to the terminal would corrupt the Textual screen
    root = logging.getLogger()
    level = root.level
    logging.basicConfig(level=level, handlers=[TextualHandler()], force=True)

    session = build_session(config)
    tui = ForgeTUI(
        session,
        output_dir=Path(output or config.defaults.output_dir),
        product=config.defaults.product,
    )
    result = tui.run()

    if result is None:
        return
    for path in result.downloads:
        console.print(f"[green]Saved:[/green] {path}")
    if result.error:
        console.print(f"[red]Last generation failed:[/red] {result.error}")


@main.command()
@click.argument("model")
@click.option("--image", type=click.Path(exists=True, dir_okay=False), default=None, help="Concept image to show beside the model")
def view(model: str, image: Optional[str]):
    """Open a GLB file or URL in the 3D viewer."""
    model_ref = load_model_reference(model)
    image_ref = encode_data_uri(Path(image).read_bytes()) if image else None
    _show_in_viewer(image_ref, model_ref)


@main.command("setup-keys")
@click.option("--google", "google_key", help="Google API key (Gemini image generation)")
@click.option("--huggingface", "huggingface_key", help="Hugging Face token (image-to-3D)")
def setup_keys(google_key: str, huggingface_key: str):
    """Configure API keys for Knife Forge."""
    cfg = Config.load()

    if google_key:
        cfg.api_keys.google = google_key
    if huggingface_key:
        cfg.api_keys.huggingface = huggingface_key

    cfg.save()

    console.print(f"[green]API keys saved to {GLOBAL_CONFIG_FILE}[/green]\n")
    _print_key_status(cfg)


@main.command("check-keys")
def check_keys():
    """Check API key configuration status."""
    cfg = Config.load()
    issues = cfg.validate()

    _print_key_status(cfg)

    if issues:
        console.print("\n[red]Missing required keys:[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
        sys.exit(1)

    if cfg.fallback_mode:
        console.print(Panel.fit(
            "Meshes will be the placeholder sample model.\n"
            "Set HUGGINGFACE_API_KEY for real image-to-3D conversion.",
            title="Fallback mode",
        ))
    else:
        console.print("\n[green]All keys configured![/green]")


if __name__ == "__main__":
    main()
