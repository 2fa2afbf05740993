"""Main CLI entry point."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from notes_export.config import Config, Provider
from notes_export.coordinator import ExportCoordinator
from notes_export.errors import ExportError
from notes_export.handwriting import HandwritingRecognitionClient
from notes_export.math_ocr import MathRecognitionClient
from notes_export.models import DocumentMetadata
from notes_export.notebook import load_document
from notes_export.providers.anthropic import AnthropicInkRecognizer
from notes_export.providers.openai import OpenAIInkRecognizer

console = Console(stderr=True)
load_dotenv()


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output PDF path. Defaults to INPUT_PATH with a .pdf suffix.",
)
@click.option(
    "--provider", "-p",
    type=click.Choice(["anthropic", "openai"], case_sensitive=False),
    default="anthropic",
    show_default=True,
    help="Vision provider used for handwriting recognition.",
)
@click.option(
    "--model", "-m",
    default=None,
    help="Model name override (defaults to the provider's vision model).",
)
@click.option(
    "--api-key",
    default=None,
    help="Handwriting provider API key (overrides environment variable).",
)
@click.option(
    "--math-token",
    default=None,
    help="Math OCR service token (overrides SIMPLETEX_API_KEY).",
)
@click.option(
    "--author",
    default="",
    help="Author recorded in the PDF metadata.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Give up if the whole export takes longer than this many seconds.",
)
@click.option(
    "--text-layer/--no-text-layer",
    default=True,
    show_default=True,
    help="Embed recognized text as a selectable, invisible text layer.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every page and recognition call.")
@click.version_option(package_name="notes-export")
def main(input_path, output, provider, model, api_key, math_token, author, timeout, text_layer, verbose):
    """Export handwritten notes to a PDF with recognized text and maths.

    INPUT_PATH is a JSON notebook: {"pages": [{"strokes": [...]}]}.
    Strokes drawn with the green marker are recognized as LaTeX maths;
    everything else is recognized as handwriting.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )

    config = Config.from_env(
        provider=Provider(provider),
        model_override=model,
        api_key_override=api_key,
        math_token_override=math_token,
    )

    try:
        snapshot = load_document(input_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    output = output or input_path.with_suffix(".pdf")
    coordinator = _build_coordinator(config, author=author, text_layer=text_layer)

    try:
        with console.status(f"[cyan]Exporting {len(snapshot)} page(s)..."):
            data = asyncio.run(coordinator.export(snapshot, timeout=timeout))
    except ExportError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    output.write_bytes(data)
    console.print(f"[green]Written {len(snapshot)} page(s) to {output}[/green]")


def _build_recognizer(config: Config):
    if config.provider == Provider.ANTHROPIC:
        return AnthropicInkRecognizer(api_key=config.api_key, model=config.model)
    elif config.provider == Provider.OPENAI:
        return OpenAIInkRecognizer(api_key=config.api_key, model=config.model)
    else:
        raise ValueError(f"Unknown provider: {config.provider}")


def _build_coordinator(config: Config, author: str = "", text_layer: bool = True) -> ExportCoordinator:
    return ExportCoordinator(
        handwriting=HandwritingRecognitionClient(_build_recognizer(config), language=config.language),
        math=MathRecognitionClient(
            url=config.math_url, token=config.math_token, timeout=config.math_timeout
        ),
        metadata=DocumentMetadata(author=author),
        text_layer=text_layer,
    )
