"""CLI commands for imgcoon."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imgcoon.errors import ThumbnailError
from imgcoon.generators import GeneratorRegistry
from imgcoon.models.request import AUTO_GENERATOR, AnchorPoint, ThumbnailMode
from imgcoon.thumbnailer import Imgcoon, guess_mime
from imgcoon.thumbnails import ThumbnailConfig, ThumbnailProcessor

console = Console()


def load_config(config_path: str | None) -> ThumbnailConfig:
    if config_path is None:
        return ThumbnailConfig()
    return ThumbnailConfig.from_yaml(Path(config_path))


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    envvar="IMGCOON_CONFIG",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """imgcoon - thumbnails for (almost) any file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path)


@main.command()
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(path_type=Path))
@click.option("--mime", "dest_mime", default=None, help="Thumbnail mime (default: image/webp)")
@click.option("--source-mime", default=None, help="Source mime (guessed from the name if omitted)")
@click.option(
    "--mode",
    "-m",
    type=click.Choice([m.value for m in ThumbnailMode]),
    default=None,
    help="crop (fill and cut), bestfit (keep aspect) or canvas (fit on a fixed canvas)",
)
@click.option("--width", "-w", type=click.IntRange(min=1), default=None, help="Thumbnail width")
@click.option("--height", "-h", type=click.IntRange(min=1), default=None, help="Thumbnail height")
@click.option("--quality", "-q", type=int, default=None, help="Quality 0-100")
@click.option(
    "--anchor",
    type=click.Choice([a.value for a in AnchorPoint]),
    default=None,
    help="Anchor point for crop mode",
)
@click.option("--generator", "-g", default=AUTO_GENERATOR, help="Generator name or 'auto'")
@click.option("--overwrite/--no-overwrite", default=True, help="Replace an existing thumbnail")
@click.pass_context
def create(
    ctx: click.Context,
    source: Path,
    destination: Path,
    dest_mime: str | None,
    source_mime: str | None,
    mode: str | None,
    width: int | None,
    height: int | None,
    quality: int | None,
    anchor: str | None,
    generator: str,
    overwrite: bool,
) -> None:
    """Create a thumbnail of SOURCE at DESTINATION."""
    config: ThumbnailConfig = ctx.obj["config"]
    imgcoon = Imgcoon(config)
    imgcoon.set_source(source.absolute(), source_mime)
    imgcoon.set_destination(destination.absolute(), dest_mime)
    imgcoon.set_generator(generator)
    imgcoon.set_size(width or config.width, height or config.height)
    if quality is not None:
        imgcoon.set_quality(quality)
    if mode is not None:
        imgcoon.set_mode(mode)
    if anchor is not None:
        imgcoon.set_anchor(anchor)

    result = imgcoon.run(imgcoon.build_request(), overwrite=overwrite)

    if result.ok:
        console.print(f"[green]Created {destination}[/green] [dim]({result.generator})[/dim]")
        return

    console.print(f"[red]Failed: {result.error.value}[/red]")
    if result.message:
        console.print(f"[dim]{result.message}[/dim]")
    ctx.exit(1)


@main.command()
@click.pass_context
def generators(ctx: click.Context) -> None:
    """List generators in dispatch order."""
    registry = GeneratorRegistry.default(ctx.obj["config"])

    table = Table(title="Generators")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Mime types", style="yellow")

    for position, generator in enumerate(registry, start=1):
        mimes = [f"*{p}*" for p in generator.MIME_PATTERNS] + list(generator.MIME_TYPES)
        table.add_row(str(position), generator.name, generator.description, "\n".join(mimes))

    console.print(table)


@main.command()
@click.argument("mime_or_file")
@click.pass_context
def which(ctx: click.Context, mime_or_file: str) -> None:
    """Show which generators would handle a mime type (or file name)."""
    if Path(mime_or_file).is_file() or "/" not in mime_or_file:
        mime = guess_mime(mime_or_file)
    else:
        mime = mime_or_file
    registry = GeneratorRegistry.default(ctx.obj["config"])
    matches = registry.matching(mime)

    if not matches:
        console.print(f"[yellow]No generator supports {mime}[/yellow]")
        ctx.exit(1)

    console.print(f"[bold]{mime}[/bold]")
    for i, generator in enumerate(matches):
        marker = "[green]→[/green]" if i == 0 else " "
        console.print(f" {marker} {generator.name} [dim]{generator.description}[/dim]")


@main.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def inspect(ctx: click.Context, image: Path) -> None:
    """Show how canvas mode would treat IMAGE."""
    processor = ThumbnailProcessor(ctx.obj["config"])
    try:
        analysis = processor.analyze(image)
    except ThumbnailError as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)

    console.print(f"[bold cyan]{image.name}[/bold cyan]")
    console.print(f"  Size: {analysis.width}x{analysis.height}")
    console.print(f"  Format: {analysis.format or 'unknown'} ({analysis.mode})")
    console.print(f"  Transparency: {'yes' if analysis.has_transparency else 'no'}")
    if analysis.background is not None:
        console.print(f"  Canvas background: {analysis.background.hex}")
    else:
        console.print("  Canvas background: transparent")
