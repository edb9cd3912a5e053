#!/usr/bin/env python3
"""oasdoc - OpenAPI to Markdown documentation tool."""
import logging
import sys
from pathlib import Path

import click
from colorama import Fore, Style, init

from config import app_config
from oasdoc import __version__
from oasdoc.converter import ConvertOptions, convert
from oasdoc.exporter.json_exporter import JsonExporter
from oasdoc.introspection.api_schema_introspector import ApiSchemaIntrospector
from oasdoc.introspection.usage_analyzer import SchemaUsageAnalyzer, sorted_usage
from oasdoc.schema.errors import ConversionError

# Initialize colorama
init(autoreset=True)


def print_banner():
    """Print application banner."""
    click.echo(f"{Fore.CYAN}{'=' * 44}")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}oasdoc{Fore.CYAN}                               ║")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}OpenAPI to Markdown documentation{Fore.CYAN}    ║")
    click.echo(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    click.echo()


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def make_introspector(source: str) -> ApiSchemaIntrospector:
    """Introspector for a file path or URL, using the configured credentials, timeout and cache."""
    return ApiSchemaIntrospector(
        source,
        credentials=app_config.credentials,
        timeout=app_config.timeout,
        cache_dir=Path(app_config.cache_dir),
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """oasdoc - Generate Markdown API documentation from OpenAPI 3.x documents."""
    setup_logging(verbose)


@cli.command("convert")
@click.argument("source")
@click.option("--title", required=True, help="Document title")
@click.option("--description", default="", help="Introductory paragraph")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Markdown output file (default: <output_dir>/api.md)",
)
@click.option(
    "--shared-schemas/--no-shared-schemas",
    default=None,
    help="Render schemas used by several endpoints once, in a shared section",
)
@click.option("--max-depth", type=int, default=None, help="Maximum nested schema depth")
@click.option(
    "--debug-json",
    type=click.Path(dir_okay=False),
    help="Also write conversion metadata and debug counts as JSON",
)
def convert_command(source, title, description, output, shared_schemas, max_depth, debug_json):
    """Convert the OpenAPI document at SOURCE (file path or URL) to Markdown."""
    print_banner()

    options = ConvertOptions(
        title=title,
        description=description,
        enable_shared_schemas=(
            app_config.render.enable_shared_schemas if shared_schemas is None else shared_schemas
        ),
        debug=bool(debug_json),
        max_depth=max_depth if max_depth is not None else app_config.render.max_depth,
        example_max_depth=app_config.examples.max_depth,
        example_seed=app_config.examples.seed,
    )

    try:
        click.echo(f"{Fore.CYAN}Loading {source}...")
        spec = make_introspector(source).get_spec()
        result = convert(spec, options)
    except (ConversionError, RuntimeError) as e:
        click.echo(f"{Fore.RED}Error: {e}", err=True)
        sys.exit(1)

    output_file = Path(output) if output else Path(app_config.output_dir) / "api.md"
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(result.markdown, encoding="utf-8")

    if debug_json:
        JsonExporter().export(Path(debug_json), result, source=source)

    for warning in result.warnings:
        click.echo(f"{Fore.YELLOW}Warning: {warning}")

    click.echo(f"{Fore.GREEN}✅ Documentation written to {output_file}")
    click.echo(f"{Fore.GREEN}   Endpoints: {result.endpoint_count}")
    click.echo(f"{Fore.GREEN}   Tags: {result.tag_count}")
    click.echo(f"{Fore.GREEN}   Shared schemas: {len(result.shared_schemas)}")


@cli.command("shared-schemas")
@click.argument("source")
def shared_schemas_command(source):
    """List schemas used by two or more endpoints of SOURCE."""
    try:
        document = make_introspector(source).get_document()
    except (ConversionError, RuntimeError) as e:
        click.echo(f"{Fore.RED}Error: {e}", err=True)
        sys.exit(1)

    shared = SchemaUsageAnalyzer().identify_shared_schemas(document.endpoints)
    if not shared:
        click.echo(f"{Fore.YELLOW}No shared schemas found")
        return

    for name, usage in sorted_usage(shared):
        click.echo(f"{Fore.CYAN}{name}{Style.RESET_ALL}: {', '.join(usage.endpoints)}")


if __name__ == "__main__":
    cli()
