"""Command-line interface for Address Resolver using Typer."""

import json

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from address_resolver.config import get_settings
from address_resolver.errors import GeocodingNotFound
from address_resolver.geocoding import ProviderRegistry
from address_resolver.logging import setup_logging
from address_resolver.orchestrator import GeocodingOrchestrator

app = typer.Typer(
    name="address-resolver",
    help="Address Resolver: resolve free-form addresses to coordinates",
    add_completion=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging (DEBUG level)",
    ),
) -> None:
    """
    Address Resolver CLI - geocode addresses, plus codes and city names.
    """
    settings = get_settings()
    if verbose:
        settings.log_level = "DEBUG"
    setup_logging(settings)

    logger.debug("Verbose mode enabled")


@app.command()
def geocode(
    address: str = typer.Argument(..., help="Address to resolve"),
    fallback: bool = typer.Option(
        False,
        "--fallback",
        "-f",
        help="Probe the city table once more if the pipeline fails",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the result as JSON",
    ),
) -> None:
    """Resolve an address to a coordinate."""
    logger.info("geocode command called with fallback={}", fallback)

    settings = get_settings()

    with GeocodingOrchestrator(settings) as orchestrator:
        try:
            if fallback:
                result = orchestrator.geocode_with_fallback(address)
            else:
                result = orchestrator.geocode(address)
        except GeocodingNotFound as e:
            logger.error("Geocoding failed: {}", e.message)
            typer.secho(
                f"✗ {e.message}",
                fg=typer.colors.RED,
                bold=True,
            )
            raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict()))
        return

    typer.secho(
        f"✓ {result.lat:.6f}, {result.lon:.6f}",
        fg=typer.colors.GREEN,
        bold=True,
    )
    typer.echo(f"  Source: {result.source}")
    if result.provider_source:
        typer.echo(f"  Locality resolved by: {result.provider_source}")
    if result.matched_address:
        typer.echo(f"  Matched address: {result.matched_address}")
    if result.variation_used:
        typer.echo(f"  Variation used: {result.variation_used}")


@app.command()
def providers() -> None:
    """List configured providers and whether their API keys are set."""
    settings = get_settings()
    registry = ProviderRegistry.from_settings(settings)

    table = Table(title="Geocoding providers")
    table.add_column("#", justify="right")
    table.add_column("Provider")
    table.add_column("Endpoint")
    table.add_column("Credential")

    for position, provider in enumerate(registry, 1):
        credential = (
            "[green]set[/green]"
            if provider.has_credential
            else f"[red]missing[/red] ({provider.credential_key})"
        )
        table.add_row(str(position), provider.name, provider.endpoint, credential)

    Console().print(table)

    if not len(registry):
        typer.secho("No providers enabled", fg=typer.colors.YELLOW)


if __name__ == "__main__":
    app()
