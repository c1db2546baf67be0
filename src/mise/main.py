"""
Mise - CLI Entry Point.

Usage:
    mise scrape URL          Extract a recipe from a page and print it
    mise scale LINE --by 2   Scale an ingredient line
    mise serve               Start the API server
    mise health              Check configuration
    mise --help              Show help
"""

import asyncio
import json
import logging

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

app = typer.Typer(
    name="mise",
    help="Mise - save recipe links, extract them, scale them.",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Configure logging for every command."""
    from mise.config import settings

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def scrape(
    url: str = typer.Argument(..., help="Recipe page URL"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a summary"),
    multiplier: float = typer.Option(1.0, "--scale", "-s", help="Scale ingredients for display"),
) -> None:
    """Extract a recipe from a URL (nothing is saved)."""
    from mise.recipe_import import FetchError, ValidationError, extract_recipe
    from mise.tools.normalize import strip_leading_step_number
    from mise.tools.quantities import clamp_multiplier, scale_leading_quantity, scale_servings_label

    try:
        scraped = asyncio.run(extract_recipe(url))
    except (ValidationError, FetchError) as e:
        console.print(f"[red]FAIL[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(scraped.to_dict()))
        return

    factor = clamp_multiplier(multiplier)
    lines = [f"[dim]{scraped.source_host}[/dim]"]
    if scraped.description:
        lines.append(escape(scraped.description))
    servings = scale_servings_label(scraped, factor)
    if servings:
        lines.append(f"[bold]{servings}[/bold]")
    if scraped.image_url:
        lines.append(f"[dim]Image: {scraped.image_url}[/dim]")

    if scraped.ingredients:
        lines.append("\n[bold]Ingredients[/bold]")
        lines.extend(f"  • {escape(scale_leading_quantity(line, factor))}" for line in scraped.ingredients)
    if scraped.instructions:
        lines.append("\n[bold]Instructions[/bold]")
        lines.extend(
            f"  {n}. {escape(strip_leading_step_number(step))}"
            for n, step in enumerate(scraped.instructions, start=1)
        )
    if not scraped.has_recipe_data:
        lines.append("\n[yellow]No structured recipe data found on this page.[/yellow]")

    console.print(Panel("\n".join(lines), title=escape(scraped.title), border_style="green"))


@app.command()
def scale(
    line: str = typer.Argument(..., help='Ingredient line, e.g. "1 1/2 cups flour"'),
    by: float = typer.Option(2.0, "--by", "-b", help="Multiplier (0.1-10)"),
) -> None:
    """Scale the leading quantity of an ingredient line."""
    from mise.tools.quantities import clamp_multiplier, scale_leading_quantity

    console.print(scale_leading_quantity(line, clamp_multiplier(by)), markup=False, highlight=False)


@app.command()
def health() -> None:
    """Check configuration."""
    from mise.config import get_settings

    console.print("\n[bold]Mise Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("[green]OK[/green] Configuration loaded")
        console.print(f"   Environment: {settings.mise_env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Storage backend: {settings.storage_backend}")

        if settings.storage_backend == "supabase" or settings.auth_enabled:
            if settings.supabase_url and settings.supabase_url.startswith("https://"):
                console.print("[green]OK[/green] Supabase URL configured")
            else:
                console.print("[red]FAIL[/red] Supabase URL missing or invalid")
                raise typer.Exit(1)
            if not settings.supabase_service_role_key:
                console.print("[red]FAIL[/red] Supabase service role key missing")
                raise typer.Exit(1)
        else:
            console.print("[dim]INFO[/dim] Supabase not in use")

        if settings.scrape_timeout_seconds is None:
            console.print("[yellow]WARN[/yellow] Scrape timeout disabled; slow pages can hang requests")

        console.print("\n[green]All checks passed![/green]")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure your .env file is valid.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from mise import __version__

    console.print(f"Mise version {__version__}")


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]Mise API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "mise.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
