"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SlotBookerError
from ..domain.models import SlotGenerationRequest
from ..domain.slot_synthesizer import SlotSynthesizer

app = typer.Typer(
    name="slotbooker",
    help="Appointment slot booking backend",
    add_completion=False
)

console = Console()


def configure_logging(level: str) -> None:
    """Route standard logging through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def serve(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address (overrides config)")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port (overrides config)")] = None,
):
    """
    Run the HTTP API.
    """
    import uvicorn

    from ..api.app import create_app

    config = _load_config(config_file)
    configure_logging(config.log_level)

    bind_host = host or config.server.host
    bind_port = port or config.server.port

    console.print(f"\n[bold cyan]slotbooker[/bold cyan] listening on http://{bind_host}:{bind_port}")
    console.print(f"CORS enabled for: {', '.join(config.server.cors_origins) or '-'}\n")

    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_level=config.log_level.lower(),
    )


@app.command()
def init_db(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
):
    """
    Create the database tables.
    """
    from ..adapters.database import create_db_engine, init_db as create_tables

    config = _load_config(config_file)
    configure_logging(config.log_level)

    engine = create_db_engine(config.database)
    try:
        create_tables(engine)
    finally:
        engine.dispose()

    console.print("[green]✓ Database schema ready[/green]")


@app.command()
def preview(
    start: Annotated[str, typer.Option("--start", help="First date (YYYY-MM-DD)")],
    end: Annotated[str, typer.Option("--end", help="Last date, inclusive (YYYY-MM-DD)")],
    day_start: Annotated[str, typer.Option("--from", help="Daily start time (HH:MM)")] = "09:00",
    day_end: Annotated[str, typer.Option("--to", help="Daily end time (HH:MM)")] = "17:00",
    duration: Annotated[int, typer.Option("--duration", "-d", help="Slot duration in minutes")] = 30,
    interval: Annotated[int, typer.Option("--interval", "-i", help="Gap between slots in minutes")] = 0,
    timezone: Annotated[str, typer.Option("--timezone", "-z", help="IANA timezone of the business")] = "UTC",
):
    """
    Show the slots a generation request would produce, without saving them.

    Examples:

        slotbooker preview --start 2024-01-01 --end 2024-01-07

        slotbooker preview --start 2024-03-29 --end 2024-04-02 --from 08:30 --to 12:00 -d 45 -i 15 -z Europe/Berlin
    """
    request = SlotGenerationRequest(
        service_id=0,
        business_id=0,
        start_date=start,
        end_date=end,
        start_time=day_start,
        end_time=day_end,
        interval=interval,
    )

    try:
        slots = SlotSynthesizer().synthesize(request, service_duration=duration, timezone=timezone)
    except SlotBookerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not slots:
        console.print("[yellow]⚠ No slots would be generated for this request.[/yellow]")
        return

    table = Table(
        title=f"{len(slots)} slot(s) in {timezone}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Local", style="bold yellow")
    table.add_column("UTC start", style="dim")
    table.add_column("UTC end", style="dim")

    for slot in slots:
        table.add_row(
            slot.format_display(timezone),
            slot.start.to_iso8601_string(),
            slot.end.to_iso8601_string(),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
