import asyncio

import typer
from rich.console import Console
from rich.table import Table

console = Console()
cli_app = typer.Typer(name="dash-admin", help="Unified Dash administrative CLI")


def _run_async(coro):
    """Run async code from sync CLI context."""
    return asyncio.run(coro)


@cli_app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", "--host"),
    port: int = typer.Option(5000, "--port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Run the dashboard API server."""
    import uvicorn

    uvicorn.run("unified_dash.main:app", host=host, port=port, reload=reload)


@cli_app.command("command")
def command(text: str = typer.Argument(help="Free-text command, e.g. 'open langfuse'")):
    """Route one command against the seeded inventory and print the result."""
    async def _route():
        from unified_dash.config import settings
        from unified_dash.services.commands import build_command_router
        from unified_dash.services.repository import Repository
        from unified_dash.services.seed import seed_repository

        repository = Repository(event_log_limit=settings.dash_event_log_limit)
        await seed_repository(repository)
        command_router = build_command_router(settings, repository)
        try:
            return command_router.mode, await command_router.route(text)
        finally:
            await command_router.close()

    mode, result = _run_async(_route())

    table = Table(title=f"Command result ({mode} mode)")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("intent", result.intent)
    table.add_row("confidence", f"{result.confidence:.2f}")
    table.add_row("serviceId", result.service_id or "-")
    table.add_row("message", result.message)
    table.add_row("requiresConfirmation", "yes" if result.requires_confirmation else "no")
    console.print(table)


@cli_app.command("watch")
def watch(
    url: str = typer.Argument("ws://localhost:5000/ws", help="Telemetry websocket URL"),
    reconnect_delay: float | None = typer.Option(None, "--reconnect-delay", help="Seconds between reconnect attempts"),
):
    """Print GPU and storage telemetry whenever it changes."""
    from unified_dash.client.telemetry import ReconciliationCache, TelemetryClient
    from unified_dash.config import settings

    if reconnect_delay is None:
        reconnect_delay = settings.dash_reconnect_delay

    cache = ReconciliationCache()

    def show_gpus(gpus):
        table = Table(title="GPUs")
        table.add_column("GPU", style="cyan")
        table.add_column("Util")
        table.add_column("VRAM")
        table.add_column("Temp")
        table.add_column("Queued")
        for g in gpus:
            temp = f"{g['temperature']}°C" if g.get("temperature") is not None else "-"
            table.add_row(
                g["name"],
                f"{g['utilization'] * 100:.0f}%",
                f"{g['vramUsed']:g}/{g['vramTotal']:g} GB",
                temp,
                str(g.get("jobsQueued", 0)),
            )
        console.print(table)

    def show_storage(volumes):
        table = Table(title="Storage")
        table.add_column("Volume", style="cyan")
        table.add_column("Path")
        table.add_column("Used")
        table.add_column("Usage", style="green")
        for v in volumes:
            table.add_row(v["name"], v["path"], f"{v['usedGB']:g}/{v['totalGB']:g} GB", f"{v['usagePercent']:.1f}%")
        console.print(table)

    cache.subscribe("gpus", show_gpus)
    cache.subscribe("storage", show_storage)

    client = TelemetryClient(url, cache=cache, reconnect_delay=reconnect_delay)
    console.print(f"[dim]Watching {url} (Ctrl+C to stop)[/dim]")
    try:
        _run_async(client.run())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


if __name__ == "__main__":
    cli_app()
