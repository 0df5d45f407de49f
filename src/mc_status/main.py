"""CLI startup entrypoint for mc-status."""

from __future__ import annotations

import asyncio

import typer
from rich import print

from mc_status.avatars import player_avatar_url
from mc_status.cli import CliStatusHandler, build_monitor, build_resolver
from mc_status.config import CONFIGURED_SERVERS, settings
from mc_status.errors import AllUpstreamsFailed
from mc_status.models import UNKNOWN, ServerStatus
from mc_status.motd import render_status_motd
from mc_status.monitor import EndpointStatus
from mc_status.telemetry.logging import configure_logging

app = typer.Typer(help="Minecraft server status service entrypoint")


@app.callback()
def _setup(log_level: str | None = typer.Option(None, help="Override MC_STATUS_LOG_LEVEL")) -> None:
    try:
        configure_logging(log_level or settings.log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


def _build_handler() -> CliStatusHandler:
    resolver = build_resolver(settings)
    return CliStatusHandler(resolver=resolver, monitor=build_monitor(settings, resolver))


def _summarize(status: ServerStatus) -> dict:
    is_online = status.online and not status.error
    if is_online:
        latency = f"{status.debug.ping}ms" if status.debug.ping is not None else "< 100ms"
    else:
        latency = "--"
    return {
        "state": "online" if is_online else ("check failed" if status.error else "offline"),
        "address": f"{status.hostname if status.hostname != UNKNOWN else status.ip}:{status.port}",
        "players": f"{status.players.online}/{status.players.max}" if is_online else "--/--",
        "latency": latency,
        "version": status.version if is_online else "--",
        "motd_html": render_status_motd(status) if is_online else "",
        "from_cache": status.from_cache,
    }


def _endpoint_row(entry: EndpointStatus) -> dict:
    return {
        "server": entry.endpoint.name,
        "address": entry.endpoint.address,
        "description": entry.endpoint.description,
        **_summarize(entry.status),
    }


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "primary_api_url": settings.primary_api_url,
            "legacy_api_url": settings.legacy_api_url,
            "cache_ttl_seconds": settings.cache_ttl_seconds,
            "request_timeout_seconds": settings.request_timeout_seconds,
            "refresh_interval_seconds": settings.refresh_interval_seconds,
            "servers": [endpoint.address for endpoint in CONFIGURED_SERVERS],
        }
    )


@app.command()
def status(
    address: str,
    as_json: bool = typer.Option(False, "--json", help="Print the full normalized record"),
) -> None:
    """Resolve the status of an arbitrary server address."""
    address = address.strip()
    if not address:
        raise typer.BadParameter("Provide a server address, e.g. play.example.net:25565")

    handler = _build_handler()
    try:
        result = handler.get_status(address)
    except AllUpstreamsFailed as exc:
        print({"address": address, "error": str(exc)})
        raise typer.Exit(code=1)

    print(result.to_dict() if as_json else _summarize(result))


@app.command()
def servers() -> None:
    """Refresh every configured server and list who is online."""
    handler = _build_handler()
    rows = [_endpoint_row(entry) for entry in handler.refresh_servers()]
    print({"servers": rows, "online_players": handler.online_players()})


@app.command()
def watch(
    cycles: int = typer.Option(0, help="Stop after N refresh cycles (0 = run until interrupted)"),
) -> None:
    """Poll the configured servers on the configured refresh interval."""
    monitor = build_monitor(settings)

    async def _run() -> None:
        completed = 0
        while True:
            results = await monitor.trigger_refresh()
            print({"servers": [_endpoint_row(entry) for entry in results], "online_players": monitor.online_players()})
            completed += 1
            if cycles and completed >= cycles:
                break
            await asyncio.sleep(settings.refresh_interval_seconds)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        print({"watch": "stopped"})


@app.command()
def avatar(username: str) -> None:
    """Print the avatar image URL for a player."""
    print({"username": username, "avatar_url": player_avatar_url(username, settings.avatar_url_template)})


if __name__ == "__main__":
    app()
