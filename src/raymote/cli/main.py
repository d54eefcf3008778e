"""Raymote CLI - serve the IR bridge or talk to the hardware directly."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from raymote.utils.logging import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool) -> None:
    """Raymote - IR receiver/transmitter web bridge."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "INFO", json_output=json_output)


@cli.command()
@click.option("--host", default=None, help="Bind address (default 0.0.0.0 or RAYMOTE_HOST)")
@click.option("--port", type=int, default=None, help="HTTP port (default 3000 or RAYMOTE_PORT)")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for config.json and buttons.json",
)
def serve(host: str | None, port: int | None, data_dir: Path | None) -> None:
    """Start the web server."""
    import uvicorn

    from raymote.api.app import create_app
    from raymote.settings import Settings

    settings = Settings.from_env().with_overrides(host=host, port=port, data_dir=data_dir)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


@cli.command()
@click.pass_context
def ports(ctx: click.Context) -> None:
    """List USB serial devices."""
    from raymote.core.ports import list_ports
    from raymote.exceptions import EnumerationError

    try:
        found = list_ports()
    except EnumerationError as exc:
        raise click.ClickException(str(exc)) from exc

    if ctx.obj.get("json_output"):
        click.echo(json.dumps([p.model_dump() for p in found], indent=2))
        return
    if not found:
        click.echo("No USB serial devices found.")
        return
    click.echo(f"Found {len(found)} device(s):")
    for p in found:
        click.echo(f"  {p.path:<20} {p.manufacturer}")


@cli.command()
@click.argument("port")
@click.argument("protocol")
@click.argument("bits", type=int)
@click.argument("code")
def send(port: str, protocol: str, bits: int, code: str) -> None:
    """Send one IR command through the transmitter on PORT."""
    from raymote.core.transmitter import TransmitterSession
    from raymote.exceptions import ConnectError, SendError
    from raymote.models.session import TransmitCommand

    command = TransmitCommand(protocol=protocol, bits=bits, code=code)

    async def _send() -> None:
        session = TransmitterSession()
        await session.connect(port)
        try:
            await session.send(command)
        finally:
            await session.disconnect()

    try:
        asyncio.run(_send())
    except (ConnectError, SendError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Sent {command.to_line().strip()} to {port}")


if __name__ == "__main__":
    cli()
