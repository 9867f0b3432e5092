"""Dealyze client CLI.

Connects to a register, signs the employee in and echoes every event.

Usage:
    dealyze-client --employee-id 123456 --employee-username cashier
    dealyze-client --uri ws://register:3100 --log         # Write log files
    dealyze-client --demo                                 # Send test bill pay / redemption

Options fall back to DEALYZE_* environment variables.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime
from decimal import Decimal

import click

from .client import DealyzeClient
from .config import ClientConfig
from .log import configure_logging
from .observer import RegisterObserver
from .transport import RegisterTransport

# Total sent by --demo redemptions
DEMO_REDEEM_TOTAL = Decimal("5.0")


def timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class EchoObserver(RegisterObserver):
    """Prints register events; in demo mode answers them with test sends."""

    def __init__(self, client: DealyzeClient, demo: bool = False) -> None:
        self._client = client
        self._demo = demo

    async def on_connect(self) -> None:
        click.echo(f"{timestamp()} - Connected")

    async def on_disconnect(self, reason: str | None) -> None:
        click.echo(f"{timestamp()} - Disconnected: {reason}")

    async def on_customer(self, message: str | None) -> None:
        click.echo(f"{timestamp()} - Customer: {message}")
        if self._demo:
            result = await self._client.pay_bill()
            click.echo(f"{timestamp()} - Test bill pay: {result.status.value}")

    async def on_order(self, message: str | None) -> None:
        click.echo(f"{timestamp()} - Order: {message}")
        if self._demo:
            result = await self._client.redeem_reward(DEMO_REDEEM_TOTAL)
            click.echo(f"{timestamp()} - Test redemption: {result.status.value}")


async def run_client(
    config: ClientConfig,
    demo: bool = False,
    stop: asyncio.Event | None = None,
    transport: RegisterTransport | None = None,
) -> None:
    """Run a client until stop is set (or forever)."""
    stop = stop or asyncio.Event()
    async with DealyzeClient(config, transport=transport) as client:
        client.register(EchoObserver(client, demo=demo))
        if not await client.connect():
            click.echo(f"Could not connect to {config.uri}; waiting for register", err=True)
        await stop.wait()


@click.command()
@click.option("--uri", default=None, help="Register URI (default: ws://localhost:3100)")
@click.option("--employee-id", default=None, help="Employee identifier to sign in")
@click.option("--employee-username", default=None, help="Employee username to sign in")
@click.option(
    "--log/--no-log", "enable_logging", default=None, help="Write error and payload logs"
)
@click.option("--log-file", default=None, help="Error log path")
@click.option("--payload-log-file", default=None, help="Payload log path")
@click.option("--demo", is_flag=True, help="Answer customers and orders with test sends")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging to stderr")
def main(
    uri: str | None,
    employee_id: str | None,
    employee_username: str | None,
    enable_logging: bool | None,
    log_file: str | None,
    payload_log_file: str | None,
    demo: bool,
    verbose: bool,
) -> None:
    """Dealyze register client - relays register events to the console."""
    overrides = {
        "uri": uri,
        "employee_id": employee_id,
        "employee_username": employee_username,
        "enable_logging": enable_logging,
        "log_file": log_file,
        "payload_log_file": payload_log_file,
    }
    try:
        config = ClientConfig.from_env(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        raise click.UsageError(f"Invalid environment configuration: {e}") from e

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    configure_logging(config)

    if not config.employee_id:
        click.echo("Warning: no employee id set; the register will not sign anyone in", err=True)

    click.echo("Starting up client...")
    click.echo(f"Logging is {'on' if config.enable_logging else 'off'}")
    try:
        asyncio.run(run_client(config, demo=demo))
    except KeyboardInterrupt:
        click.echo("Stopped.")


if __name__ == "__main__":
    main()
