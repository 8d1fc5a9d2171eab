#!/usr/bin/env python3
"""A CLI for the icomfort library."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Final

import click
from colorama import Fore, Style, init as colorama_init

from icomfort import Gateway, exceptions as exc
from icomfort_tx import HttpTransport, ZoneStatus, set_logging
from icomfort_tx.const import FanMode, RunningState, SystemMode
from icomfort_tx.schemas import SCH_TRANSPORT_CONFIG

STATUS: Final = "status"
SET: Final = "set"
TARGET: Final = "target"

SZ_SYSTEM_ID: Final = "system_id"
SZ_TOKEN: Final = "token"
SZ_TRANSPORT: Final = "transport"

COLORS = {
    RunningState.HEATING: Fore.RED,
    RunningState.COOLING: Fore.CYAN,
    RunningState.IDLE: Fore.GREEN,
}

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def split_config(config: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a config file's dict into transport/gateway configs."""

    config = dict(config)
    transport_config = SCH_TRANSPORT_CONFIG(config.pop(SZ_TRANSPORT, {}))
    return transport_config, config


# Args/Params for all commands
@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-z", "--debug-mode", count=True, help="enable debug logging")
@click.option("-c", "--config-file", type=click.File("r"))
@click.option("--token", envvar="ICOMFORT_TOKEN", required=True, help="bearer token")
@click.option("--system-id", envvar="ICOMFORT_SYSTEM_ID", required=True)
@click.pass_context
def cli(ctx, config_file=None, **kwargs: Any) -> None:
    """A CLI for the icomfort library."""

    lib_kwargs: dict[str, Any] = json.load(config_file) if config_file else {}
    ctx.obj = kwargs, lib_kwargs


#
# 1/3: STATUS (of all zones)
@click.command()
@click.pass_obj
def status(obj, **kwargs: Any):
    """Display the status of the system's zones."""
    config, lib_config = obj
    return STATUS, lib_config, config | kwargs


#
# 2/3: SET (the primary zone's setpoints, mode and/or fan mode)
@click.command()
@click.option("--heat", type=float, help="heating setpoint")
@click.option("--cool", type=float, help="cooling setpoint")
@click.option("--mode", type=click.Choice([str(m) for m in SystemMode]))
@click.option("--fan", type=click.Choice([str(m) for m in FanMode]))
@click.pass_obj
def set(obj, **kwargs: Any):  # noqa: A001
    """Set the primary zone's setpoints, mode and/or fan mode."""
    config, lib_config = obj
    return SET, lib_config, config | kwargs


#
# 3/3: TARGET (the primary zone's target temp, as appropriate to its mode)
@click.command()
@click.argument("temp", type=float)
@click.pass_obj
def target(obj, **kwargs: Any):
    """Set the primary zone's target temperature."""
    config, lib_config = obj
    return TARGET, lib_config, config | kwargs


def print_status(status: ZoneStatus) -> None:
    color = COLORS.get(status.running_state, Fore.YELLOW)
    unit = status.unit

    print(
        f"{Style.BRIGHT}{color}zone {status.zone_id}: {status.running_state}"
        f"{Style.RESET_ALL}"
        f" - temp: {status.temperature}{unit}"
        f", heat: {status.heat_setpoint}{unit}"
        f", cool: {status.cool_setpoint}{unit}"
        f", mode: {status.system_mode}"
        f", fan: {status.fan_mode or '-'}"
        f", humidity: {status.humidity}%"
    )


async def async_main(command: str, lib_kwargs: dict, **kwargs: Any) -> None:
    transport_config, gwy_config = split_config(lib_kwargs)

    transport = HttpTransport(
        kwargs[SZ_TOKEN], kwargs[SZ_SYSTEM_ID], **transport_config
    )
    gwy = Gateway(transport, kwargs[SZ_SYSTEM_ID], config=gwy_config)

    colorama_init(autoreset=True)

    try:  # main code here
        await gwy.start(start_polling=False)

        if command == SET:
            zone = gwy.get_zone()
            await zone.set_setpoints(
                heat=kwargs["heat"],
                cool=kwargs["cool"],
                mode=kwargs["mode"],
                fan_mode=kwargs["fan"],
            )
            await gwy.update()

        elif command == TARGET:
            zone = gwy.get_zone()
            await zone.set_target_temp(kwargs["temp"])
            await gwy.update()

    except exc.IComfortException as err:
        msg = f"ended via: {err.__class__.__name__}: {err}"
    else:
        msg = "ended without error"
    finally:
        await gwy.stop()

    for zone_id in sorted(gwy.zones):
        if zone_status := gwy.zones[zone_id].status:
            print_status(zone_status)

    print(f"\r\nclient.py: {msg}")


cli.add_command(status)
cli.add_command(set)
cli.add_command(target)


def main() -> None:
    try:
        result = cli(standalone_mode=False)
    except click.ClickException as err:
        err.show()
        sys.exit(-1)

    if isinstance(result, int):
        sys.exit(result)

    (command, lib_kwargs, kwargs) = result

    set_logging(level=logging.DEBUG if kwargs.pop("debug_mode") else logging.WARNING)

    try:
        asyncio.run(async_main(command, lib_kwargs, **kwargs))
    except KeyboardInterrupt:
        print("\r\nclient.py: ended via: KeyboardInterrupt")


if __name__ == "__main__":
    main()
