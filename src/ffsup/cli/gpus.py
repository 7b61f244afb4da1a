"""CLI command listing detected accelerators."""

from __future__ import annotations

import json

import click

from ffsup.tools import list_gpus


@click.command("gpus")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output GPUs as JSON",
)
def gpus_command(json_output: bool) -> None:
    """List video controllers usable with --vendor and --device.

    Detection is only available on Windows; elsewhere the list is empty
    and software encoding (--vendor none) is always available.
    """
    gpus = list_gpus()

    if json_output:
        click.echo(
            json.dumps(
                [
                    {
                        "name": gpu.name,
                        "device_index": gpu.device_index,
                        "vendor": gpu.vendor.value,
                    }
                    for gpu in gpus
                ],
                indent=2,
            )
        )
        return

    if not gpus:
        click.echo("No GPUs detected.")
        return

    for gpu in gpus:
        click.echo(f"{gpu.device_index:>3}  {gpu.vendor.value:<7} {gpu}")
