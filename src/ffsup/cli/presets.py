"""CLI command listing encoder presets."""

from __future__ import annotations

import json

import click

from ffsup.domain import GpuVendor
from ffsup.tools import codec_name, get_presets


def _format_vendor(vendor: GpuVendor) -> str:
    lines = [f"{vendor.value} ({codec_name(vendor)}):"]
    for index, preset in enumerate(get_presets(vendor)):
        lines.append(f"  {index:>2}  {preset}")
    return "\n".join(lines)


@click.command("presets")
@click.option(
    "--vendor",
    type=click.Choice([v.value for v in GpuVendor], case_sensitive=False),
    default=None,
    help="Only show presets for this vendor.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output presets as JSON",
)
def presets_command(vendor: str | None, json_output: bool) -> None:
    """List preset names and the indices accepted by --preset."""
    vendors = [GpuVendor.from_name(vendor)] if vendor else list(GpuVendor)

    if json_output:
        click.echo(
            json.dumps(
                {
                    v.value: {
                        "codec": codec_name(v),
                        "presets": list(get_presets(v)),
                    }
                    for v in vendors
                },
                indent=2,
            )
        )
        return

    click.echo("\n\n".join(_format_vendor(v) for v in vendors))
