"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from vdpabind.core.errors import VdpabindError
from vdpabind.core.network_info import NETWORK_INFO_PATH
from vdpabind.core.service import VdpaBindingService

app = typer.Typer(help="vdpa network binding for KubeVirt domain specs")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        typer.echo(f"Error: could not read {what} file {path}: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("define-domain")
def define_domain(
    vmi: Path = typer.Option(..., "--vmi", help="VMI manifest (YAML or JSON)"),
    domain: Path = typer.Option(..., "--domain", help="Libvirt domain XML"),
    network_info: Path = typer.Option(NETWORK_INFO_PATH, "--network-info", help="Downward API network info file"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the domain XML here instead of stdout"),
) -> None:
    """Add the vdpa interface of a VMI to a domain XML document."""
    vmi_text = _read_text(vmi, "VMI")
    domain_xml = _read_text(domain, "domain")
    try:
        service = VdpaBindingService(network_info_path=network_info)
        result = service.define_domain(vmi_text, domain_xml)
    except VdpabindError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    if output is None:
        typer.echo(result)
        return
    try:
        output.write_text(result, encoding="utf-8")
    except OSError as exc:
        typer.echo(f"Error: could not write {output}: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("network-info")
def show_network_info(
    network_info: Path = typer.Option(NETWORK_INFO_PATH, "--network-info", help="Downward API network info file"),
) -> None:
    """List the devices published through the downward API."""
    try:
        service = VdpaBindingService(network_info_path=network_info)
        info = service.network_info()
    except VdpabindError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    if info is None:
        typer.echo(f"Network info not available at {network_info}")
        raise typer.Exit(code=1)
    if not info.interfaces:
        typer.echo("No network devices published")
        return

    for entry in info.interfaces:
        vdpa = entry.device_info.vdpa if entry.device_info else None
        path = vdpa.path if vdpa else "<no-vdpa>"
        mac = entry.mac_address or "<no-mac>"
        typer.echo(f"{entry.network} {mac} {path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
