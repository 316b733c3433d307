"""
Certflow CLI — retrieve, verify and act on a remote certificate.

Usage:
    python -m verifier_cli.cli verify <uri> [--key <hex>]
    python -m verifier_cli.cli inspect <uri> [--key <hex>]
    python -m verifier_cli.cli send <uri> <email> --captcha <token> [--key <hex>]
    python -m verifier_cli.cli share <uri> [--key <hex>]
"""

from __future__ import annotations

import asyncio
import json
import logging

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from certflow.config import CertflowConfig
from certflow.schema import CertificateReference, FragmentStatus, SessionState
from certflow.session import CertificateSession


console = Console()


def _make_session() -> CertificateSession:
    return CertificateSession(config=CertflowConfig.from_env())


def _load(session: CertificateSession, uri: str, key: str | None) -> None:
    """Retrieve and verify; exit non-zero if retrieval fails."""
    asyncio.run(session.retrieve_by_action(CertificateReference(uri=uri, key=key)))
    if session.retrieve_state == SessionState.FAILURE:
        raise click.ClickException(session.retrieve_error or "Retrieval failed")


def _status_markup(status: FragmentStatus) -> str:
    colour = {
        FragmentStatus.VALID: "green",
        FragmentStatus.SKIPPED: "yellow",
    }.get(status, "red")
    return f"[{colour}]{status.value}[/{colour}]"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log verification details")
def main(verbose: bool):
    """Certflow — certificate retrieval and verification tool."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("uri")
@click.option("--key", "-k", default=None, help="Hex decryption key")
def verify(uri: str, key: str | None):
    """Retrieve a certificate and verify it."""
    session = _make_session()
    console.print(Panel("Certificate Verification", style="bold blue"))
    _load(session, uri, key)

    if session.verification_error:
        console.print(f"[red]Verification errored: {session.verification_error}[/red]")
        raise SystemExit(2)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Check", width=20)
    table.add_column("Fragment", width=48)
    table.add_column("Status", width=10)
    for fragment in session.verification_status or []:
        table.add_row(fragment.type, fragment.name, _status_markup(fragment.status))
    console.print(table)

    if session.valid:
        console.print("\n[bold green]✓ CERTIFICATE VERIFIED SUCCESSFULLY[/bold green]")
        return

    for category in session.snapshot()["errors"]:
        console.print(f"  [red]✗ {category['title']}[/red]")
        console.print(f"    {category['message']}")
    console.print("\n[bold red]✗ CERTIFICATE VERIFICATION FAILED[/bold red]")
    raise SystemExit(1)


@main.command()
@click.argument("uri")
@click.option("--key", "-k", default=None, help="Hex decryption key")
def inspect(uri: str, key: str | None):
    """Print the retrieved (decrypted) certificate."""
    session = _make_session()
    _load(session, uri, key)
    console.print(Panel("Certificate", style="bold cyan"))
    console.print_json(json.dumps(session.certificate))


@main.command()
@click.argument("uri")
@click.argument("email")
@click.option("--captcha", required=True, help="Captcha token")
@click.option("--key", "-k", default=None, help="Hex decryption key")
def send(uri: str, email: str, captcha: str, key: str | None):
    """Email a certificate to a recipient."""
    session = _make_session()
    _load(session, uri, key)
    if not asyncio.run(session.send_certificate(email, captcha)):
        raise click.ClickException(session.email_error or "Fail to send certificate")
    console.print(f"[green]✓ Certificate sent to {email}[/green]")


@main.command()
@click.argument("uri")
@click.option("--key", "-k", default=None, help="Hex decryption key")
def share(uri: str, key: str | None):
    """Create a share link for a certificate."""
    session = _make_session()
    _load(session, uri, key)
    link = asyncio.run(session.generate_share_link())
    if link is None:
        raise click.ClickException(session.share_link_error or "Fail to generate share link")
    console.print_json(json.dumps(link))


if __name__ == "__main__":
    main()
