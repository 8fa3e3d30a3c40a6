"""
Keygen - Create a signing key for the admin or user role.

The secret seed is written to ~/.questkit/.env (mode 0600) under the role's
variable. Nothing is funded or registered on-chain; fund the printed address
(e.g. with friendbot on testnet) before signing transactions.
"""

from __future__ import annotations

import click

from ..domain.errors import ConfigurationError
from ..signer.keys import ROLE_ENV_VARS, generate_keypair, get_address, save_secret
from ._common import fail


@click.command()
@click.option("--role", type=click.Choice(list(ROLE_ENV_VARS)), default="admin", show_default=True,
              help="Signing role the key is for")
@click.option("--force", is_flag=True, help="Replace an existing key for this role")
def keygen(role: str, force: bool) -> None:
    """Generate an ed25519 key and save it for ROLE."""
    var = ROLE_ENV_VARS[role]

    if not force:
        try:
            address = get_address(role=role)
        except ConfigurationError:
            address = None
        if address is not None:
            click.secho(f"{var} already set.", fg="yellow")
            click.echo(f"  Address: {address}")
            click.echo("  Use --force to replace it.")
            return

    secret, public = generate_keypair()
    try:
        path = save_secret(role, secret)
    except ConfigurationError as exc:
        fail(exc)

    click.secho(f"SUCCESS: {role} key created", fg="green")
    click.echo(f"  Address: {public}")
    click.echo(f"  Saved:   {var} -> {path}")
