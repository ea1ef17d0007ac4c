"""CLI command for deleting expired refresh tokens.

Usage:
    flask purge-tokens
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from streakly.core.container import get_services


@click.command("purge-tokens")
@with_appcontext
def purge_tokens_command():
    """Delete refresh tokens whose expiry has passed."""
    deleted = get_services().auth.purge_expired_tokens()
    click.echo(f"Purged {deleted} expired refresh tokens")


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(purge_tokens_command)
