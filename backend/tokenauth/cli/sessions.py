"""Flask CLI commands for token housekeeping."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from tokenauth.api.deps import get_session_manager
from tokenauth.core.extensions import get_denylist

LOGGER = logging.getLogger(__name__)


@click.group("sessions")
def sessions_cli() -> None:
    """Refresh-token and denylist maintenance commands."""


@sessions_cli.command("purge-expired")
@with_appcontext
def purge_expired() -> None:
    """Delete refresh tokens whose expiry has passed."""
    removed = get_session_manager().purge_expired()
    LOGGER.info("cli.sessions.purge_expired removed=%s", removed)
    click.echo(f"Purged {removed} expired refresh token(s).")


@sessions_cli.command("prune-revoked")
@with_appcontext
def prune_revoked() -> None:
    """Drop expired entries from this process's access-token denylist."""
    removed = get_denylist().prune()
    LOGGER.info("cli.sessions.prune_revoked removed=%s", removed)
    click.echo(f"Pruned {removed} revoked access token(s).")
