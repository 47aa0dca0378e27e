"""
Common utilities for CLI commands.
"""

import click

from label_unsubscriber.config.credentials import get_credential_store
from label_unsubscriber.email_processor.unsubscribe.processors import AuditLog
from label_unsubscriber.email_processor.unsubscribe.types import RawMessage, Outcome


def get_password_for_account(email_address: str) -> str:
    """
    Get password for an account, checking the credential store first.

    Args:
        email_address: Email address to get password for

    Returns:
        Password (from store or prompted)
    """
    stored_password = get_credential_store().get_password(email_address)

    if stored_password:
        click.echo(f"Using stored credentials for {email_address}")
        return stored_password

    return click.prompt(f"Password for {email_address}", hide_input=True)


class ConsoleAuditLog(AuditLog):
    """Echo each outcome as one line on the terminal."""

    def record(self, message: RawMessage, outcome: Outcome) -> None:
        marker, color = ('✓', 'green') if outcome.succeeded else ('✗', 'red')
        click.secho(f"{marker} {outcome.summary}", fg=color, nl=False)
        click.echo(f" | {message.from_address} | {message.subject}")
        click.echo(f"    {outcome.location}")
