"""
Audit log commands for the label unsubscriber.
"""

import click

from label_unsubscriber.cli_session import get_cli_session_manager
from label_unsubscriber.database.audit_log import DatabaseAuditLog


@click.command('history')
@click.option('--limit', type=int, default=20, show_default=True, help='Number of entries to show')
@click.option('--failed', 'failed_only', is_flag=True, help='Only show failed unsubscribes')
def history(limit, failed_only):
    """
    Show recent unsubscribe outcomes, newest first.

    Example:
        label-unsubscriber history
        label-unsubscriber history --failed --limit 50
    """
    session_manager = get_cli_session_manager()

    with session_manager.get_session() as session:
        entries = DatabaseAuditLog(session).recent(limit=limit, failed_only=failed_only)

        if not entries:
            click.echo("No audit log entries.")
            return

        click.echo(f"\nLast {len(entries)} outcome(s):\n")
        for entry in entries:
            marker, color = ('✓', 'green') if entry.succeeded else ('✗', 'red')
            timestamp = entry.created_at.strftime('%Y-%m-%d %H:%M') if entry.created_at else '-'
            click.secho(f"{marker} {timestamp}  {entry.status}", fg=color)
            click.echo(f"    From:    {entry.from_address}")
            click.echo(f"    Subject: {entry.subject}")
            click.echo(f"    Target:  {entry.location}")
            if entry.view_link:
                click.echo(f"    View:    {entry.view_link}")
