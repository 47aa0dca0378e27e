"""
Unsubscribe commands for the label unsubscriber.

Handles processing the pending label once, and inspecting a saved message.
"""

from pathlib import Path

import click

from label_unsubscriber.cli_session import get_cli_session_manager
from label_unsubscriber.config import Config
from label_unsubscriber.database.audit_log import DatabaseAuditLog, CompositeAuditLog
from label_unsubscriber.email_processor.imap_client import IMAPConnection
from label_unsubscriber.email_processor.mailbox import ImapMailbox
from label_unsubscriber.email_processor.messages import parse_raw_message
from label_unsubscriber.email_processor.unsubscribe.logging import configure_unsubscribe_logging
from label_unsubscriber.email_processor.unsubscribe.outcomes import describe_action
from label_unsubscriber.email_processor.unsubscribe.processors import (
    ActionResolver, ThreadProcessor, BatchRunner
)
from label_unsubscriber.unsubscribe_executor import (
    ActionExecutor, RequestsHttpTransport, SmtpEmailTransport, DryRunTransport
)
from ..utils import get_password_for_account, ConsoleAuditLog


def build_executor(email_address: str, password: str, dry_run: bool = False) -> ActionExecutor:
    """Wire the executor to real transports, or to a recorder for dry runs."""
    if dry_run:
        transport = DryRunTransport()
        return ActionExecutor(http_request=transport.request, send_email=transport.send)

    http = RequestsHttpTransport(
        timeout=Config.REQUEST_TIMEOUT,
        user_agent=Config.USER_AGENT,
        raise_for_status=Config.REQUIRE_2XX
    )
    smtp = SmtpEmailTransport(
        from_address=email_address,
        password=password,
        smtp_host=Config.SMTP_SERVER,
        smtp_port=Config.SMTP_PORT,
        timeout=Config.SMTP_TIMEOUT
    )
    return ActionExecutor(http_request=http.request, send_email=smtp.send)


@click.command('run')
@click.option('--email', 'email_address', help='Mailbox address (defaults to EMAIL_ADDRESS)')
@click.option('--limit', type=int, help='Maximum number of messages to process')
@click.option('--dry-run', is_flag=True, help='Show what would happen without sending or relabeling')
@click.option('--log-level', help='Log level (defaults to LOG_LEVEL)')
def run(email_address, limit, dry_run, log_level):
    """
    Unsubscribe from every message carrying the pending label.

    Each message ends up with the success or failure label and one row in
    the audit log. A failing message never stops the run.

    Example:
        label-unsubscriber run --email user@gmail.com
        label-unsubscriber run --email user@gmail.com --dry-run --limit 5
    """
    email_address = email_address or Config.EMAIL_ADDRESS
    if not email_address:
        click.secho("✗ Error: No mailbox address given (use --email or EMAIL_ADDRESS)", fg='red')
        raise click.Abort()

    configure_unsubscribe_logging(level=log_level or Config.LOG_LEVEL, format=Config.LOG_FORMAT)
    labels = Config.labels()

    try:
        password = get_password_for_account(email_address)
    except Exception as e:
        click.secho(f"✗ Error getting password: {e}", fg='red')
        raise click.Abort()

    connection = IMAPConnection(Config.IMAP_SERVER, Config.IMAP_PORT, Config.IMAP_USE_SSL)
    if not connection.connect(email_address, password):
        click.secho(f"✗ Error: Could not log in to {Config.IMAP_SERVER} as {email_address}", fg='red')
        raise click.Abort()

    executor = build_executor(email_address, password, dry_run=dry_run)
    mailbox = ImapMailbox(connection, labels, dry_run=dry_run, permalink_template=Config.PERMALINK_TEMPLATE)

    if dry_run:
        click.echo("\n[DRY RUN] No requests, emails or label changes will be made.")
    click.echo(f"\nProcessing messages labeled \"{labels.pending}\" in {email_address}...\n")

    session_manager = get_cli_session_manager()

    with session_manager.get_session() as session:
        if dry_run:
            audit_log = ConsoleAuditLog()
        else:
            audit_log = CompositeAuditLog(DatabaseAuditLog(session), ConsoleAuditLog())

        processor = ThreadProcessor(ActionResolver(), executor, mailbox, audit_log)

        try:
            with mailbox:
                result = BatchRunner(processor).run(mailbox.pending_messages(limit))
        except Exception as e:
            click.secho(f"✗ Run failed: {e}", fg='red')
            raise click.Abort()

    click.echo()
    if result.processed == 0:
        click.echo("No messages waiting.")
        return

    click.secho(f"✓ Run complete: {result.processed} message(s) processed", fg='green')
    click.echo(f"  Succeeded: {result.succeeded}")
    click.echo(f"  Failed: {result.failed}")
    if result.errors:
        click.echo(f"  Errors: {result.error_count}")

    stats = processor.logger.get_operation_stats()
    if stats:
        click.echo("  By action:")
        for kind, counts in sorted(stats.items()):
            click.echo(f"    {kind}: {counts['success']}/{counts['total']} succeeded")


@click.command('inspect')
@click.argument('message_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(message_file):
    """
    Show the unsubscribe actions found in a saved .eml message.

    Nothing is executed.

    Example:
        label-unsubscriber inspect newsletter.eml
    """
    message = parse_raw_message(message_file.read_bytes(), key=message_file.name)
    resolver = ActionResolver()
    ranked = resolver.resolve(message)

    click.echo(f"\nFrom:    {message.from_address}")
    click.echo(f"Subject: {message.subject}")

    if not ranked:
        click.secho("\n✗ No unsubscribe action found", fg='yellow')
        return

    click.echo(f"\nCandidate actions ({len(ranked)}):")
    for position, action in enumerate(ranked, start=1):
        priority = resolver.ranker.priority(action)
        click.echo(f"  {position}. [{priority:g}] {action.kind:<9} {action.target}")

    attempt = describe_action(ranked[0])
    click.secho(f"\nWould attempt unsubscribe {attempt.channel}:", fg='green')
    click.echo(f"  {attempt.location}")
