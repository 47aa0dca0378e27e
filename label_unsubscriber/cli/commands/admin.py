"""
Admin commands for the label unsubscriber.

Handles database initialization and showing the effective settings.
"""

import click
from label_unsubscriber.config import Config
from label_unsubscriber.database import init_database


@click.command('init')
def init():
    """
    Initialize the audit log database.

    Example:
        label-unsubscriber init
    """
    try:
        db_manager = init_database()
        click.secho("✓ Database initialized successfully", fg='green')
        click.echo(f"Database location: {db_manager.database_url}")
    except Exception as e:
        click.secho(f"✗ Error initializing database: {e}", fg='red')
        raise click.Abort()


@click.command('config')
def show_config():
    """
    Show the labels, servers and storage locations in effect.

    Example:
        label-unsubscriber config
    """
    labels = Config.labels()

    click.echo("\nLabels:")
    click.echo(f"  Unsubscribe threads labeled: {labels.pending}")
    click.echo(f"  On success, label:           {labels.success}")
    click.echo(f"  On fail, label:              {labels.failure}")

    click.echo("\nMailbox:")
    click.echo(f"  Account: {Config.EMAIL_ADDRESS or '(not set)'}")
    click.echo(f"  IMAP:    {Config.IMAP_SERVER}:{Config.IMAP_PORT}")
    click.echo(f"  SMTP:    {Config.SMTP_SERVER}:{Config.SMTP_PORT}")

    click.echo("\nStorage:")
    click.echo(f"  Database:    {Config.get_database_path()}")
    click.echo(f"  Credentials: {Config.get_credential_store_path()}")
    click.echo()
