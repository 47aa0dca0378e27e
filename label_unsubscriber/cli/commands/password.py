"""
Mailbox password commands.

The stored app password is used for both the IMAP login and the SMTP login
that sends mailto: unsubscribe requests.
"""

import click

from label_unsubscriber.config import Config
from label_unsubscriber.config.credentials import get_credential_store
from label_unsubscriber.email_processor.imap_client import IMAPConnection


@click.group()
def password():
    """Manage stored mailbox passwords."""
    pass


@password.command('store')
@click.argument('email_address')
@click.option('--verify', is_flag=True, help='Log in to the IMAP server before saving')
def store_password(email_address, verify):
    """
    Save the app password for a mailbox.

    Example:
        label-unsubscriber password store user@gmail.com --verify
    """
    secret = click.prompt('Password', hide_input=True, confirmation_prompt=True)

    if verify:
        connection = IMAPConnection(Config.IMAP_SERVER, Config.IMAP_PORT, Config.IMAP_USE_SSL)
        if not connection.connect(email_address, secret):
            click.secho(f"✗ Login to {Config.IMAP_SERVER} failed; password not saved", fg='red')
            raise click.Abort()
        connection.disconnect()
        click.secho(f"✓ Logged in to {Config.IMAP_SERVER}", fg='green')

    store = get_credential_store()
    store.set_password(email_address, secret)

    click.secho(f"✓ Password stored for {email_address}", fg='green')
    click.echo(f"Credential file: {store.store_path}")


@password.command('remove')
@click.argument('email_address')
@click.option('--force', '-f', is_flag=True, help='Do not ask for confirmation')
def remove_password(email_address, force):
    """
    Forget the stored password for a mailbox.

    Example:
        label-unsubscriber password remove user@gmail.com
    """
    store = get_credential_store()

    if not store.has_password(email_address):
        click.secho(f"✗ No stored password for {email_address}", fg='yellow')
        return

    if not force and not click.confirm(f"Forget the password for {email_address}?"):
        click.echo("Cancelled.")
        raise click.Abort()

    store.remove_password(email_address)
    click.secho(f"✓ Password removed for {email_address}", fg='green')


@password.command('list')
def list_passwords():
    """
    Show which mailboxes have a stored password.

    Example:
        label-unsubscriber password list
    """
    store = get_credential_store()
    mailboxes = store.list_stored_emails()

    if not mailboxes:
        click.echo("No stored passwords.")
        return

    noun = "account" if len(mailboxes) == 1 else "accounts"
    click.echo(f"\nStored passwords for {len(mailboxes)} {noun}:")
    for mailbox in mailboxes:
        updated_at = store.updated_at(mailbox)
        click.echo(f"  - {mailbox} (updated {updated_at})" if updated_at else f"  - {mailbox}")
    click.echo()
