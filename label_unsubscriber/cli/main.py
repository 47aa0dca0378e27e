"""
Main CLI group for the label unsubscriber.

Integrates all commands into a single CLI application.
"""

import click
from label_unsubscriber.config import load_config_from_env_file
from .commands.password import password
from .commands.admin import init, show_config
from .commands.run import run, inspect
from .commands.history import history


@click.group()
@click.version_option(version='1.0.0', prog_name='Label Unsubscriber')
def cli():
    """
    Label Unsubscriber - Unsubscribe from every message you label.

    Label a message "Unsubscribe" in your mail client, then run this tool.
    It follows the List-Unsubscribe header (or a link in the body) and
    relabels the message as a success or a failure.
    """
    pass


cli.add_command(password, name='password')
cli.add_command(init, name='init')
cli.add_command(show_config, name='config')
cli.add_command(run, name='run')
cli.add_command(inspect, name='inspect')
cli.add_command(history, name='history')


def main():
    """Console script entry point: load .env, then dispatch."""
    load_config_from_env_file()
    cli()


if __name__ == '__main__':
    main()
