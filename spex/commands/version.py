import click

from .. import __version__


@click.command('version')
def version_handler():
    """Print the current spex version."""
    click.echo(f"OK version {__version__}")
