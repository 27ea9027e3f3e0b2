#!/usr/bin/env python3

import click

from spex import __version__
from spex.commands.build import build_handler
from spex.commands.catalog import catalog_cmd
from spex.commands.config import config_cmd
from spex.commands.validate import validate_handler
from spex.commands.version import version_handler


@click.group()
@click.version_option(version=__version__, prog_name='spex')
def cli():
    """spex - Import shared specification packages into your project.

    Projects keep their own specifications under spex/ and declare
    external packages in .spex/spex.yml. `spex build` pulls those packages
    into .spex/imports and writes AGENTS.md for coding assistants.
    """
    pass


cli.add_command(version_handler, name='version')
cli.add_command(validate_handler, name='validate')
cli.add_command(build_handler, name='build')
cli.add_command(catalog_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
