"""
Validate command for spex.
"""

from pathlib import Path
from typing import Any, Dict

import click

from ..cli_utils import add_common_options, standard_command
from ..progress import ProgressReporter
from ..render import render_validation_table
from ..services.validation_service import ValidationService


@click.command('validate')
@click.option('--pretty', is_flag=True, help='Display validated types as a table')
@add_common_options('verbose', 'debug')
@standard_command
def validate_handler(pretty: bool, config: Dict[str, Any], progress: ProgressReporter):
    """Validate spex structure in the current directory."""
    progress(f"Checking {Path.cwd()}")

    result = ValidationService().validate(Path.cwd())

    if pretty:
        render_validation_table(result)
    click.echo(f"OK valid spex structure ({', '.join(result.type_names)})")
