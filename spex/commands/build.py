"""
Build command for spex.

Validates the project, writes AGENTS.md and imports every package
declared in .spex/spex.yml.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import click

from ..cli_utils import add_common_options, default_host, make_mirror_cache, standard_command
from ..progress import ProgressReporter, run_with_progress
from ..services.build_service import BuildService
from ..services.import_service import ImportService


@click.command('build')
@add_common_options('verbose', 'debug', 'cache_dir')
@standard_command
def build_handler(cache_dir: Optional[str], config: Dict[str, Any], progress: ProgressReporter):
    """
    Build spex in the current directory.

    Packages listed under ``packages`` in .spex/spex.yml are mirrored into
    the cache and copied to .spex/imports/HOST/NAMESPACE/NAME, replacing
    any previous import. The first failing package stops the build.

    Examples:

        spex build
        spex build -v --cache-dir /tmp/spex-cache
    """
    cache = make_mirror_cache(config, cache_dir)
    service = BuildService(ImportService(cache), default_host=default_host(config))

    result = run_with_progress(service.build(Path.cwd()), progress)

    count = len(result.imported_packages)
    click.echo(f"OK spex build complete ({count} package(s) imported)")
    for imported in result.imported_packages:
        click.echo(f"  {imported.package_id} -> {imported.target_path}")
