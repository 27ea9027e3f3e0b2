"""
Catalog commands for spex.

    spex catalog build      spex-catalog.yml -> spex-catalog-index.yml
    spex catalog discover   pick packages from the index into .spex/spex.yml
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from ..cli_utils import add_common_options, default_host, make_mirror_cache, standard_command
from ..config import CATALOG_INDEX_FILE_NAME
from ..domain.catalog import CatalogEntry
from ..progress import ProgressReporter, run_with_progress
from ..render import render_catalog_table
from ..services.catalog_service import CatalogBuildService
from ..services.discover_service import DiscoverService


@click.group('catalog')
def catalog_cmd():
    """Build and browse package catalogs."""
    pass


@catalog_cmd.command('build')
@add_common_options('verbose', 'debug', 'cache_dir')
@standard_command
def catalog_build(cache_dir: Optional[str], config: Dict[str, Any], progress: ProgressReporter):
    """
    Build spex-catalog-index.yml from spex-catalog.yml.

    Every listed package is mirrored, then named after the first heading
    of its README and stamped with its most recent commit time.
    """
    cache = make_mirror_cache(config, cache_dir)
    service = CatalogBuildService(cache, default_host=default_host(config))

    result = run_with_progress(service.build(Path.cwd()), progress)

    click.echo(f"OK catalog index written to {result.index_file_path} "
               f"({len(result.packages)} package(s))")


def resolve_catalog_index_path(catalog: Optional[str], config: Dict[str, Any]) -> Path:
    """--catalog, then catalog.index_path, then ./spex-catalog-index.yml."""
    if catalog:
        return Path(catalog).expanduser()
    configured = config.get('catalog', {}).get('index_path')
    if configured:
        return Path(str(configured)).expanduser()
    return Path.cwd() / CATALOG_INDEX_FILE_NAME


def parse_selection(answer: str, entries: List[CatalogEntry]) -> Optional[CatalogEntry]:
    """Map a 1-based answer to an entry; None for anything out of range."""
    answer = answer.strip()
    if not answer.isdigit():
        return None
    number = int(answer)
    if number < 1 or number > len(entries):
        return None
    return entries[number - 1]


@catalog_cmd.command('discover')
@click.option('--catalog', type=click.Path(dir_okay=False),
              help='Catalog index file (default: catalog.index_path or ./spex-catalog-index.yml)')
@add_common_options('verbose', 'debug')
@standard_command
def catalog_discover(catalog: Optional[str], config: Dict[str, Any], progress: ProgressReporter):
    """
    Pick catalog packages to import into this project.

    Lists the packages the project does not declare yet. Enter a number
    to add that package to .spex/spex.yml, or just press Enter to stop.
    """
    service = DiscoverService(Path.cwd(), resolve_catalog_index_path(catalog, config))
    state = run_with_progress(service.state(), progress)

    while state.available_entries:
        render_catalog_table(state.available_entries, title="Available packages")
        answer = click.prompt("Package number (Enter to finish)", default='', show_default=False)
        if not answer.strip():
            break

        entry = parse_selection(answer, state.available_entries)
        if entry is None:
            click.echo(f"Invalid selection: {answer}", err=True)
            continue

        state = run_with_progress(service.add_package(entry.id), progress)
        click.echo(f"OK added {entry.id}")

    if not state.available_entries:
        click.echo("All catalog packages are already imported.")
