"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Optional

import click

from .config import get_cache_directory, load_config
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError, ValidationError
)
from .infra.git_client import GitClient
from .infra.mirror_cache import MirrorCache
from .progress import get_progress

logger = logging.getLogger(__name__)


def configure_logging(debug: bool, config: Dict[str, Any]) -> None:
    """Set up root logging from ``--debug`` or the ``logging`` config section."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            force=True,
        )
        return

    logging_config = config.get('logging', {})
    level = str(logging_config.get('level', 'WARNING')).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=logging_config.get('format', '%(levelname)s: %(message)s'),
    )


def default_host(config: Dict[str, Any]) -> str:
    return config.get('general', {}).get('default_host') or 'github.com'


def make_mirror_cache(config: Dict[str, Any], cache_dir: Optional[str] = None) -> MirrorCache:
    """Mirror cache configured from ``git`` and ``general`` settings."""
    git_config = config.get('git', {})
    git = GitClient(
        executable=git_config.get('executable') or 'git',
        timeout=git_config.get('timeout_seconds') or None,
    )
    root = Path(cache_dir).expanduser().resolve() if cache_dir else get_cache_directory(config)
    logger.debug(f"Mirror cache at {root}")
    return MirrorCache(root, git=git)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Configuration loaded once and injected as ``config``
    - Logging configured from --debug or configuration
    - Progress reporting on stderr, injected as ``progress``
    - Consistent error handling with specific exit codes
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.pop('verbose', False)
        debug = kwargs.pop('debug', False)

        progress = get_progress(enabled=verbose or None, show_debug=debug)

        try:
            config = load_config()
            configure_logging(debug, config)

            kwargs['config'] = config
            kwargs['progress'] = progress
            func(*args, **kwargs)

            # Successful completion
            sys.exit(SUCCESS)

        except (KeyboardInterrupt, click.Abort):
            # Ctrl-C, or end of input at a prompt
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except ValidationError as e:
            progress.error(str(e))
            for issue in e.issues:
                click.echo(f"  - {issue}", err=True)
            sys.exit(e.exit_code)
        except CommandError as e:
            # Our custom command errors with specific exit codes
            progress.error(str(e))
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Unhandled error", exc_info=True)
            progress.error(f"Command failed: {e}")
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Force progress output even when piped'),
    'debug': click.option('--debug', is_flag=True, help='Enable debug logging'),
    'cache_dir': click.option('--cache-dir', type=click.Path(file_okay=False),
                              help='Mirror cache root (default: general.cache_directory)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'debug')
        def my_command(verbose, debug):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
