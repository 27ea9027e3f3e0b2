"""
Standard exit codes and error taxonomy for spex commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import List, Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Build file, catalog or configuration error
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Clone/fetch or other remote operation failed
DATA_ERROR = 70          # Data format or validation error
MISSING_CONTENT = 72     # Package has nothing to import
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'YAMLError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class SpexError(CommandError):
    """Base class for every error raised by the package engine."""


class IdentifierFormatError(SpexError):
    """Raised when a package identifier is malformed or carries unsafe characters."""
    def __init__(self, raw: str, reason: str):
        super().__init__(f"{reason}: {raw}", DATA_ERROR)
        self.raw = raw
        self.reason = reason


class MissingRemoteContentError(SpexError):
    """Raised when a resolved package has no specification root to export."""
    def __init__(self, clone_url: str, directory: str = "spex"):
        super().__init__(
            f"Missing {directory} directory in downloaded package: {clone_url}",
            MISSING_CONTENT,
        )
        self.clone_url = clone_url
        self.directory = directory


class RemoteOperationError(SpexError):
    """
    Raised when a clone, fetch, checkout, log or copy step fails.

    ``details`` carries the captured output of the failing process, if any.
    """
    def __init__(self, message: str, clone_url: Optional[str] = None, details: str = ""):
        full_message = f"{message} {details}".strip() if details else message
        super().__init__(full_message, NETWORK_ERROR)
        self.clone_url = clone_url
        self.details = details


class CatalogFormatError(SpexError):
    """Raised when a catalog, catalog index or build file has the wrong shape."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class ValidationError(SpexError):
    """Raised with every violated structural rule of a project."""
    def __init__(self, issues: List[str]):
        super().__init__("Spex structure validation failed.", DATA_ERROR)
        self.issues = list(issues)
