"""
Exit codes and typed errors for axq commands.

The core modules never raise for "nothing matched"; they return None or an
empty list. Commands turn that absence into one of the errors below, and the
CLI maps each error to its exit code.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    NOT_FOUND = 1
    APP_NOT_FOUND = 2
    TIMEOUT = 3
    PERMISSION_DENIED = 4
    INVALID_ARGUMENTS = 5


class AXQueryError(Exception):
    """Base class for every outcome that is not a success."""
    exit_code = ExitCode.NOT_FOUND
    default_message = "Element not found"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(AXQueryError):
    pass


class ContainerNotFound(NotFound):
    """A window, menu bar, menu segment or outline could not be resolved."""
    default_message = "Container not found"


class AppNotFound(AXQueryError):
    exit_code = ExitCode.APP_NOT_FOUND
    default_message = "App not found"


class WaitTimeout(AXQueryError):
    exit_code = ExitCode.TIMEOUT
    default_message = "Timeout"


class PermissionDenied(AXQueryError):
    exit_code = ExitCode.PERMISSION_DENIED
    default_message = "Accessibility permission denied"


class ProviderUnavailable(PermissionDenied):
    """pyobjc / Quartz bindings could not be imported (not macOS, or not installed)."""
    default_message = "Accessibility API unavailable (requires macOS and pyobjc)"


class InvalidArguments(AXQueryError):
    exit_code = ExitCode.INVALID_ARGUMENTS
    default_message = "Invalid arguments"


class InvalidPredicate(InvalidArguments):
    default_message = "Invalid query"


class InvalidAddress(InvalidArguments):
    default_message = "Invalid element id"


class EncodingFailure(AXQueryError):
    """Raised by the JSON encoder; output turns it into an error document."""
    default_message = "Failed to encode JSON"
