"""
Exit codes for the devban CLI.

Semantic exit codes so scripts can tell a missing task from a network fault.
"""

import httpx

from devban_board.repositories.repository import (
    AlreadyExistsError,
    NotFoundError,
    PermissionDeniedError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# No signed-in user or no team membership
ERROR_AUTH_FAILURE = 3

# Network or store error (unreachable, timeout, 5xx)
ERROR_NETWORK = 4

# Document not found
ERROR_NOT_FOUND = 5

# Permission denied by the store
ERROR_PERMISSION_DENIED = 6

# Document already exists
ERROR_CONFLICT = 7


_NAMES = {
    SUCCESS: "SUCCESS",
    ERROR_GENERAL: "ERROR_GENERAL",
    ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
    ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
    ERROR_NETWORK: "ERROR_NETWORK",
    ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
    ERROR_PERMISSION_DENIED: "ERROR_PERMISSION_DENIED",
    ERROR_CONFLICT: "ERROR_CONFLICT",
}


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    return _NAMES.get(code, f"UNKNOWN({code})")


def exit_code_for(error: BaseException) -> int:
    """Map an exception raised by a command to its exit code."""
    if isinstance(error, NotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, AlreadyExistsError):
        return ERROR_CONFLICT
    if isinstance(error, PermissionDeniedError):
        return ERROR_PERMISSION_DENIED
    if isinstance(error, (httpx.HTTPError, ConnectionError, TimeoutError)):
        return ERROR_NETWORK
    if isinstance(error, ValueError):
        return ERROR_INVALID_ARGS
    return ERROR_GENERAL
