"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer

from devban_board.services.team_service import InviteCodeError, LicenseError, NoTeamError
from devban_board.utils.exit_codes import (
    ERROR_AUTH_FAILURE,
    ERROR_INVALID_ARGS,
    exit_code_for,
    get_exit_code_name,
)
from devban_board.utils.logger import get_logger
from devban_board.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


def command_wrapper(_func: Callable | None = None):
    """Run sync or async commands with logging and uniform error exits."""

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(__name__)
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if inspect.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                logger.info(
                    "command completed: %s (%.3fs)", cmd, time.monotonic() - start
                )
                return result

            except AppError as e:
                logger.error(
                    "command failed: %s (%.3fs) %s - %s",
                    cmd,
                    time.monotonic() - start,
                    get_exit_code_name(e.exit_code),
                    str(e),
                )
                format_error(str(e))
                raise typer.Exit(code=e.exit_code) from e

            except (NoTeamError, InviteCodeError, LicenseError) as e:
                code = ERROR_AUTH_FAILURE if isinstance(e, NoTeamError) else ERROR_INVALID_ARGS
                logger.error(
                    "command rejected: %s %s - %s", cmd, get_exit_code_name(code), str(e)
                )
                format_error(str(e))
                raise typer.Exit(code=code) from e

            except typer.Exit:
                raise

            except KeyboardInterrupt:
                logger.info("command interrupted: %s", cmd)
                raise typer.Exit(code=130)

            except Exception as e:
                code = exit_code_for(e)
                logger.error(
                    "command failed: %s (%.3fs) %s - %s\n%s",
                    cmd,
                    time.monotonic() - start,
                    get_exit_code_name(code),
                    str(e),
                    traceback.format_exc(),
                )
                format_error(str(e))
                raise typer.Exit(code=code) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
