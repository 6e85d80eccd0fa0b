import logging
import sys
from functools import wraps

import click

from datalyr.constants import EXIT_CODE_FAILURE
from datalyr.errors import DatalyrError

LOG = logging.getLogger(__name__)


def output_exception(exception: Exception, exit_code: int = EXIT_CODE_FAILURE) -> None:
    """
    Output an exception message to stderr and exit.

    Args:
        exception (Exception): The exception to output.
        exit_code (int): The exit code of the process.
    """
    click.secho(str(exception), fg="red", file=sys.stderr)
    sys.exit(exit_code)


def handle_cmd_exception(func):
    """
    Decorator turning client errors raised by a command into a clean exit.

    Args:
        func: The command function to wrap.

    Returns:
        The wrapped function.
    """

    @wraps(func)
    def inner(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except DatalyrError as e:
            LOG.debug("Expected DatalyrError happened: %s", e, exc_info=True)
            output_exception(e)

    return inner
