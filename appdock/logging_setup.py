"""CLI logging setup: simple %(message)s format for standalone commands."""

import logging
import sys

from appdock.redact import SecretRedactingFilter


def setup_cli_logging(level=logging.INFO):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(). The redacting filter sits on the
    handler so records propagated from module loggers are covered too.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
    # httpx logs every request at INFO; keep CLI output to our own messages
    logging.getLogger("httpx").setLevel(logging.WARNING)
