"""Debug logging functions
"""

import argparse
import logging
import os
import shlex
import sys
from typing import Optional


# syslog priority for the highest Python logging level at or above each one
SYSLOG_LEVELS = [
    (logging.DEBUG, 7),     # KERN_DEBUG
    (logging.INFO, 6),      # KERN_INFO
    # Nothing maps to syslog level 5 (KERN_NOTICE)
    (logging.WARNING, 4),   # KERN_WARNING
    (logging.ERROR, 3),     # KERN_ERR
    (logging.CRITICAL, 2),  # KERN_CRIT
]


def calling_program() -> str:
    "Return the name of the program that started us"
    return os.path.basename(sys.argv[0])


def logging_level_to_syslog(level: int) -> int:
    "Converts a logging level into a syslog-compatible one"
    for limit, priority in SYSLOG_LEVELS:
        if level <= limit:
            return priority
    return 1  # KERN_ALERT


class SyslogFormatter(logging.Formatter):
    "Formats log messages with a syslog-style level prefix"

    def __init__(self, fmt: str):
        super().__init__()
        self.base_format = fmt

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        self._style._fmt = f'<{logging_level_to_syslog(record.levelno)}>' + self.base_format
        return super().format(record)


def setup(args: argparse.Namespace, program: Optional[str] = None):
    """Set up the logging subsystem in a consistent way.

    program defaults to the program invoking this run.
    Log messages go to stderr so they don't mix with results written to stdout.
    """
    if not program:
        program = shlex.quote(calling_program())
    # Escape percents to pass through format()
    program = program.replace('%', '%%')
    if args.debug:
        fmt = program + ' %(levelno)s %(filename)s: %(message)s'
        level = logging.DEBUG
    elif args.verbose:
        fmt = program + ' %(filename)s: %(message)s'
        level = logging.INFO
    else:
        fmt = '%(filename)s: %(message)s'
        level = logging.WARNING
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)
    if args.level_prefix:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(SyslogFormatter(fmt))
