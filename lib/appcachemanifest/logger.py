#!/usr/bin/env python
#
# Copyright (c) 2024-2025, Ryan Galloway (ryan@rsgalloway.com)
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#  - Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
#  - Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
#  - Neither the name of the software nor the names of its contributors
#    may be used to endorse or promote products derived from this software
#    without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.
#

__doc__ = """
Contains logging functions and classes.
"""

import os
import logging
from logging.handlers import RotatingFileHandler

from appcachemanifest import config

log = logging.Logger(config.LOG_NAME)

# python's logging module raises ValueErrors on numeric level strings
LOG_LEVEL_MAP = {
    0: "NOTSET",
    10: "DEBUG",
    20: "INFO",
    30: "WARNING",
    40: "ERROR",
    50: "CRITICAL",
}
VALID_LOG_LEVELS = LOG_LEVEL_MAP.values()


def get_log_level(level=config.LOG_LEVEL) -> str:
    """Returns a valid log level name for a level name or number, falling
    back to the default level.

    :param level: log level name or number.
    :return: log level name.
    """
    if isinstance(level, int):
        return LOG_LEVEL_MAP.get(level, config.LOG_LEVEL_DEFAULT)
    elif isinstance(level, str) and level.isdigit():
        return LOG_LEVEL_MAP.get(int(level), config.LOG_LEVEL_DEFAULT)
    elif isinstance(level, str) and level.upper() in VALID_LOG_LEVELS:
        return level.upper()
    return config.LOG_LEVEL_DEFAULT


LOG_LEVEL = get_log_level()

log.setLevel(LOG_LEVEL)
log.addHandler(logging.NullHandler())


class DryRunFilter(logging.Filter):
    """Filter that removes log records when in dry run mode."""

    def __init__(self, dryrun: bool = False):
        """Initialize the filter.

        :param dryrun: dry run flag.
        """
        super().__init__()
        self.dryrun = dryrun

    def filter(self, record: logging.LogRecord):
        return not self.dryrun


def _remove_handlers(kind: str) -> None:
    """Removes previously added handlers of a given kind."""
    for h in list(log.handlers):
        if h.name == log.name and kind in type(h).__name__:
            log.removeHandler(h)


def setup_stream_handler(level: str = LOG_LEVEL):
    """Adds a new stderr stream handler, replacing any previous one.

    :param level: log level.
    :return: handler.
    """
    _remove_handlers("StreamHandler")

    handler = logging.StreamHandler()
    handler.set_name(log.name)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    log.addHandler(handler)
    return handler


def setup_file_handler(
    maxBytes: int = config.LOG_MAX_BYTES,
    backupCount: int = config.LOG_BACKUP_COUNT,
    level: str = LOG_LEVEL,
    logdir: str = config.LOG_DIR,
    dryrun: bool = False,
):
    """Adds a new rotating file handler, replacing any previous one.

    :param maxBytes: max bytes per file.
    :param backupCount: number of backup files.
    :param level: log level.
    :param logdir: directory to store the log files.
    :param dryrun: dry run flag.
    :return: handler.
    """
    _remove_handlers("RotatingFileHandler")

    os.makedirs(logdir, exist_ok=True)
    log_file = os.path.join(logdir, f"{config.LOG_NAME}.log")

    handler = RotatingFileHandler(
        log_file, maxBytes=maxBytes, backupCount=backupCount
    )
    handler.set_name(log.name)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    handler.addFilter(DryRunFilter(dryrun))

    log.addHandler(handler)
    return handler


def setup_logging(dryrun: bool = False, verbose: bool = False):
    """Setup log handlers.

    :param dryrun: dry run flag, disables the log file.
    :param verbose: log debug messages to the console.
    """
    setup_stream_handler(level="DEBUG" if verbose else LOG_LEVEL)
    if verbose:
        log.setLevel("DEBUG")

    if not dryrun:
        try:
            setup_file_handler()
        except Exception as err:
            print("Error: %s" % str(err))
