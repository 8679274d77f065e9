#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>


from __future__ import annotations

import logging as logthings
import sys

LOGGER_NAME = "sysdig-provider"
VALID_LEVELS = ["FATAL", "CRITICAL", "ERROR", "WARNING", "WARN", "INFO", "DEBUG"]


class ProviderFormatter(logthings.Formatter):
    """Adds the source location to DEBUG records"""

    default_format = "%(asctime)s [%(levelname)8s] %(message)s"
    debug_format = "%(asctime)s [%(levelname)8s] (%(filename)s.%(lineno)d , %(funcName)s,) %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    def __init__(self):
        super().__init__(self.default_format, self.date_format)
        self.debug_formatter = logthings.Formatter(self.debug_format, self.date_format)

    def format(self, record) -> str:
        if record.levelno == logthings.DEBUG:
            return self.debug_formatter.format(record)
        return super().format(record)


class InfoFilter(logthings.Filter):
    """Keeps DEBUG and INFO records, for stdout"""

    def filter(self, rec):
        return rec.levelno in (logthings.DEBUG, logthings.INFO)


class ErrorFilter(logthings.Filter):
    """Keeps WARNING and above, for stderr"""

    def filter(self, rec):
        return rec.levelno not in (logthings.DEBUG, logthings.INFO)


def setup_logging():
    """
    Sets the provider logger, sending DEBUG/INFO to stdout and the rest to stderr.
    """
    app_logger = logthings.getLogger(LOGGER_NAME)
    for h in list(app_logger.handlers):
        app_logger.removeHandler(h)

    stdout_handler = logthings.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(ProviderFormatter())
    stdout_handler.setLevel(logthings.INFO)
    stdout_handler.addFilter(InfoFilter())

    stderr_handler = logthings.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(ProviderFormatter())
    stderr_handler.setLevel(logthings.WARNING)
    stderr_handler.addFilter(ErrorFilter())

    app_logger.addHandler(stdout_handler)
    app_logger.addHandler(stderr_handler)
    app_logger.setLevel(logthings.INFO)
    return app_logger


def set_log_level(level: str) -> None:
    """
    Changes the logger and stdout handler level.

    :param str level: one of VALID_LEVELS, case insensitive
    :raises ValueError: when the level is not a known one
    """
    if level.upper() not in VALID_LEVELS:
        raise ValueError(
            f"Log level value {level} is invalid. Must be one of {VALID_LEVELS}"
        )
    numeric_level = logthings.getLevelName(level.upper())
    LOG.setLevel(numeric_level)
    LOG.handlers[0].setLevel(numeric_level)


LOG = setup_logging()
