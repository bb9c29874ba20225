# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging configuration for pylsa processing runs

Library modules take a child of the ``pylsa`` logger via ``get_logger`` and
never attach handlers themselves; applications call ``setup_logger`` once.
"""

import copy
import logging
import sys
from typing import Optional

ROOT_LOGGER = "pylsa"

# Per-epoch dumps of the estimated state, below DEBUG
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def _trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = _trace

_LEVELS = {
    'TRACE': TRACE,
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _level_value(level: str) -> int:
    try:
        return _LEVELS[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None


class ColoredFormatter(logging.Formatter):
    """Console formatter that colours the level name"""

    COLORS = {
        'TRACE': '\033[36m',
        'DEBUG': '\033[34m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        # Other handlers share the record and must see the plain level name
        record = copy.copy(record)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logger(name: str = ROOT_LOGGER,
                 level: str = "INFO",
                 log_file: Optional[str] = None,
                 console: bool = True) -> logging.Logger:
    """
    Attach console and/or file handlers to a logger

    Parameters:
    -----------
    name : str
        Logger name; ``pylsa.gnss.batch`` and the other module loggers
        propagate to the default ``pylsa``
    level : str
        TRACE, DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive)
    log_file : Optional[str]
        Also write plain-text records to this file
    console : bool
        Write coloured records to stdout

    Returns:
    --------
    logging.Logger
        The configured logger; handlers from an earlier call are closed
    """
    value = _level_value(level)
    logger = logging.getLogger(name)
    logger.setLevel(value)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = []
    if console:
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(ColoredFormatter(_FORMAT, datefmt='%H:%M:%S'))
        handlers.append(stream)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(value)
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger, e.g. ``get_logger(__name__)``"""
    return logging.getLogger(name)
