"""
Logging for qwscatter programs.

All loggers live under the ``qwscatter`` hierarchy and are driven by the
``-q``/``-v`` flags of the command-line programs.  Two levels below
``DEBUG`` carry the bulk numerical output:

* ``DEBUG2`` (``-vv``): every node of the momentum tables
* ``DEBUG3`` (``-vvv``): the rate at every initial wavevector

Usage
-----
>>> from qwscatter.libqwscatter.logger import get_logger
>>> log = get_logger(__name__)
>>> log.info("Transition %s", "2211")
>>> log.debug2("A(%.4e) = %.6e", q, Aq)
"""

import logging
import sys

ROOT = "qwscatter"
FORMAT = "%(levelname)-7s: %(message)s"

DEBUG2 = 9
DEBUG3 = 8

logging.addLevelName(DEBUG2, "DEBUG2")
logging.addLevelName(DEBUG3, "DEBUG3")


class _ScatterLogger(logging.Logger):
    """Logger with ``debug2`` (table nodes) and ``debug3`` (rate curves) methods."""

    def debug2(self, msg, *args, **kwargs):
        if self.isEnabledFor(DEBUG2):
            self._log(DEBUG2, msg, args, **kwargs)

    def debug3(self, msg, *args, **kwargs):
        if self.isEnabledFor(DEBUG3):
            self._log(DEBUG3, msg, args, **kwargs)


logging.setLoggerClass(_ScatterLogger)

# Verbosity count -> level; 0 is ``-q``, 1 the default, each ``-v`` adds one
VERBOSITY_LEVEL_MAP = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
    3: DEBUG2,
    4: DEBUG3,
}


def verbosity(verbose=0, quiet=False):
    """Verbosity count for a number of ``-v`` flags, or 0 with ``-q``."""
    if quiet:
        return 0
    return min(1 + verbose, max(VERBOSITY_LEVEL_MAP))


def get_logger(name: str | None = None) -> _ScatterLogger:
    """Logger ``name`` (a module ``__name__``), or the ``qwscatter`` root."""
    return logging.getLogger(name or ROOT)


def set_level(level: int | str = logging.INFO) -> None:
    """
    Set the level of the ``qwscatter`` root logger.

    ``level`` is a verbosity count (see ``VERBOSITY_LEVEL_MAP``) or a
    standard logging level number or name.
    """
    if isinstance(level, int) and level in VERBOSITY_LEVEL_MAP:
        level = VERBOSITY_LEVEL_MAP[level]
    logging.getLogger(ROOT).setLevel(level)


def setup(level: int | str = logging.INFO, stream=None) -> None:
    """Attach one handler (stderr by default) to the root logger and set its level."""
    root = logging.getLogger(ROOT)
    if not root.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(FORMAT))
        root.addHandler(handler)
    set_level(level)
