"""libqwscatter sub-package for logging and general-purpose physics helpers."""

# Import modules themselves (allows: from qwscatter.libqwscatter import dos)
from . import dos
from . import logger

__all__ = [
    "dos",
    "logger",
]
