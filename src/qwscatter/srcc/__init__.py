"""srcc sub-package for carrier-carrier scattering rate calculations."""

# Import modules themselves (allows: from qwscatter.srcc import ccrate)
from . import ccrate
from . import errors
from . import fileio
from . import formfactor
from . import lookup
from . import screening
from . import srccprog
from . import subband

__all__ = [
    "ccrate",
    "errors",
    "fileio",
    "formfactor",
    "lookup",
    "screening",
    "srccprog",
    "subband",
]
