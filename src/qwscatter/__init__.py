"""
qwscatter: carrier-carrier scattering in semiconductor quantum wells.

This package computes Coulomb (carrier-carrier) scattering rates between the
subbands of a layered heterostructure as a function of carrier energy,
including static screening, together with the density-of-states helpers used
to describe the carrier populations.
"""

# Import main sub-packages
from . import libqwscatter
from . import srcc

__all__ = [
    "libqwscatter",
    "srcc",
]
