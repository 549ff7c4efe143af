"""
Flat-file input and output for the carrier-carrier scattering program.

All files are whitespace-delimited text tables read from (and written to) a
single working directory:

================  ==================================================
``E<p>.r``        subband index, band-edge energy [meV]
``wf_<p><n>.r``   z [m], psi(z) [m^-1/2] for subband n (1-based)
``Ef.r``          subband index, quasi-Fermi energy [meV]
``N.r``           subband index, population [10^10 cm^-2]
``v.r``           z [m], potential [J]
``rr.r``          i j f g transition rows (1-based)
``cc<ijfg>.r``    energy [meV], rate [1/s]
``ccABCD.r``      i j f g mean rate [1/s]
``A<ijfg>.r``     q W, A(q)^2
================  ==================================================
"""

import os

import numpy as np
from scipy.constants import e as e0

from qwscatter.libqwscatter.logger import get_logger
from .subband import Subband

log = get_logger(__name__)

meV = 1e-3 * e0
# 10^10 cm^-2 -> m^-2
POP_UNIT = 1e10 * 1e4


def read_table(filename, ncols=2, dtype=np.float64):
    """
    Read a whitespace-delimited table and return its columns.

    Parameters
    ----------
    filename : str or path-like
        File to read
    ncols : int
        Number of columns expected
    dtype : data-type
        Type of the returned columns

    Returns
    -------
    tuple of ndarray
        One 1D array per column
    """
    data = np.loadtxt(filename, dtype=dtype, ndmin=2)
    if data.shape[1] != ncols:
        raise ValueError(
            f"{filename}: expected {ncols} columns, found {data.shape[1]}"
        )
    return tuple(data[:, c].copy() for c in range(ncols))


def read_subbands(particle, m, directory="."):
    """
    Load all subbands of a particle from ``E<p>.r`` and ``wf_<p><n>.r``.

    Parameters
    ----------
    particle : str
        Particle ID ('e', 'h' or 'l')
    m : float
        Effective mass (kg)
    directory : str, optional
        Directory holding the input files

    Returns
    -------
    list of Subband
        Subbands in file order (subband n is element n-1)
    """
    _, E = read_table(os.path.join(directory, f"E{particle}.r"))
    E = E * meV

    subbands = []
    for n, En in enumerate(E, start=1):
        z, psi = read_table(os.path.join(directory, f"wf_{particle}{n}.r"))
        subbands.append(Subband(En, z, psi, m))

    log.info("Read %d %s-subbands from %s", len(subbands), particle, directory)
    return subbands


def read_distributions(subbands, directory="."):
    """Attach the Fermi energies of ``Ef.r`` and populations of ``N.r`` to each subband."""
    _, Ef = read_table(os.path.join(directory, "Ef.r"))
    _, N = read_table(os.path.join(directory, "N.r"))

    if Ef.size < len(subbands) or N.size < len(subbands):
        raise ValueError(
            f"Ef.r and N.r must list at least {len(subbands)} subbands "
            f"(found {Ef.size} and {N.size})"
        )

    for isb, sb in enumerate(subbands):
        sb.set_distribution(Ef[isb] * meV, N[isb] * POP_UNIT)


def read_potential(directory="."):
    """Return the growth-axis grid and potential profile (J) from ``v.r``."""
    return read_table(os.path.join(directory, "v.r"))


def read_transitions(directory="."):
    """
    Return the list of wanted transitions from ``rr.r``.

    Returns
    -------
    list of tuple
        (i, j, f, g) subband indices, 1-based, in file order
    """
    cols = read_table(os.path.join(directory, "rr.r"), ncols=4, dtype=np.int64)
    transitions = [tuple(int(c[r]) for c in cols) for r in range(cols[0].size)]
    for tx in transitions:
        if min(tx) < 1:
            raise ValueError(f"rr.r: subband indices are 1-based, got {tx}")
    return transitions


def transition_label(i, j, f, g):
    return f"{i}{j}{f}{g}"


def write_rate_curve(energy, rate, i, j, f, g, directory="."):
    """
    Write one scattering-rate curve to ``cc<ijfg>.r``.

    Parameters
    ----------
    energy : ndarray
        Carrier energy (meV)
    rate : ndarray
        Scattering rate (1/s)
    """
    filename = os.path.join(directory, f"cc{transition_label(i, j, f, g)}.r")
    with open(filename, 'w', encoding='utf-8') as fh:
        for En, W in zip(energy, rate):
            fh.write(f"{En:20.17e} {W:20.17e}\n")
    return filename


def open_summary(directory="."):
    """Create (truncate) ``ccABCD.r`` and return its path."""
    filename = os.path.join(directory, "ccABCD.r")
    with open(filename, 'w', encoding='utf-8'):
        pass
    return filename


def append_summary(filename, i, j, f, g, Wbar):
    """Append one ``i j f g Wbar`` line to the summary file."""
    with open(filename, 'a', encoding='utf-8') as fh:
        fh.write(f"{i} {j} {f} {g} {Wbar:20.17e}\n")


def write_form_factor(qW, A2, i, j, f, g, directory="."):
    """Write the form-factor dump ``A<ijfg>.r`` (q W, A^2 per line)."""
    filename = os.path.join(directory, f"A{transition_label(i, j, f, g)}.r")
    with open(filename, 'w', encoding='utf-8') as fh:
        for x, y in zip(qW, A2):
            fh.write(f"{x:e} {y:e}\n")
    return filename
