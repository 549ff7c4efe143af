"""
Coulomb matrix element over four subband wavefunctions.

The matrix element of the in-plane Fourier-transformed Coulomb interaction
between the pair states (i, j) and (f, g) is

    A(q) = int dz psi_i(z) psi_f(z) int dz' psi_j(z') psi_g(z') exp(-q|z - z'|)

and is tabulated once per transition on a uniform grid of in-plane momentum
transfer q, from zero up to the largest q the rate quadrature can reach.
"""

import numpy as np
from numba import jit
from scipy.constants import hbar
from scipy.integrate import trapezoid

from qwscatter.libqwscatter.logger import get_logger
from . import fileio
from .errors import InputShapeMismatch
from .lookup import new_table

log = get_logger(__name__)

# Relative margin on q_max so that round-off in the quadrature cannot step past the table
Q_MAX_MARGIN = 1e-9


@jit(nopython=True, cache=True)
def _greens_integrals_jit(psi_jg, q, dz):
    """
    Convolution of ``psi_jg`` with the kernel exp(-q|z - z'|) on a uniform grid.

    The sum is split into the points strictly before z and the points from z
    onwards.  Each part is accumulated recursively with the one-step factor
    exp(-q dz), so the kernel is always anchored at the current point and no
    exponential ever exceeds one.
    """
    n = psi_jg.shape[0]
    decay = np.exp(-q * dz)

    minus = np.zeros(n)
    plus = np.zeros(n)

    for iz in range(1, n):
        minus[iz] = (minus[iz - 1] + psi_jg[iz - 1] * dz) * decay

    plus[n - 1] = psi_jg[n - 1] * dz
    for iz in range(n - 2, -1, -1):
        plus[iz] = psi_jg[iz] * dz + plus[iz + 1] * decay

    return minus + plus


def _check_grids(*subbands):
    npts = subbands[0].psi.size
    for sb in subbands[1:]:
        if sb.psi.size != npts:
            raise InputShapeMismatch(
                f"Wavefunctions have different lengths: {npts} and {sb.psi.size}"
            )


def A(q, isb, jsb, fsb, gsb):
    """
    Four-wavefunction Coulomb matrix element at in-plane momentum ``q``.

    Parameters
    ----------
    q : float
        In-plane momentum transfer (1/m)
    isb, jsb, fsb, gsb : Subband
        Initial and final subbands of the two carriers

    Returns
    -------
    float
        A(q) (1/m)
    """
    z = isb.z
    dz = z[1] - z[0]

    psi_if = isb.psi * fsb.psi
    psi_jg = jsb.psi * gsb.psi

    Ijg = _greens_integrals_jit(psi_jg, float(q), dz)
    return float(trapezoid(psi_if * Ijg, dx=dz))


def delta_k0_sqr(isb, jsb, fsb, gsb, i, j, f, g):
    """
    Energy-mismatch term Delta_k0^2 (1/m^2) of a transition.

    Twice the change in kinetic energy, expressed as a squared wavevector;
    zero when the index sums of the initial and final pairs agree.
    """
    if i + j == f + g:
        return 0.0
    m = isb.m
    return 4.0 * m * (isb.E + jsb.E - fsb.E - gsb.E) / (hbar * hbar)


def q_perp_max(isb, jsb, Vmax, Deltak0sqr):
    """
    Largest in-plane momentum transfer reachable by the rate quadrature.

    Notes
    -----
    With K = k_i,max + k_j,max,
    q_max = sqrt(2 K^2 + Delta_k0^2 + 2 K sqrt(K^2 + Delta_k0^2)) / 2.
    """
    for sb in (isb, jsb):
        if sb.E >= Vmax:
            raise ValueError(
                f"Subband minimum {sb.E:.4e} J is not below the potential maximum {Vmax:.4e} J"
            )

    K = isb.k(Vmax - isb.E) + jsb.k(Vmax - jsb.E)
    q4 = 2.0 * K * K + Deltak0sqr + 2.0 * K * np.sqrt(max(K * K + Deltak0sqr, 0.0))
    return np.sqrt(max(q4, 0.0)) / 2.0


def ff_table(Deltak0sqr, isb, jsb, fsb, gsb, V, nq):
    """
    Tabulate A(q) over [0, q_max].

    Parameters
    ----------
    Deltak0sqr : float
        Energy-mismatch term (1/m^2)
    isb, jsb, fsb, gsb : Subband
        Subbands of the transition
    V : ndarray
        Potential profile (J), same grid as the wavefunctions
    nq : int
        Number of table nodes

    Returns
    -------
    ndarray
        Momentum table of A(q)
    """
    _check_grids(isb, jsb, fsb, gsb)
    if np.size(V) != isb.psi.size:
        raise InputShapeMismatch(
            f"Potential and wavefunction arrays are different sizes: "
            f"{np.size(V)} and {isb.psi.size} respectively"
        )

    q_max = q_perp_max(isb, jsb, float(np.max(V)), Deltak0sqr) * (1.0 + Q_MAX_MARGIN)
    Aijfg = new_table(q_max, nq)

    for iq in range(nq):
        Aijfg['value'][iq] = A(Aijfg['q'][iq], isb, jsb, fsb, gsb)
        log.debug2("A(%.4e) = %.6e", Aijfg['q'][iq], Aijfg['value'][iq])

    log.debug("Form-factor table: %d nodes up to q = %.4e 1/m", nq, q_max)
    return Aijfg


def output_ff(W, subbands, i, j, f, g, directory="."):
    """
    Write A(q)^2 for a transition to ``A<ijfg>.r``.

    Parameters
    ----------
    W : float
        Reference width (m); q runs over 6 n / (100 W) for n = 0..99
    subbands : list of Subband
        All subbands (index n-1 holds subband n)
    i, j, f, g : int
        1-based subband indices
    """
    isb, jsb, fsb, gsb = (subbands[n - 1] for n in (i, j, f, g))
    _check_grids(isb, jsb, fsb, gsb)

    q = 6.0 * np.arange(100) / (100.0 * W)
    A2 = np.array([A(qq, isb, jsb, fsb, gsb) ** 2 for qq in q])

    return fileio.write_form_factor(q * W, A2, i, j, f, g, directory)
