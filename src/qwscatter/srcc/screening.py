"""
Static polarizability of a subband for Coulomb screening.

The finite-temperature polarizability Pi(q) is obtained by integrating the
zero-temperature (Stern) polarizability P0(q, mu) against the derivative of
the Fermi-Dirac function over the chemical potential mu, starting at the
subband minimum and stepping upwards until the integrand has fallen below
one percent of the accumulated integral.
"""

import numpy as np
from numba import jit
from scipy.constants import e as e0, hbar, k as kB

from qwscatter.libqwscatter.logger import get_logger
from .errors import SRCCError, _srcc_error_handler
from .lookup import new_table

log = get_logger(__name__)

pi = np.pi

_OK = int(SRCCError.NOERROR)
_DIVERGED = int(SRCCError.DIVERGED)

DEFAULT_DMU = 1e-3 * e0
DEFAULT_MAX_STEPS = 1000000


@jit(nopython=True, cache=True)
def _PI_jit(q, E, Ef, m, T, dmu, max_steps):
    """
    JIT-compiled energy-domain polarizability integral.

    Returns ``(integral, status)``.
    """
    P0max = m / (pi * hbar * hbar)
    kT = kB * T

    mu = E
    integral = 0.0
    nstep = 0

    while True:
        # Wavevector at energy mu, measured from the zero of energy
        k = 0.0
        if mu > 0.0:
            k = np.sqrt(2.0 * m * mu) / hbar

        P0 = P0max
        if q > 2.0 * k:
            # 1 - sqrt(1 - x^2) without cancellation for small x
            x2 = (2.0 * k / q) ** 2
            P0 = P0max * x2 / (1.0 + np.sqrt(1.0 - x2))

        c = np.cosh((Ef - mu) / (2.0 * kT))
        dI = P0 / (4.0 * kT * c * c)
        integral += dI * dmu
        mu += dmu
        nstep += 1

        if not dI > integral / 100.0:
            break
        if nstep >= max_steps:
            return integral, _DIVERGED

    return integral, _OK


def PI(isb, q, T, dmu=DEFAULT_DMU, max_steps=DEFAULT_MAX_STEPS):
    """
    Polarizability Pi(q) of a subband.

    Parameters
    ----------
    isb : Subband
        Subband with its Fermi energy set
    q : float
        In-plane momentum (1/m)
    T : float
        Carrier temperature (K)
    dmu : float, optional
        Chemical-potential step (J). Default is 1 meV.
    max_steps : int, optional
        Iteration ceiling of the integral

    Returns
    -------
    float
        Pi(q) (1/(J m^2))

    Raises
    ------
    ScreeningIntegralDivergence
        If the stopping criterion is not met within ``max_steps`` steps
    """
    if T <= 0.0:
        raise ValueError(f"Temperature must be positive, got {T}")
    if not dmu > 0.0:
        raise ValueError(f"Energy step must be positive, got {dmu}")
    if isb.Ef is None:
        raise ValueError("Fermi energy has not been set for the screening subband")

    val, err = _PI_jit(float(q), isb.E, isb.Ef, isb.m, float(T), float(dmu), int(max_steps))
    _srcc_error_handler(err, "the polarizability integral", q)
    return val


def PI_table(Aijfg, isb, T, screening=True, dmu=DEFAULT_DMU, max_steps=DEFAULT_MAX_STEPS):
    """
    Tabulate Pi(q) on the momentum grid of a form-factor table.

    Parameters
    ----------
    Aijfg : ndarray
        Form-factor momentum table whose q grid is reused
    isb : Subband
        Initial subband
    T : float
        Carrier temperature (K)
    screening : bool, optional
        If False the table holds zeros (unscreened interaction)

    Returns
    -------
    ndarray
        Momentum table of Pi(q)
    """
    PIii = new_table(Aijfg['q'][-1], Aijfg.size)
    # Same scattering vectors as the form-factor table
    PIii['q'] = Aijfg['q']

    if not screening:
        log.debug("Screening disabled; polarizability table set to zero")
        return PIii

    for iq in range(PIii.size):
        PIii['value'][iq] = PI(isb, PIii['q'][iq], T, dmu, max_steps)
        log.debug2("Pi(%.4e) = %.6e", PIii['q'][iq], PIii['value'][iq])

    return PIii
