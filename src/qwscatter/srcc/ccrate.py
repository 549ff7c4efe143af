"""
Carrier-carrier scattering rates between quantum-well subbands.

For a transition (i, j) -> (f, g) the rate of a carrier in subband i with
in-plane wavevector k_i is a four-fold integral over the wavevector k_j of
its partner (magnitude and angle alpha) and the scattering angle theta:

    W(k_i) = (e^2 / (4 pi eps hbar))^2 m / (pi hbar)
             sum_kj sum_alpha sum_theta [A(q) / (q + e^2 Pi(q) A(q) / (2 eps))]^2
                                        f_j(k_j) k_j dtheta dalpha dk_j

with the momentum transfer

    4 q^2 = 2 k_ij^2 + Delta_k0^2 - 2 k_ij sqrt(k_ij^2 + Delta_k0^2) cos(theta),
    k_ij^2 = k_i^2 + k_j^2 - 2 k_i k_j cos(alpha).

The screening term is folded into the denominator so that there is no pole
at q = 0.  Quadrature nodes with imaginary q contribute nothing.

References
----------
M. Moško, A. Mošková and V. Cambel, Phys. Rev. B 51, 16860 (1995);
J. H. Smet, C. G. Fonstad and Q. Hu, J. Appl. Phys. 79, 9305 (1996).
"""

from dataclasses import dataclass

import numpy as np
from numba import jit
from scipy.constants import e as e0, epsilon_0 as eps0, hbar, m_e

from qwscatter.libqwscatter.logger import get_logger
from . import fileio
from .errors import SRCCError, _srcc_error_handler
from .formfactor import delta_k0_sqr, ff_table, output_ff
from .lookup import _lookup_jit, lookup
from .screening import PI_table

log = get_logger(__name__)

pi = np.pi
twopi = 2.0 * np.pi

_OK = int(SRCCError.NOERROR)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass
class SRCCOptions:
    """
    Physical and numerical settings of a carrier-carrier rate calculation.

    Attributes
    ----------
    epsilon_r : float
        Low-frequency relative permittivity
    mass : float
        Effective mass in units of the free electron mass
    particle : str
        Particle ID: 'e' (electron), 'h' (heavy hole) or 'l' (light hole)
    screening : bool
        Include static screening of the interaction
    T : float
        Carrier temperature (K)
    W : float
        Reference width for the form-factor dump (angstrom)
    output_ff : bool
        Write the form factors ``A<ijfg>.r``
    nalpha, ntheta, nki, nkj, nq : int
        Integration resolutions (each >= 2)
    dmu : float
        Energy step of the screening integral (meV)
    max_screening_steps : int
        Ceiling on the number of screening-integral steps
    """

    epsilon_r: float = 13.18
    mass: float = 0.067
    particle: str = 'e'
    screening: bool = True
    T: float = 300.0
    W: float = 250.0
    output_ff: bool = False
    nalpha: int = 101
    ntheta: int = 101
    nki: int = 101
    nkj: int = 101
    nq: int = 101
    dmu: float = 1.0
    max_screening_steps: int = 1000000

    def __post_init__(self):
        if self.particle not in ('e', 'h', 'l'):
            raise ValueError(f"Unrecognised particle ID '{self.particle}'; use e, h or l")
        if self.T <= 0.0:
            raise ValueError(f"Temperature must be positive, got {self.T} K")
        if self.mass <= 0.0:
            raise ValueError(f"Effective mass must be positive, got {self.mass}")
        if self.epsilon_r <= 0.0:
            raise ValueError(f"Permittivity must be positive, got {self.epsilon_r}")
        if self.W <= 0.0:
            raise ValueError(f"Well width must be positive, got {self.W}")
        if self.dmu <= 0.0:
            raise ValueError(f"Screening energy step must be positive, got {self.dmu}")
        if self.max_screening_steps < 1:
            raise ValueError("Screening step ceiling must be at least 1")
        for name in ('nalpha', 'ntheta', 'nki', 'nkj', 'nq'):
            if getattr(self, name) < 2:
                raise ValueError(f"{name} must be at least 2, got {getattr(self, name)}")

    @property
    def epsilon(self):
        """Absolute permittivity (F/m)."""
        return self.epsilon_r * eps0

    @property
    def m(self):
        """Effective mass (kg)."""
        return self.mass * m_e

    @property
    def dmu_J(self):
        return self.dmu * 1e-3 * e0

    @property
    def W_m(self):
        return self.W * 1e-10


# ---------------------------------------------------------------------------
# Single quadrature node
# ---------------------------------------------------------------------------

@jit(nopython=True, cache=True)
def _node_jit(Aq, PIq, q, P, kj, coupling):
    """
    Integrand at one quadrature node.

    Returns ``(value, zero_denominator)``.
    """
    denom = q + coupling * PIq * Aq
    if denom == 0.0:
        return 0.0, True
    x = Aq / denom
    return x * x * P * kj, False


def node_contribution(Aijfg, PIii, q, P, kj, epsilon):
    """
    Integrand of the rate at momentum transfer ``q``.

    Parameters
    ----------
    Aijfg, PIii : ndarray
        Form-factor and polarizability momentum tables
    q : float
        In-plane momentum transfer (1/m)
    P : float
        Occupation of the partner state
    kj : float
        Partner wavevector (1/m)
    epsilon : float
        Absolute permittivity (F/m)

    Returns
    -------
    float
        [A / (q + 2 pi e^2 Pi A / (4 pi eps))]^2 P kj, or zero when the
        denominator vanishes
    """
    coupling = twopi * e0 * e0 / (4.0 * pi * epsilon)
    val, _ = _node_jit(lookup(Aijfg, q), lookup(PIii, q), q, P, kj, coupling)
    return val


# ---------------------------------------------------------------------------
# Four-fold quadrature
# ---------------------------------------------------------------------------

@jit(nopython=True, cache=True)
def _rate_curve_jit(ki, kj, Pkj, nalpha, ntheta, Deltak0sqr,
                    qA, vA, qP, vP, coupling):
    """
    JIT-compiled quadrature over k_j, alpha and theta for every k_i.

    Returns ``(W, status, q_bad, nzero)`` where ``W`` holds the unscaled sums,
    ``q_bad`` the momentum that failed a table lookup and ``nzero`` the
    number of nodes dropped for a vanishing denominator.
    """
    nki = ki.shape[0]
    nkj = kj.shape[0]
    dalpha = 2.0 * np.pi / (nalpha - 1)
    dtheta = 2.0 * np.pi / (ntheta - 1)

    cos_theta = np.empty(ntheta)
    for it in range(ntheta):
        cos_theta[it] = np.cos(dtheta * it)

    W = np.zeros(nki)
    nzero = 0

    for iki in range(nki):
        Wsum = 0.0
        for ikj in range(nkj):
            P = Pkj[ikj]
            for ia in range(nalpha):
                kij2 = ki[iki] * ki[iki] + kj[ikj] * kj[ikj] \
                    - 2.0 * ki[iki] * kj[ikj] * np.cos(dalpha * ia)
                # |ki - kj|^2 is non-negative up to round-off
                if kij2 < 0.0:
                    kij2 = 0.0
                s = kij2 + Deltak0sqr
                if s < 0.0:
                    continue
                kij = np.sqrt(kij2)
                root = np.sqrt(s)

                for it in range(ntheta):
                    q4 = 2.0 * kij2 + Deltak0sqr - 2.0 * kij * root * cos_theta[it]
                    if q4 < 0.0:
                        continue
                    q = np.sqrt(q4) / 2.0

                    Aq, err = _lookup_jit(qA, vA, q)
                    if err != _OK:
                        return W, err, q, nzero
                    PIq, err = _lookup_jit(qP, vP, q)
                    if err != _OK:
                        return W, err, q, nzero

                    val, zero = _node_jit(Aq, PIq, q, P, kj[ikj], coupling)
                    if zero:
                        nzero += 1
                    Wsum += val
        W[iki] = Wsum

    return W, _OK, 0.0, nzero


def rate_curve(isb, jsb, Aijfg, PIii, Deltak0sqr, Vmax, T, epsilon,
               nki=101, nkj=101, nalpha=101, ntheta=101, label="transition"):
    """
    Scattering rate as a function of the initial in-plane wavevector.

    Parameters
    ----------
    isb, jsb : Subband
        Initial subbands of the carrier and of its partner
    Aijfg, PIii : ndarray
        Form-factor and polarizability momentum tables
    Deltak0sqr : float
        Energy-mismatch term (1/m^2)
    Vmax : float
        Potential maximum (J); sets the largest k_i and k_j
    T : float
        Carrier temperature (K)
    epsilon : float
        Absolute permittivity (F/m)

    Returns
    -------
    ki : ndarray
        Initial wavevectors (1/m)
    W : ndarray
        Scattering rate (1/s) at each ``ki``
    """
    m = isb.m
    ki = np.linspace(0.0, isb.k(Vmax - isb.E), nki)
    kj = np.linspace(0.0, jsb.k(Vmax - jsb.E), nkj)
    dkj = kj[1] - kj[0]
    Pkj = np.asarray(jsb.f_FD_k(kj, T), dtype=np.float64)

    coupling = twopi * e0 * e0 / (4.0 * pi * epsilon)

    W, err, q_bad, nzero = _rate_curve_jit(
        ki, kj, Pkj, nalpha, ntheta, Deltak0sqr,
        np.ascontiguousarray(Aijfg['q']), np.ascontiguousarray(Aijfg['value']),
        np.ascontiguousarray(PIii['q']), np.ascontiguousarray(PIii['value']),
        coupling,
    )
    _srcc_error_handler(err, f"the tables of {label}", q_bad)
    if nzero:
        _srcc_error_handler(SRCCError.ZERODENOM, label, nzero)

    dalpha = twopi / (nalpha - 1)
    dtheta = twopi / (ntheta - 1)
    W = W * dtheta * dalpha * dkj
    W *= (e0 * e0 / (hbar * 4.0 * pi * epsilon)) ** 2 * m / (pi * hbar)
    for k, Wk in zip(ki, W):
        log.debug3("%s: W(ki = %.4e) = %.6e 1/s", label, k, Wk)

    return ki, W


def thermal_average(isb, ki, W, T):
    """
    Fermi-Dirac weighted mean of a rate curve over the initial subband.

    Notes
    -----
    Wbar = sum W(k_i) k_i f_i(k_i) dk_i / (pi N_i), which is the mean over the
    occupied states since N_i = (1/pi) int f_i(k) k dk.
    """
    if not isb.N:
        raise ValueError("Population of the initial subband is zero or unset")
    dki = ki[1] - ki[0]
    return float(np.sum(W * ki * isb.f_FD_k(ki, T)) * dki / (pi * isb.N))


# ---------------------------------------------------------------------------
# Transition drivers
# ---------------------------------------------------------------------------

def calculate_transition(subbands, V, i, j, f, g, opts):
    """
    Rate curve and thermal average of one transition (i, j) -> (f, g).

    Parameters
    ----------
    subbands : list of Subband
        All subbands (index n-1 holds subband n)
    V : ndarray
        Potential profile (J)
    i, j, f, g : int
        1-based subband indices
    opts : SRCCOptions
        Calculation settings

    Returns
    -------
    energy : ndarray
        Carrier energy E_i + hbar^2 k_i^2 / 2m (meV)
    W : ndarray
        Scattering rate (1/s)
    Wbar : float
        Thermally averaged rate (1/s)
    """
    for n in (i, j, f, g):
        if not 1 <= n <= len(subbands):
            raise ValueError(f"Subband index {n} out of range 1..{len(subbands)}")

    isb, jsb, fsb, gsb = (subbands[n - 1] for n in (i, j, f, g))
    label = fileio.transition_label(i, j, f, g)
    log.info("Transition %s", label)

    Deltak0sqr = delta_k0_sqr(isb, jsb, fsb, gsb, i, j, f, g)

    Aijfg = ff_table(Deltak0sqr, isb, jsb, fsb, gsb, V, opts.nq)
    PIii = PI_table(Aijfg, isb, opts.T, opts.screening, opts.dmu_J, opts.max_screening_steps)

    ki, W = rate_curve(isb, jsb, Aijfg, PIii, Deltak0sqr, float(np.max(V)), opts.T,
                       opts.epsilon, opts.nki, opts.nkj, opts.nalpha, opts.ntheta, label)

    energy = (isb.E + isb.Ek(ki)) / (1e-3 * e0)
    Wbar = thermal_average(isb, ki, W, opts.T)
    log.info("  mean rate %s = %.6e 1/s", label, Wbar)

    return energy, W, Wbar


def run_transitions(subbands, V, transitions, opts, directory="."):
    """
    Process a list of transitions in order and write all result files.

    Writes ``cc<ijfg>.r`` per transition (and ``A<ijfg>.r`` if requested) and
    one line per transition to ``ccABCD.r``, in input order.

    Returns
    -------
    list of float
        Thermally averaged rate of each transition
    """
    summary = fileio.open_summary(directory)
    Wbars = []

    for i, j, f, g in transitions:
        if opts.output_ff:
            output_ff(opts.W_m, subbands, i, j, f, g, directory)

        energy, W, Wbar = calculate_transition(subbands, V, i, j, f, g, opts)
        fileio.write_rate_curve(energy, W, i, j, f, g, directory)
        fileio.append_summary(summary, i, j, f, g, Wbar)
        Wbars.append(Wbar)

    return Wbars
