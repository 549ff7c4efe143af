"""
Quantum-well subband description.

A subband is defined by its band-edge energy, its envelope wavefunction on a
uniform growth-axis grid, the carrier effective mass and (optionally) the
quasi-Fermi energy and sheet population of the carriers occupying it.  The
in-plane dispersion is parabolic.
"""

import numpy as np
from scipy.constants import hbar, k as kB
from scipy.special import expit

pi = np.pi


class Subband:
    """
    Single subband of a quantum well.

    Parameters
    ----------
    E : float
        Band-edge energy (J)
    z : ndarray
        Growth-axis positions (m), uniform spacing
    psi : ndarray
        Normalised envelope wavefunction (m^-1/2), same length as ``z``
    m : float
        In-plane effective mass (kg)
    Ef : float, optional
        Quasi-Fermi energy (J)
    N : float, optional
        Sheet population (m^-2)
    """

    def __init__(self, E, z, psi, m, Ef=None, N=None):
        z = np.asarray(z, dtype=np.float64)
        psi = np.asarray(psi, dtype=np.float64)
        if z.shape != psi.shape:
            raise ValueError(
                f"Wavefunction has {psi.size} samples but the grid has {z.size}"
            )
        if m <= 0.0:
            raise ValueError(f"Effective mass must be positive, got {m}")

        self.E = float(E)
        self.z = z
        self.psi = psi
        self.m = float(m)
        self.Ef = None if Ef is None else float(Ef)
        self.N = None if N is None else float(N)

    def __repr__(self):
        return (f"Subband(E={self.E:.4e} J, npts={self.z.size}, m={self.m:.4e} kg, "
                f"Ef={self.Ef}, N={self.N})")

    def set_distribution(self, Ef, N):
        """Attach the quasi-Fermi energy (J) and sheet population (m^-2)."""
        self.Ef = float(Ef)
        self.N = float(N)

    # -- dispersion ---------------------------------------------------------

    def Ek(self, k):
        """In-plane kinetic energy (J) at wavevector ``k`` (1/m)."""
        return hbar * hbar * np.asarray(k) ** 2 / (2.0 * self.m)

    def k(self, Ek):
        """In-plane wavevector (1/m) at kinetic energy ``Ek`` (J); zero for Ek <= 0."""
        Ek = np.clip(np.asarray(Ek, dtype=np.float64), 0.0, None)
        kk = np.sqrt(2.0 * self.m * Ek) / hbar
        if kk.ndim == 0:
            return float(kk)
        return kk

    # -- occupation ---------------------------------------------------------

    def f_FD(self, E, T):
        """
        Fermi-Dirac occupation of a state with total energy ``E`` (J).

        Notes
        -----
        Evaluated as expit(-(E - Ef)/kT), which saturates cleanly to 0 or 1
        far from the Fermi level instead of overflowing.
        """
        if self.Ef is None:
            raise ValueError("Fermi energy has not been set for this subband")
        if T <= 0.0:
            raise ValueError(f"Temperature must be positive, got {T}")
        f = expit(-(np.asarray(E, dtype=np.float64) - self.Ef) / (kB * T))
        if np.ndim(f) == 0:
            return float(f)
        return f

    def f_FD_k(self, k, T):
        """Fermi-Dirac occupation of the state with in-plane wavevector ``k``."""
        return self.f_FD(self.E + self.Ek(k), T)

    def fermi_population(self, T):
        """
        Sheet density (m^-2) of a Fermi-Dirac distribution at temperature ``T``.

        N = m kB T / (pi hbar^2) ln(1 + exp((Ef - E) / kB T))
        """
        if self.Ef is None:
            raise ValueError("Fermi energy has not been set for this subband")
        x = (self.Ef - self.E) / (kB * T)
        return float(self.m * kB * T / (pi * hbar * hbar) * np.logaddexp(0.0, x))
