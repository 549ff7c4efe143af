"""
Density-of-states functions for bulk, quantum-well and quantum-wire systems.

All energies are absolute energies in Joules; masses are in kg.  The bulk and
quantum-well expressions include a first-order nonparabolic correction with
the effective mass taking the form m*(E) = m0 [1 + alpha (E - V)].
"""

import numpy as np
from scipy.constants import hbar

pi = np.pi


def calculate_dos_3D(mass, energy, V, alpha=0.0):
    """
    Bulk density of states.

    Parameters
    ----------
    mass : float
        Effective mass of the carrier at the band edge (kg)
    energy : float or ndarray
        Energy of the carrier (J)
    V : float
        Band edge potential (J)
    alpha : float, optional
        Nonparabolicity factor (1/J). Default is 0.

    Returns
    -------
    float or ndarray
        Density of states (1/(J m^3)); zero at and below the band edge.
    """
    energy = np.asarray(energy, dtype=np.float64)
    Ek = np.clip(energy - V, 0.0, None)
    rho = (np.sqrt(2.0 * mass / (hbar * hbar)) ** 3 * np.sqrt(Ek) / (2.0 * pi**2)
           * (1.0 + alpha * (2.0 * energy - V)))
    rho = np.where(energy > V, rho, 0.0)

    if rho.ndim == 0:
        return float(rho)
    return rho


def calculate_dos_2D(mass, E_carrier, E_subbands, V=0.0, alpha=0.0):
    """
    Density of states for a quantum well, summed over the occupied subbands.

    Each subband whose minimum lies below the carrier energy contributes a
    step of m*/(pi hbar^2) (plus the nonparabolic correction).

    Parameters
    ----------
    mass : float
        Effective mass of the carrier (kg)
    E_carrier : float
        Energy of the carrier (J)
    E_subbands : array_like
        Energies of the subband minima (J)
    V : float, optional
        Band edge potential (J). Default is 0.
    alpha : float, optional
        Nonparabolicity factor (1/J). Default is 0.

    Returns
    -------
    float
        Density of states (1/(J m^2))
    """
    E_subbands = np.asarray(E_subbands, dtype=np.float64)

    dos_1sb = mass / (pi * hbar**2) + mass * alpha * (2.0 * E_carrier - V) / (pi * hbar**2)
    nsb_occupied = int(np.count_nonzero(E_carrier > E_subbands))

    return nsb_occupied * dos_1sb


def calculate_dos_1D(mass, E_carrier, E_subbands):
    """
    Density of states for a quantum wire with parabolic dispersion.

    Parameters
    ----------
    mass : float
        Effective mass of the carrier (kg)
    E_carrier : float
        Energy of the carrier (J)
    E_subbands : array_like
        Energies of the subband minima (J)

    Returns
    -------
    float
        Density of states (1/(J m)); diverges at each subband minimum.
    """
    E_subbands = np.asarray(E_subbands, dtype=np.float64)
    below = E_subbands[E_carrier > E_subbands]

    dos_total = 0.0
    for Esb in below:
        dos_total += np.sqrt(2.0 * mass) / hbar / (pi * np.sqrt(E_carrier - Esb))

    return float(dos_total)
