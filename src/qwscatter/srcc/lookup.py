"""
Momentum tables and their bounds-checked linear interpolation.

A momentum table is a numpy structured array of ``(q, value)`` records on a
uniform, strictly increasing grid q_n = n dq spanning [0, q_max].  Tables
are never extrapolated: a query outside the grid raises
``LookupOutOfRange``.
"""

import numpy as np
from numba import jit

from .errors import SRCCError, TableAllocationFailure, _srcc_error_handler

# Status codes as plain ints for the compiled kernels
_OK = int(SRCCError.NOERROR)
_OUTOFRANGE = int(SRCCError.OUTOFRANGE)

MOMENTUM_DTYPE = np.dtype([('q', np.float64), ('value', np.float64)])


def new_table(q_max, nq):
    """
    Allocate a momentum table with a uniform grid on [0, q_max].

    Parameters
    ----------
    q_max : float
        Largest tabulated momentum (1/m)
    nq : int
        Number of nodes (>= 2)

    Returns
    -------
    ndarray
        Structured array with fields ``q`` (filled) and ``value`` (zeros)
    """
    if nq < 2:
        raise ValueError(f"A momentum table needs at least 2 nodes, got {nq}")
    if not q_max > 0.0:
        raise ValueError(f"Maximum momentum must be positive, got {q_max}")

    try:
        table = np.zeros(nq, dtype=MOMENTUM_DTYPE)
    except MemoryError as exc:
        raise TableAllocationFailure(
            f"Cannot allocate a momentum table of {nq} nodes"
        ) from exc

    dq = q_max / (nq - 1)
    table['q'] = dq * np.arange(nq)
    # Last node exactly at q_max
    table['q'][-1] = q_max
    return table


def lookup(table, q):
    """
    Linearly interpolate a momentum table at ``q``.

    Parameters
    ----------
    table : ndarray
        Momentum table (fields ``q`` and ``value``)
    q : float
        Momentum (1/m)

    Returns
    -------
    float
        Interpolated value; the stored value when ``q`` is exactly a node

    Raises
    ------
    LookupOutOfRange
        If ``q`` lies outside [q_0, q_max]
    """
    qs = table['q']
    vals = table['value']

    if not (qs[0] <= q <= qs[-1]):
        _srcc_error_handler(SRCCError.OUTOFRANGE, "the momentum table", q)

    # First node with q_n >= q
    n = int(np.searchsorted(qs, q, side='left'))
    if qs[n] == q:
        return float(vals[n])

    return float(vals[n - 1] + (vals[n] - vals[n - 1]) * (q - qs[n - 1]) / (qs[n] - qs[n - 1]))


@jit(nopython=True, cache=True)
def _lookup_jit(qs, vals, q):
    """
    JIT-compiled twin of ``lookup``.

    Returns ``(value, status)``; status is ``SRCCError.OUTOFRANGE`` (and the
    value zero) when ``q`` lies outside the table.
    """
    n = qs.shape[0]
    if not (qs[0] <= q and q <= qs[n - 1]):
        return 0.0, _OUTOFRANGE

    # Binary search for the first node with qs[ju] >= q
    jl = -1
    ju = n - 1
    while ju - jl > 1:
        jm = (ju + jl) // 2
        if qs[jm] >= q:
            ju = jm
        else:
            jl = jm

    if qs[ju] == q:
        return vals[ju], _OK

    return vals[ju - 1] + (vals[ju] - vals[ju - 1]) * (q - qs[ju - 1]) / (qs[ju] - qs[ju - 1]), _OK
