"""
Error taxonomy for the carrier-carrier scattering program.

Every fatal condition has an exception class derived from the closest builtin
and an ``SRCCError`` status code.  The compiled inner loops cannot raise
rich exceptions, so they return an ``SRCCError`` value that the calling
Python wrapper hands to ``_srcc_error_handler``.  The same codes double as
the process exit status of the ``srcc`` program.
"""

import logging
from enum import IntEnum

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Status / exit codes
# ---------------------------------------------------------------------------

class SRCCError(IntEnum):
    NOERROR = 0
    UNKNOWN = 1
    BADSHAPE = 2
    NOMEMORY = 3
    OUTOFRANGE = 4
    DIVERGED = 5
    ZERODENOM = 6


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class InputShapeMismatch(ValueError):
    """Potential profile and wavefunction grids have different lengths."""

    code = SRCCError.BADSHAPE


class TableAllocationFailure(MemoryError):
    """A momentum table could not be allocated."""

    code = SRCCError.NOMEMORY


class LookupOutOfRange(LookupError):
    """A momentum was requested outside the tabulated range."""

    code = SRCCError.OUTOFRANGE


class ScreeningIntegralDivergence(FloatingPointError):
    """The polarizability integral did not meet its stopping criterion."""

    code = SRCCError.DIVERGED


_FATAL = (InputShapeMismatch, TableAllocationFailure, LookupOutOfRange,
          ScreeningIntegralDivergence)


# ---------------------------------------------------------------------------
# Error handler
# ---------------------------------------------------------------------------

def _srcc_error_handler(err: int, context: str = "", value: float = 0.0) -> None:
    """Raise the exception matching a status code returned by a compiled kernel.

    ``ZERODENOM`` is not fatal; it is only logged.
    """
    if err == SRCCError.NOERROR:
        return
    if err == SRCCError.BADSHAPE:
        raise InputShapeMismatch(f"Grid length mismatch in {context}.")
    if err == SRCCError.NOMEMORY:
        raise TableAllocationFailure(f"Cannot allocate {context}.")
    if err == SRCCError.OUTOFRANGE:
        raise LookupOutOfRange(
            f"Momentum {value:.6e} 1/m is outside the tabulated range of {context}."
        )
    if err == SRCCError.DIVERGED:
        raise ScreeningIntegralDivergence(
            f"Screening integral did not converge for {context} "
            f"(q = {value:.6e} 1/m)."
        )
    if err == SRCCError.ZERODENOM:
        log.warning(
            "%d quadrature nodes with a zero denominator were dropped in %s.",
            int(value), context,
        )
        return
    raise RuntimeError(f"Unknown error code {err} in {context}.")


def exit_code(exc: BaseException) -> int:
    """Log a fatal exception and return the matching process exit status."""
    if isinstance(exc, _FATAL):
        log.error("%s", exc)
        return int(exc.code)
    log.error("Unexpected failure: %s", exc)
    return int(SRCCError.UNKNOWN)
