"""
srcc: carrier-carrier scattering rates between quantum-well subbands.

Reads the subband energies, wavefunctions, Fermi energies and populations,
the potential profile and the list of wanted transitions from the working
directory and writes one rate-versus-energy file per transition together
with a summary of the thermally averaged rates.

Input files:    rr.r        i j f g transitions to compute
                E<p>.r      subband minima
                wf_<p><n>.r wavefunctions
                Ef.r        subband Fermi energies
                N.r         subband populations
                v.r         potential profile

Output files:   cc<ijfg>.r  rate versus carrier energy
                ccABCD.r    Fermi-Dirac weighted mean rates
                A<ijfg>.r   form factors (with --output-ff)
"""

import argparse
import sys

from qwscatter.libqwscatter import logger
from . import fileio
from .ccrate import SRCCOptions, run_transitions
from .errors import InputShapeMismatch, SRCCError, exit_code

log = logger.get_logger(__name__)


def build_parser():
    p = argparse.ArgumentParser(
        prog='srcc',
        description='Find the carrier-carrier scattering rates for the '
                    'transitions listed in rr.r.',
    )
    p.add_argument('-a', '--output-ff', action='store_true',
                   help='output form factors A<ijfg>.r')
    p.add_argument('-e', '--epsilon', type=float, default=13.18,
                   help='low-frequency relative permittivity (default: %(default)s)')
    p.add_argument('-m', '--mass', type=float, default=0.067,
                   help='effective mass relative to m0 (default: %(default)s)')
    p.add_argument('-p', '--particle', default='e',
                   help="particle ID: 'e', 'h' or 'l' (default: %(default)s)")
    p.add_argument('-S', '--no-screening', dest='screening', action='store_false',
                   help='turn off screening')
    p.add_argument('-T', '--temperature', type=float, default=300.0,
                   help='carrier temperature [K] (default: %(default)s)')
    p.add_argument('-w', '--well-width', type=float, default=250.0,
                   help='reference well width for form factors [angstrom] (default: %(default)s)')
    for name in ('nalpha', 'ntheta', 'nki', 'nkj', 'nq'):
        p.add_argument(f'--{name}', type=int, default=101,
                       help=f'number of {name[1:]} points (default: %(default)s)')
    p.add_argument('--dmu', type=float, default=1.0,
                   help='screening integral energy step [meV] (default: %(default)s)')
    p.add_argument('--max-screening-steps', type=int, default=1000000,
                   help='ceiling on screening integral steps (default: %(default)s)')
    p.add_argument('-v', '--verbose', action='count', default=0,
                   help='more output (repeat for more)')
    p.add_argument('-q', '--quiet', action='store_true',
                   help='only report warnings and errors')
    return p


def options_from_args(args):
    return SRCCOptions(
        epsilon_r=args.epsilon,
        mass=args.mass,
        particle=args.particle,
        screening=args.screening,
        T=args.temperature,
        W=args.well_width,
        output_ff=args.output_ff,
        nalpha=args.nalpha,
        ntheta=args.ntheta,
        nki=args.nki,
        nkj=args.nkj,
        nq=args.nq,
        dmu=args.dmu,
        max_screening_steps=args.max_screening_steps,
    )


def run(opts, directory="."):
    """Read the inputs from ``directory``, compute every transition and write the results."""
    subbands = fileio.read_subbands(opts.particle, opts.m, directory)
    fileio.read_distributions(subbands, directory)

    z, V = fileio.read_potential(directory)
    if V.size != subbands[0].psi.size:
        raise InputShapeMismatch(
            f"Potential and wavefunction arrays are different sizes: "
            f"{V.size} and {subbands[0].psi.size} respectively."
        )

    transitions = fileio.read_transitions(directory)
    log.info("%d transitions requested", len(transitions))

    return run_transitions(subbands, V, transitions, opts, directory)


def main(argv=None, directory="."):
    """
    Command-line entry point.

    Returns
    -------
    int
        Process exit status (an ``SRCCError`` value)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        opts = options_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    logger.setup(logger.verbosity(args.verbose, args.quiet))

    try:
        run(opts, directory)
    except (OSError, ValueError, LookupError, MemoryError, ArithmeticError) as exc:
        return exit_code(exc)

    return int(SRCCError.NOERROR)


if __name__ == '__main__':
    sys.exit(main())
