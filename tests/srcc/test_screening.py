"""
Tests for screening — finite-temperature polarizability of a subband.

Covers _PI_jit, PI and PI_table.

Tolerances:
    q = 0 closed form : rtol=5e-3 (left Riemann sum, dmu = 0.1 meV)
"""
import numpy as np
import pytest
from scipy.constants import e as e0, hbar, k as kB, m_e

from qwscatter.libqwscatter.logger import DEBUG2
from qwscatter.srcc.errors import ScreeningIntegralDivergence
from qwscatter.srcc.lookup import new_table
from qwscatter.srcc.screening import PI, PI_table
from qwscatter.srcc.subband import Subband

meV = 1e-3 * e0
M = 0.067 * m_e
T = 300.0


def _subband(Ef_offset=0.0):
    z = np.linspace(0.0, 100e-10, 11)
    psi = np.full(11, 1.0)
    sb = Subband(10.0 * meV, z, psi, M)
    sb.set_distribution(sb.E + Ef_offset, 1.0e15)
    return sb


def _reference_PI(E, Ef, q, T, dmu=1e-3 * e0):
    """Direct evaluation of the polarizability recurrence."""
    P0max = M / (np.pi * hbar**2)
    mu = E
    integral = 0.0
    while True:
        k = np.sqrt(2.0 * M * mu) / hbar
        P0 = P0max
        if q > 2.0 * k:
            P0 -= P0max * np.sqrt(1.0 - (2.0 * k / q) ** 2)
        dI = P0 / (4.0 * kB * T * np.cosh((Ef - mu) / (2.0 * kB * T)) ** 2)
        integral += dI * dmu
        mu += dmu
        if not dI > integral / 100.0:
            return integral


class TestPolarizability:
    def test_zero_q_closed_form(self):
        # P0 is constant at q = 0, so Pi = m/(pi hbar^2) f_FD(E_i)
        sb = _subband(Ef_offset=0.0)
        expected = M / (np.pi * hbar**2) * 0.5
        val = PI(sb, 0.0, T, dmu=0.1 * meV)
        assert np.isclose(val, expected, rtol=5e-3)

    def test_zero_q_below_fermi_level(self):
        sb = _subband(Ef_offset=3.0 * kB * T)
        expected = M / (np.pi * hbar**2) / (1.0 + np.exp(-3.0))
        val = PI(sb, 0.0, T, dmu=0.1 * meV)
        assert np.isclose(val, expected, rtol=1e-2)

    def test_nonincreasing_in_q(self):
        sb = _subband()
        vals = [PI(sb, q, T) for q in np.linspace(0.0, 2.0e9, 9)]
        assert np.all(np.diff(vals) <= 0.0)
        assert np.all(np.array(vals) > 0.0)

    def test_small_q_matches_zero_q(self):
        # q below 2k(E_i) keeps P0 at its long-wavelength value on every step
        sb = _subband()
        assert PI(sb, 1.0e-3, T) == PI(sb, 0.0, T)

    @pytest.mark.parametrize("q", [0.0, 5.0e8, 2.0e9])
    def test_matches_reference_recurrence(self, q):
        sb = Subband(50.0 * meV, np.linspace(0.0, 1e-8, 5), np.ones(5), M)
        sb.set_distribution(50.0 * meV, 1.0e15)
        expected = _reference_PI(sb.E, sb.Ef, q, T)
        assert np.isclose(PI(sb, q, T), expected, rtol=1e-9)

    def test_band_edge_at_zero_energy(self):
        # k(E_i) = 0, so P0 vanishes on the first step for any q > 0
        z = np.linspace(0.0, 1e-8, 5)
        sb = Subband(0.0, z, np.ones(5), M, Ef=20.0 * meV)
        assert PI(sb, 1.0e8, T) == 0.0
        assert PI(sb, 0.0, T) > 0.0

    def test_colder_is_closer_to_degenerate(self):
        sb = _subband(Ef_offset=50.0 * meV)
        P0 = M / (np.pi * hbar**2)
        assert abs(PI(sb, 0.0, 77.0) - P0) < abs(PI(sb, 0.0, 300.0) - P0)

    @pytest.mark.parametrize("temp", [0.0, -10.0])
    def test_non_positive_temperature(self, temp):
        with pytest.raises(ValueError):
            PI(_subband(), 1.0e8, temp)

    def test_bad_step(self):
        with pytest.raises(ValueError):
            PI(_subband(), 1.0e8, T, dmu=0.0)

    def test_missing_fermi_level(self):
        z = np.linspace(0.0, 1e-8, 5)
        sb = Subband(0.0, z, np.ones(5), M)
        with pytest.raises(ValueError):
            PI(sb, 1.0e8, T)

    def test_iteration_ceiling(self):
        with pytest.raises(ScreeningIntegralDivergence):
            PI(_subband(), 1.0e8, T, max_steps=1)

    def test_divergence_is_floating_point_error(self):
        with pytest.raises(FloatingPointError):
            PI(_subband(), 1.0e8, T, max_steps=2)


class TestPolarizabilityTable:
    def setup_method(self):
        self.sb = _subband()
        self.Aijfg = new_table(1.0e9, 7)
        self.Aijfg['value'] = 1.0

    def test_screening_off(self):
        PIii = PI_table(self.Aijfg, self.sb, T, screening=False)
        assert np.array_equal(PIii['q'], self.Aijfg['q'])
        assert np.all(PIii['value'] == 0.0)

    def test_screening_on(self):
        PIii = PI_table(self.Aijfg, self.sb, T, screening=True)
        assert np.array_equal(PIii['q'], self.Aijfg['q'])
        for q, v in zip(PIii['q'], PIii['value']):
            assert v == PI(self.sb, q, T)

    def test_does_not_touch_form_factors(self):
        PI_table(self.Aijfg, self.sb, T)
        assert np.all(self.Aijfg['value'] == 1.0)

    def test_nodes_logged_at_debug2(self, caplog):
        with caplog.at_level(DEBUG2, logger="qwscatter"):
            PI_table(self.Aijfg, self.sb, T)
        assert len([r for r in caplog.records if r.levelno == DEBUG2]) == 7
