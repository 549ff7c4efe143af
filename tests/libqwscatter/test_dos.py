"""
Tests for dos — bulk, quantum-well and quantum-wire densities of states.

Tolerances:
    closed forms : rtol=1e-12
"""
import numpy as np
import pytest
from scipy.constants import e as e0, hbar, m_e

from qwscatter.libqwscatter.dos import calculate_dos_1D, calculate_dos_2D, calculate_dos_3D

RTOL = 1e-12
M = 0.067 * m_e
meV = 1e-3 * e0


class TestBulk:
    def test_parabolic(self):
        E, V = 50.0 * meV, 10.0 * meV
        expected = (2.0 * M / hbar**2) ** 1.5 * np.sqrt(E - V) / (2.0 * np.pi**2)
        assert np.isclose(calculate_dos_3D(M, E, V), expected, rtol=RTOL)

    def test_zero_below_edge(self):
        assert calculate_dos_3D(M, 5.0 * meV, 10.0 * meV) == 0.0
        assert calculate_dos_3D(M, 10.0 * meV, 10.0 * meV) == 0.0

    def test_nonparabolic_correction(self):
        E, V, alpha = 50.0 * meV, 0.0, 0.6 / e0
        ratio = calculate_dos_3D(M, E, V, alpha) / calculate_dos_3D(M, E, V)
        assert np.isclose(ratio, 1.0 + alpha * 2.0 * E, rtol=RTOL)

    def test_array_input(self):
        E = np.array([0.0, 20.0, 40.0]) * meV
        rho = calculate_dos_3D(M, E, 10.0 * meV)
        assert rho.shape == (3,)
        assert rho[0] == 0.0
        assert np.all(rho[1:] > 0.0)

    def test_square_root_scaling(self):
        r1 = calculate_dos_3D(M, 10.0 * meV, 0.0)
        r4 = calculate_dos_3D(M, 40.0 * meV, 0.0)
        assert np.isclose(r4 / r1, 2.0, rtol=RTOL)


class TestWell:
    def setup_method(self):
        self.Esb = np.array([20.0, 80.0, 180.0]) * meV
        self.step = M / (np.pi * hbar**2)

    @pytest.mark.parametrize("E, nocc", [(10.0, 0), (50.0, 1), (100.0, 2), (300.0, 3)])
    def test_staircase(self, E, nocc):
        assert np.isclose(calculate_dos_2D(M, E * meV, self.Esb), nocc * self.step,
                          rtol=RTOL, atol=0.0)

    def test_nonparabolic(self):
        alpha = 0.6 / e0
        E = 50.0 * meV
        expected = self.step * (1.0 + alpha * 2.0 * E)
        assert np.isclose(calculate_dos_2D(M, E, self.Esb, 0.0, alpha), expected, rtol=RTOL)


class TestWire:
    def test_single_subband(self):
        E, Esb = 30.0 * meV, np.array([10.0 * meV])
        expected = np.sqrt(2.0 * M) / hbar / (np.pi * np.sqrt(E - Esb[0]))
        assert np.isclose(calculate_dos_1D(M, E, Esb), expected, rtol=RTOL)

    def test_empty_below_first_subband(self):
        assert calculate_dos_1D(M, 5.0 * meV, np.array([10.0, 20.0]) * meV) == 0.0

    def test_sums_occupied_subbands(self):
        Esb = np.array([10.0, 20.0, 90.0]) * meV
        E = 40.0 * meV
        total = calculate_dos_1D(M, E, Esb)
        parts = sum(calculate_dos_1D(M, E, Esb[n:n + 1]) for n in range(2))
        assert np.isclose(total, parts, rtol=RTOL)
