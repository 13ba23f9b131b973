"""St. Venant-Kirchhoff 構成則のテスト.

テスト構成:
  1. Lamé 定数と平面応力補正（問題種別ごとの補正則）
  2. 第二 Piola-Kirchhoff 応力の対称性・線形性
  3. Voigt 弾性マトリクスとの整合（S_voigt = D @ E_voigt）
  4. 不正な材料パラメータの扱い
  5. ConstitutiveProtocol 適合性
"""

from __future__ import annotations

import warnings

import numpy as np
import pytest

from tlelastic.core.constitutive import ConstitutiveProtocol
from tlelastic.core.errors import DimensionMismatchError, MaterialParameterError
from tlelastic.elements.continuum_nl import green_lagrange_strain, green_lagrange_strain_voigt
from tlelastic.materials.elastic import (
    SaintVenantKirchhoff,
    check_material_parameters,
    compute_stress,
    constitutive_3d,
    constitutive_plane_strain,
    constitutive_plane_stress,
    lame_correction,
    lame_parameters,
    plane_stress_lambda,
    second_piola_kirchhoff,
)
from tlelastic.problem import ProblemVariant

E_STEEL = 210_000.0  # MPa
NU_STEEL = 0.3


def _lame_3d(E: float, nu: float) -> tuple[float, float]:
    mu = E / (2 * (1 + nu))
    lam = E * nu / ((1 + nu) * (1 - 2 * nu))
    return lam, mu


# ===================================================================
# Lamé 定数
# ===================================================================


class TestLameParameters:
    def test_generic_3d_unmodified(self):
        lam, mu = lame_parameters(E_STEEL, NU_STEEL, ProblemVariant.GENERIC_3D)
        lam_ref, mu_ref = _lame_3d(E_STEEL, NU_STEEL)
        assert lam == lam_ref
        assert mu == mu_ref

    def test_plane_stress_correction_exact(self):
        """λ' = 2λμ/(λ+2μ) を厳密に再現する."""
        lam_ref, mu_ref = _lame_3d(E_STEEL, NU_STEEL)
        lam, mu = lame_parameters(E_STEEL, NU_STEEL, ProblemVariant.PLANE_STRESS)
        assert mu == mu_ref
        assert lam == 2 * lam_ref * mu_ref / (lam_ref + 2 * mu_ref)

    def test_plane_stress_closed_form(self):
        """λ' = Eν/(1-ν²)."""
        lam, _ = lame_parameters(E_STEEL, NU_STEEL, "plane_stress")
        assert lam == pytest.approx(E_STEEL * NU_STEEL / (1 - NU_STEEL**2), rel=1e-13)

    def test_numeric_values(self):
        lam, mu = lame_parameters(E_STEEL, NU_STEEL)
        assert mu == pytest.approx(80769.23076923077, rel=1e-12)
        assert lam == pytest.approx(121153.84615384616, rel=1e-12)

    def test_correction_table(self):
        assert lame_correction(ProblemVariant.GENERIC_3D)(3.0, 2.0) == 3.0
        assert lame_correction(ProblemVariant.PLANE_STRESS) is plane_stress_lambda
        assert plane_stress_lambda(3.0, 2.0) == pytest.approx(12.0 / 7.0)


# ===================================================================
# 応力
# ===================================================================


class TestStress:
    @pytest.mark.parametrize("variant", list(ProblemVariant))
    def test_zero_strain_zero_stress(self, variant):
        S = compute_stress(E_STEEL, NU_STEEL, np.zeros((2, 2)), variant)
        np.testing.assert_array_equal(S, np.zeros((2, 2)))

    @pytest.mark.parametrize("dim", [2, 3])
    def test_symmetry(self, dim):
        rng = np.random.default_rng(0)
        F = np.eye(dim) + 0.2 * rng.standard_normal((dim, dim))
        E = green_lagrange_strain(F)
        S = compute_stress(E_STEEL, NU_STEEL, E)
        np.testing.assert_allclose(S, S.T, rtol=0, atol=1e-9)

    def test_formula(self):
        E = np.array([[0.01, 0.002], [0.002, -0.003]])
        lam, mu = 1.5, 2.5
        S = second_piola_kirchhoff(E, lam, mu)
        np.testing.assert_allclose(S, lam * np.trace(E) * np.eye(2) + 2 * mu * E)

    def test_non_square_rejected(self):
        with pytest.raises(DimensionMismatchError):
            second_piola_kirchhoff(np.zeros((2, 3)), 1.0, 1.0)


# ===================================================================
# Voigt 整合
# ===================================================================


class TestVoigtConsistency:
    """テンソル形式の S と Voigt 弾性マトリクスの整合."""

    F2 = np.array([[1.02, 0.01], [-0.005, 0.99]])
    F3 = np.array([[1.02, 0.01, 0.0], [-0.005, 0.99, 0.02], [0.01, 0.0, 1.01]])

    def test_plane_stress(self):
        mat = SaintVenantKirchhoff(E_STEEL, NU_STEEL, ProblemVariant.PLANE_STRESS)
        S = mat.stress(green_lagrange_strain(self.F2))
        S_v = mat.tangent() @ green_lagrange_strain_voigt(self.F2)
        np.testing.assert_allclose([S[0, 0], S[1, 1], S[0, 1]], S_v, rtol=1e-12)

    def test_plane_stress_matrix_closed_form(self):
        c = E_STEEL / (1 - NU_STEEL**2)
        D_ref = c * np.array(
            [[1, NU_STEEL, 0], [NU_STEEL, 1, 0], [0, 0, (1 - NU_STEEL) / 2]]
        )
        np.testing.assert_allclose(constitutive_plane_stress(E_STEEL, NU_STEEL), D_ref, rtol=1e-12)

    def test_plane_strain(self):
        mat = SaintVenantKirchhoff(E_STEEL, NU_STEEL, ProblemVariant.GENERIC_3D, dim=2)
        np.testing.assert_allclose(mat.tangent(), constitutive_plane_strain(E_STEEL, NU_STEEL))
        S = mat.stress(green_lagrange_strain(self.F2))
        S_v = mat.tangent() @ green_lagrange_strain_voigt(self.F2)
        np.testing.assert_allclose([S[0, 0], S[1, 1], S[0, 1]], S_v, rtol=1e-12)

    def test_3d(self):
        mat = SaintVenantKirchhoff(E_STEEL, NU_STEEL)
        assert mat.dim == 3
        np.testing.assert_allclose(mat.tangent(), constitutive_3d(E_STEEL, NU_STEEL))
        S = mat.stress(green_lagrange_strain(self.F3))
        S_v = mat.tangent() @ green_lagrange_strain_voigt(self.F3)
        np.testing.assert_allclose(
            [S[0, 0], S[1, 1], S[2, 2], S[1, 2], S[0, 2], S[0, 1]], S_v, rtol=1e-12, atol=1e-9
        )

    def test_stress_shape_checked(self):
        mat = SaintVenantKirchhoff(E_STEEL, NU_STEEL, "plane_stress")
        with pytest.raises(DimensionMismatchError):
            mat.stress(np.zeros((3, 3)))


# ===================================================================
# 不正な材料パラメータ
# ===================================================================


class TestMaterialValidation:
    @pytest.mark.parametrize(
        "young,poisson",
        [(0.0, 0.3), (-1.0, 0.3), (E_STEEL, 0.5), (E_STEEL, -1.0), (E_STEEL, 0.7), (np.inf, 0.3)],
    )
    def test_rejected(self, young, poisson):
        with pytest.raises(MaterialParameterError):
            check_material_parameters(young, poisson)
        with pytest.raises(ValueError):
            lame_parameters(young, poisson)

    def test_valid_auxetic(self):
        check_material_parameters(1.0, -0.5)

    def test_unchecked_propagates_non_finite(self):
        """check=False では ν=0.5 で非有限値が伝播し RuntimeWarning を出す."""
        with pytest.warns(RuntimeWarning):
            lam, mu = lame_parameters(E_STEEL, 0.5, check=False)
        assert not np.isfinite(lam)
        assert np.isfinite(mu)

    def test_unchecked_plane_stress_nan(self):
        with pytest.warns(RuntimeWarning):
            S = compute_stress(
                E_STEEL, -1.0, np.eye(2) * 1e-3, ProblemVariant.PLANE_STRESS, check=False
            )
        assert not np.all(np.isfinite(S))

    def test_valid_no_warning(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            lame_parameters(E_STEEL, NU_STEEL, check=False)


def test_protocol_isinstance():
    """SaintVenantKirchhoff が ConstitutiveProtocol に適合すること."""
    assert isinstance(SaintVenantKirchhoff(E_STEEL, NU_STEEL), ConstitutiveProtocol)
