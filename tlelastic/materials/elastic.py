"""St. Venant-Kirchhoff 超弾性構成則.

S = λ tr(E) I + 2μ E

  μ = E / (2(1+ν))
  λ = Eν / ((1+ν)(1-2ν))
  平面応力: λ ← 2λμ / (λ + 2μ)

λ の補正は問題種別ごとの表 ``_LAME_CORRECTIONS`` で選択する。

ν = -1, 0.5 や λ + 2μ = 0 では分母がゼロになる。既定では
check_material_parameters() で事前に弾く。check=False の場合は IEEE 演算の
まま inf/nan を返し、RuntimeWarning を出す。
"""

from __future__ import annotations

import warnings
from collections.abc import Callable

import numpy as np

from tlelastic.core.errors import DimensionMismatchError, MaterialParameterError
from tlelastic.core.results import LameParameters
from tlelastic.problem import ProblemVariant


def check_material_parameters(young: float, poisson: float) -> None:
    """材料パラメータの物理的妥当性を検査する.

    Raises:
        MaterialParameterError: E <= 0 または ν ∉ (-1, 0.5)
    """
    if not np.isfinite(young) or young <= 0.0:
        raise MaterialParameterError(f"ヤング率は正の有限値が必要: E={young}")
    if not (-1.0 < poisson < 0.5):
        raise MaterialParameterError(f"ポアソン比は (-1, 0.5) の範囲が必要: nu={poisson}")


# ---------------------------------------------------------------------------
# 問題種別ごとの λ 補正
# ---------------------------------------------------------------------------
def plane_stress_lambda(lam: float, mu: float) -> float:
    """平面応力の λ 補正: λ' = 2λμ / (λ + 2μ)."""
    return 2.0 * lam * mu / (lam + 2.0 * mu)


def _no_correction(lam: float, mu: float) -> float:
    return lam


_LAME_CORRECTIONS: dict[ProblemVariant, Callable[[float, float], float]] = {
    ProblemVariant.GENERIC_3D: _no_correction,
    ProblemVariant.PLANE_STRESS: plane_stress_lambda,
}


def lame_correction(variant: ProblemVariant | str) -> Callable[[float, float], float]:
    """問題種別に対応する λ 補正関数 (λ, μ) → λ' を返す."""
    return _LAME_CORRECTIONS[ProblemVariant.from_name(variant)]


def lame_parameters(
    young: float,
    poisson: float,
    variant: ProblemVariant | str = ProblemVariant.GENERIC_3D,
    *,
    check: bool = True,
) -> LameParameters:
    """ヤング率・ポアソン比から Lamé 定数を求める.

    Args:
        young: ヤング率
        poisson: ポアソン比
        variant: 問題種別（PLANE_STRESS なら λ を補正）
        check: True なら材料パラメータを事前検査する

    Returns:
        LameParameters: (lam, mu)
    """
    if check:
        check_material_parameters(young, poisson)

    E = np.float64(young)
    nu = np.float64(poisson)
    with np.errstate(divide="ignore", invalid="ignore"):
        mu = E / (2.0 * (1.0 + nu))
        lam = E * nu / ((1.0 + nu) * (1.0 - 2.0 * nu))
        lam = lame_correction(variant)(lam, mu)

    if not (np.isfinite(lam) and np.isfinite(mu)):
        warnings.warn(
            f"Lamé 定数が有限値ではありません: E={young}, nu={poisson}, lam={lam}, mu={mu}",
            RuntimeWarning,
            stacklevel=2,
        )
    return LameParameters(lam=float(lam), mu=float(mu))


# ---------------------------------------------------------------------------
# 応力
# ---------------------------------------------------------------------------
def second_piola_kirchhoff(E: np.ndarray, lam: float, mu: float) -> np.ndarray:
    """S = λ tr(E) I + 2μ E.

    Args:
        E: (dim, dim) Green-Lagrange ひずみ
        lam, mu: Lamé 定数

    Returns:
        S: (dim, dim)
    """
    E = np.asarray(E, dtype=float)
    if E.ndim != 2 or E.shape[0] != E.shape[1]:
        raise DimensionMismatchError(f"E は正方行列が必要。実際: {E.shape}")
    with np.errstate(invalid="ignore"):
        return lam * np.trace(E) * np.eye(E.shape[0]) + 2.0 * mu * E


def compute_stress(
    young: float,
    poisson: float,
    E: np.ndarray,
    variant: ProblemVariant | str = ProblemVariant.GENERIC_3D,
    *,
    check: bool = True,
) -> np.ndarray:
    """材料パラメータと GL ひずみから第二 Piola-Kirchhoff 応力を求める."""
    lam, mu = lame_parameters(young, poisson, variant, check=check)
    return second_piola_kirchhoff(E, lam, mu)


# ---------------------------------------------------------------------------
# Voigt 弾性マトリクス
# ---------------------------------------------------------------------------
def elasticity_matrix(lam: float, mu: float, dim: int) -> np.ndarray:
    """等方弾性マトリクス（Voigt, engineering shear）.

    2D: [E11, E22, 2E12] → [S11, S22, S12]  (3, 3)
    3D: [E11, E22, E33, 2E23, 2E13, 2E12] → [S11, S22, S33, S23, S13, S12]  (6, 6)
    """
    if dim == 2:
        return np.array(
            [[lam + 2.0 * mu, lam, 0.0], [lam, lam + 2.0 * mu, 0.0], [0.0, 0.0, mu]],
            dtype=float,
        )
    if dim == 3:
        D = np.zeros((6, 6), dtype=float)
        # 法線成分
        D[:3, :3] = lam
        D[0, 0] = D[1, 1] = D[2, 2] = lam + 2.0 * mu
        # せん断成分
        D[3, 3] = D[4, 4] = D[5, 5] = mu
        return D
    raise ValueError(f"dim は 2 または 3 のみサポート: {dim}")


def constitutive_plane_strain(E: float, nu: float) -> np.ndarray:
    """平面ひずみの弾性マトリクス D (3, 3) を返す."""
    lam, mu = lame_parameters(E, nu, ProblemVariant.GENERIC_3D)
    return elasticity_matrix(lam, mu, 2)


def constitutive_plane_stress(E: float, nu: float) -> np.ndarray:
    """平面応力の弾性マトリクス D (3, 3) を返す.

    E/(1-ν²) [[1, ν, 0], [ν, 1, 0], [0, 0, (1-ν)/2]] と一致する。
    """
    lam, mu = lame_parameters(E, nu, ProblemVariant.PLANE_STRESS)
    return elasticity_matrix(lam, mu, 2)


def constitutive_3d(E: float, nu: float) -> np.ndarray:
    """3D 等方弾性テンソル D (6, 6) を返す."""
    lam, mu = lame_parameters(E, nu, ProblemVariant.GENERIC_3D)
    return elasticity_matrix(lam, mu, 3)


class SaintVenantKirchhoff:
    """St. Venant-Kirchhoff 材料（ConstitutiveProtocol 適合）.

    Args:
        young: ヤング率
        poisson: ポアソン比
        variant: 問題種別
        dim: 空間次元。None なら種別の既定値。
        check: 材料パラメータを検査するか
    """

    def __init__(
        self,
        young: float,
        poisson: float,
        variant: ProblemVariant | str = ProblemVariant.GENERIC_3D,
        dim: int | None = None,
        *,
        check: bool = True,
    ) -> None:
        self.young = young
        self.poisson = poisson
        self.variant = ProblemVariant.from_name(variant)
        self.dim = self.variant.default_dim if dim is None else dim
        self.lame = lame_parameters(young, poisson, self.variant, check=check)
        self._D = elasticity_matrix(self.lame.lam, self.lame.mu, self.dim)

    def stress(self, E: np.ndarray) -> np.ndarray:
        E = np.asarray(E, dtype=float)
        if E.shape != (self.dim, self.dim):
            raise DimensionMismatchError(f"E は ({self.dim},{self.dim}) が必要。実際: {E.shape}")
        return second_piola_kirchhoff(E, self.lame.lam, self.lame.mu)

    def tangent(self, strain: np.ndarray | None = None) -> np.ndarray:
        """弾性テンソル D を返す（S と E の関係は線形なので strain に依存しない）."""
        return self._D
