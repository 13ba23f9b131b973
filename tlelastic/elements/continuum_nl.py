"""有限ひずみ運動学（Total Lagrangian 定式化）.

- 変形勾配: F = I + ∇u
- Green-Lagrange ひずみ: E = 0.5*(F^T F - I)
- Cauchy 応力: σ = J⁻¹ F S F^T,  J = det F

E は剛体回転に対して不変: F = R (RᵀR = I) なら E = 0。
2D / 3D を同じ関数で扱う（次元は入力テンソルの形状から決まる）。
"""

from __future__ import annotations

import numpy as np

from tlelastic.core.errors import DimensionMismatchError
from tlelastic.core.results import Deformation


def _square(a: np.ndarray, name: str) -> np.ndarray:
    a = np.asarray(a, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1] or a.shape[0] not in (1, 2, 3):
        raise DimensionMismatchError(f"{name} は (dim, dim) が必要。実際: {a.shape}")
    return a


# ---------------------------------------------------------------------------
# 変形勾配テンソル
# ---------------------------------------------------------------------------
def deformation_gradient(grad_u: np.ndarray) -> np.ndarray:
    """F = I + ∇u.

    Args:
        grad_u: (dim, dim) 変位勾配 H_ij = ∂u_i/∂X_j

    Returns:
        F: (dim, dim)
    """
    H = _square(grad_u, "grad_u")
    return np.eye(H.shape[0]) + H


# ---------------------------------------------------------------------------
# Green-Lagrange ひずみ
# ---------------------------------------------------------------------------
def green_lagrange_strain(F: np.ndarray) -> np.ndarray:
    """E = 0.5*(F^T F - I)（テンソル形式、対称）."""
    F = _square(F, "F")
    E = 0.5 * (F.T @ F - np.eye(F.shape[0]))
    # 丸め誤差による非対称成分を除去
    return 0.5 * (E + E.T)


def green_lagrange_strain_voigt(F: np.ndarray) -> np.ndarray:
    """Green-Lagrange ひずみを Voigt 表記で返す.

    Returns:
        2D: (3,) [E₁₁, E₂₂, 2E₁₂]
        3D: (6,) [E₁₁, E₂₂, E₃₃, 2E₂₃, 2E₁₃, 2E₁₂] (engineering shear)
    """
    E = green_lagrange_strain(F)
    if E.shape[0] == 2:
        return np.array([E[0, 0], E[1, 1], 2.0 * E[0, 1]], dtype=float)
    if E.shape[0] == 3:
        return np.array(
            [E[0, 0], E[1, 1], E[2, 2], 2.0 * E[1, 2], 2.0 * E[0, 2], 2.0 * E[0, 1]],
            dtype=float,
        )
    raise DimensionMismatchError(f"Voigt 表記は 2D/3D のみ: {E.shape}")


def compute_deformation(grad_u: np.ndarray) -> Deformation:
    """変位勾配から (F, E) を求める."""
    F = deformation_gradient(grad_u)
    return Deformation(F=F, E=green_lagrange_strain(F))


# ---------------------------------------------------------------------------
# 応力の押し出し
# ---------------------------------------------------------------------------
def cauchy_stress(F: np.ndarray, S: np.ndarray) -> tuple[np.ndarray, float]:
    """第二 Piola-Kirchhoff 応力 S を Cauchy 応力へ押し出す.

    σ = J⁻¹ F S F^T,  J = det F

    Returns:
        (sigma, J): (dim, dim) Cauchy 応力と体積比
    """
    F = _square(F, "F")
    S = _square(S, "S")
    if F.shape != S.shape:
        raise DimensionMismatchError(f"F と S の形状が一致しません: {F.shape}, {S.shape}")
    J = np.linalg.det(F)
    with np.errstate(divide="ignore", invalid="ignore"):
        sigma = (1.0 / J) * F @ S @ F.T
    return sigma, float(J)
