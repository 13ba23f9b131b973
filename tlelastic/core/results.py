"""メソッド戻り値の型定義.

NamedTuple を採用する理由:
  - 名前付きフィールドアクセス（result.F, result.residual 等）
  - タプルアンパッキングとの互換（F, E = compute_deformation(grad_u)）
  - 不変（immutable）
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np


class Deformation(NamedTuple):
    """運動学量.

    Attributes:
        F: (dim, dim) 変形勾配
        E: (dim, dim) Green-Lagrange ひずみ
    """

    F: np.ndarray
    E: np.ndarray


class LameParameters(NamedTuple):
    """Lamé 定数.

    Attributes:
        lam: λ（平面応力問題では補正後の値）
        mu: μ（せん断弾性係数）
    """

    lam: float
    mu: float


class ResidualResult(NamedTuple):
    """積分点 1 点での残差評価結果.

    内力項が無効（材料フィールドなし）の場合、F 以降は None。

    Attributes:
        residual: (dim * nnodes,) 節点順に並べた残差ベクトル
        F: (dim, dim) 変形勾配
        E: (dim, dim) Green-Lagrange ひずみ
        S: (dim, dim) 第二 Piola-Kirchhoff 応力
        cauchy_stress: (dim, dim) Cauchy 応力 σ = J⁻¹ F S Fᵀ
        J: det(F)
    """

    residual: np.ndarray
    F: np.ndarray | None = None
    E: np.ndarray | None = None
    S: np.ndarray | None = None
    cauchy_stress: np.ndarray | None = None
    J: float | None = None
