"""構成則（材料モデル）の抽象インタフェース定義.

Protocol 定義:
  ConstitutiveProtocol — 超弾性型（Green-Lagrange ひずみ → 第二 Piola-Kirchhoff 応力）。

適合クラス例:
  - SaintVenantKirchhoff
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class ConstitutiveProtocol(Protocol):
    """構成則の共通インタフェース.

    stress() はテンソル形式 (dim, dim)、tangent() は Voigt 形式の
    弾性マトリクスを返す。両者は S_voigt = D @ E_voigt で整合する。
    """

    def stress(self, E: np.ndarray) -> np.ndarray:
        """第二 Piola-Kirchhoff 応力 S を返す.

        Args:
            E: (dim, dim) Green-Lagrange ひずみ

        Returns:
            S: (dim, dim) 対称テンソル
        """
        ...

    def tangent(self, strain: np.ndarray | None = None) -> np.ndarray:
        """弾性/接線剛性テンソル D を返す.

        Returns:
            D: 平面問題 (3, 3)、3D (6, 6)
        """
        ...
