"""要素（フィールドアクセサ）の抽象インタフェース定義.

残差計算が要素に求める最小限の窓口。メッシュ・要素データの保持方法は
実装側に任せ、残差計算は本 Protocol 経由でのみ値を参照する。

適合クラス例:
  - tlelastic.elements.lagrange.Element  (Seg2/Tri3/Quad4/Tet4/Hex8)
  - テスト用の 1 点要素スタブ
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from tlelastic.core.fields import FieldName
    from tlelastic.core.state import IntegrationPoint


@runtime_checkable
class FieldAccessorProtocol(Protocol):
    """フィールド・形状関数へのアクセスを提供する要素のインタフェース.

    Attributes:
        nnodes: 要素の節点数
    """

    nnodes: int

    def has_field(self, name: str | FieldName) -> bool:
        """フィールドが定義されているか."""
        ...

    def field_value(
        self, name: str | FieldName, ip: IntegrationPoint, time: float
    ) -> float | np.ndarray:
        """積分点でのフィールド値（スカラー / (dim,) / (dim, dim)）."""
        ...

    def field_gradient(self, name: str | FieldName, ip: IntegrationPoint, time: float) -> np.ndarray:
        """積分点でのフィールドの空間勾配。ベクトル場なら (dim, dim)."""
        ...

    def basis_values(self, ip: IntegrationPoint, time: float) -> np.ndarray:
        """形状関数値 (nnodes,)."""
        ...

    def basis_gradients(self, ip: IntegrationPoint, time: float) -> np.ndarray:
        """物理座標での形状関数勾配 (dim, nnodes)."""
        ...

    def determinant(self, ip: IntegrationPoint, time: float) -> float:
        """参照→物理写像の Jacobian 行列式（積分重み用）."""
        ...
