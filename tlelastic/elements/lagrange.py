"""Lagrange 要素（Seg2 / Tri3 / Quad4 / Tet4 / Hex8）.

FieldAccessorProtocol の参照実装。節点座標は "geometry" 節点フィールドで与え、
形状関数勾配は参照配置の物理座標について計算する:

  J = X^T dN/dξ^T          (sdim, rdim)
  dN/dX = J^-T dN/dξ       (sdim == rdim の場合のみ)
  |J| = det J              (ソリッド)
  |J| = sqrt(det(J^T J))   (境界: 2D の Seg2、3D の Tri3 / Quad4)

節点順序（自然座標）:
  Seg2:  0:(-1)  1:(+1)
  Tri3:  0:(0,0)  1:(1,0)  2:(0,1)
  Quad4: 0:(-1,-1)  1:(+1,-1)  2:(+1,+1)  3:(-1,+1)
  Tet4:  0:(0,0,0)  1:(1,0,0)  2:(0,1,0)  3:(0,0,1)
  Hex8:  0:(-1,-1,-1) 1:(+1,-1,-1) 2:(+1,+1,-1) 3:(-1,+1,-1)
         4:(-1,-1,+1) 5:(+1,-1,+1) 6:(+1,+1,+1) 7:(-1,+1,+1)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from tlelastic.core.errors import DimensionMismatchError, ElementGeometryError
from tlelastic.core.fields import ConstantField, Field, FieldName, NodalField, as_field
from tlelastic.core.state import IntegrationPoint

# ============================================================
# ガウス積分点
# ============================================================

_G2 = 1.0 / np.sqrt(3.0)
_GAUSS_2 = [(-_G2,), (_G2,)]
_GAUSS_2x2 = [(-_G2, -_G2), (_G2, -_G2), (_G2, _G2), (-_G2, _G2)]
_GAUSS_2x2x2 = [
    (-_G2, -_G2, -_G2),
    (+_G2, -_G2, -_G2),
    (+_G2, +_G2, -_G2),
    (-_G2, +_G2, -_G2),
    (-_G2, -_G2, +_G2),
    (+_G2, -_G2, +_G2),
    (+_G2, +_G2, +_G2),
    (-_G2, +_G2, +_G2),
]
# 三角形 3 点則（2 次精度）、重み和 = 1/2
_TRI_3 = [(1.0 / 6.0, 1.0 / 6.0), (2.0 / 3.0, 1.0 / 6.0), (1.0 / 6.0, 2.0 / 3.0)]
# 四面体 4 点則（2 次精度）、重み和 = 1/6
_TA = 0.5854101966249685
_TB = 0.1381966011250105
_TET_4 = [(_TB, _TB, _TB), (_TA, _TB, _TB), (_TB, _TA, _TB), (_TB, _TB, _TA)]


# ============================================================
# 形状関数
# ============================================================


def _seg2_shape(xi: np.ndarray) -> np.ndarray:
    x = xi[0]
    return np.array([0.5 * (1.0 - x), 0.5 * (1.0 + x)])


def _seg2_dNdxi(xi: np.ndarray) -> np.ndarray:
    return np.array([[-0.5, 0.5]])


def _tri3_shape(xi: np.ndarray) -> np.ndarray:
    x, y = xi
    return np.array([1.0 - x - y, x, y])


def _tri3_dNdxi(xi: np.ndarray) -> np.ndarray:
    return np.array([[-1.0, 1.0, 0.0], [-1.0, 0.0, 1.0]])


def _quad4_shape(xi: np.ndarray) -> np.ndarray:
    x, y = xi
    return 0.25 * np.array(
        [(1.0 - x) * (1.0 - y), (1.0 + x) * (1.0 - y), (1.0 + x) * (1.0 + y), (1.0 - x) * (1.0 + y)]
    )


def _quad4_dNdxi(xi: np.ndarray) -> np.ndarray:
    """Returns: (2, 4) — [dN/dξ; dN/dη]"""
    x, y = xi
    return 0.25 * np.array(
        [
            [-(1.0 - y), (1.0 - y), (1.0 + y), -(1.0 + y)],
            [-(1.0 - x), -(1.0 + x), (1.0 + x), (1.0 - x)],
        ]
    )


def _tet4_shape(xi: np.ndarray) -> np.ndarray:
    x, y, z = xi
    return np.array([1.0 - x - y - z, x, y, z])


def _tet4_dNdxi(xi: np.ndarray) -> np.ndarray:
    return np.array(
        [
            [-1.0, 1.0, 0.0, 0.0],
            [-1.0, 0.0, 1.0, 0.0],
            [-1.0, 0.0, 0.0, 1.0],
        ]
    )


def _hex8_shape(xi: np.ndarray) -> np.ndarray:
    x, y, z = xi
    xm, xp = 1.0 - x, 1.0 + x
    em, ep = 1.0 - y, 1.0 + y
    zm, zp = 1.0 - z, 1.0 + z
    return 0.125 * np.array(
        [
            xm * em * zm,
            xp * em * zm,
            xp * ep * zm,
            xm * ep * zm,
            xm * em * zp,
            xp * em * zp,
            xp * ep * zp,
            xm * ep * zp,
        ]
    )


def _hex8_dNdxi(xi: np.ndarray) -> np.ndarray:
    """Returns: (3, 8) — [dN/dξ; dN/dη; dN/dζ]"""
    x, y, z = xi
    xm, xp = 1.0 - x, 1.0 + x
    em, ep = 1.0 - y, 1.0 + y
    zm, zp = 1.0 - z, 1.0 + z
    return 0.125 * np.array(
        [
            # dN/dξ
            [-em * zm, +em * zm, +ep * zm, -ep * zm, -em * zp, +em * zp, +ep * zp, -ep * zp],
            # dN/dη
            [-xm * zm, -xp * zm, +xp * zm, +xm * zm, -xm * zp, -xp * zp, +xp * zp, +xm * zp],
            # dN/dζ
            [-xm * em, -xp * em, -xp * ep, -xm * ep, +xm * em, +xp * em, +xp * ep, +xm * ep],
        ]
    )


@dataclass(frozen=True)
class ReferenceCell:
    """参照要素の定義.

    Attributes:
        name: 要素名
        nnodes: 節点数
        ref_dim: 自然座標の次元
        shape: ξ → N (nnodes,)
        dshape: ξ → dN/dξ (ref_dim, nnodes)
        gauss_points: 積分点の自然座標
        gauss_weights: 積分重み
    """

    name: str
    nnodes: int
    ref_dim: int
    shape: Callable[[np.ndarray], np.ndarray]
    dshape: Callable[[np.ndarray], np.ndarray]
    gauss_points: tuple[tuple[float, ...], ...]
    gauss_weights: tuple[float, ...]


SEG2 = ReferenceCell("Seg2", 2, 1, _seg2_shape, _seg2_dNdxi, tuple(_GAUSS_2), (1.0, 1.0))
TRI3 = ReferenceCell("Tri3", 3, 2, _tri3_shape, _tri3_dNdxi, tuple(_TRI_3), (1.0 / 6.0,) * 3)
QUAD4 = ReferenceCell("Quad4", 4, 2, _quad4_shape, _quad4_dNdxi, tuple(_GAUSS_2x2), (1.0,) * 4)
TET4 = ReferenceCell("Tet4", 4, 3, _tet4_shape, _tet4_dNdxi, tuple(_TET_4), (1.0 / 24.0,) * 4)
HEX8 = ReferenceCell("Hex8", 8, 3, _hex8_shape, _hex8_dNdxi, tuple(_GAUSS_2x2x2), (1.0,) * 8)

REFERENCE_CELLS: dict[str, ReferenceCell] = {
    cell.name: cell for cell in (SEG2, TRI3, QUAD4, TET4, HEX8)
}


def get_reference_cell(cell: str | ReferenceCell) -> ReferenceCell:
    """要素名（大文字小文字を区別しない）から参照要素を返す."""
    if isinstance(cell, ReferenceCell):
        return cell
    for name, ref in REFERENCE_CELLS.items():
        if name.lower() == str(cell).lower():
            return ref
    raise ValueError(f"要素タイプは {list(REFERENCE_CELLS)} のいずれか: {cell!r}")


# ============================================================
# 要素
# ============================================================


class Element:
    """Lagrange 要素（FieldAccessorProtocol 適合）.

    Args:
        cell: 要素タイプ名（"Quad4" 等）または ReferenceCell
        connectivity: 全体節点番号（任意、残差計算では使わない）

    Usage::

        el = Element("Quad4", [0, 1, 2, 3])
        el.set_nodal_field("geometry", [[0, 0], [1, 0], [1, 1], [0, 1]])
        el.set_constant_field("youngs modulus", 210e3)
        el.set_constant_field("poissons ratio", 0.3)
    """

    def __init__(
        self,
        cell: str | ReferenceCell,
        connectivity: Sequence[int] | None = None,
    ) -> None:
        self.cell = get_reference_cell(cell)
        if connectivity is not None:
            connectivity = np.asarray(connectivity, dtype=int)
            if connectivity.shape != (self.cell.nnodes,):
                raise DimensionMismatchError(
                    f"{self.cell.name} の接続は ({self.cell.nnodes},) が必要。実際: {connectivity.shape}"
                )
        self.connectivity = connectivity
        self.fields: dict[FieldName, Field] = {}
        self._ips: list[IntegrationPoint] | None = None

    @property
    def nnodes(self) -> int:
        return self.cell.nnodes

    def __len__(self) -> int:
        return self.cell.nnodes

    def __repr__(self) -> str:
        names = [n.value for n in self.fields]
        return f"Element({self.cell.name!r}, fields={names})"

    # ---------------- フィールド ----------------

    def set_field(self, name: str | FieldName, field: Any) -> None:
        """フィールドを設定する（生の値は ConstantField として扱う）."""
        field = as_field(field)
        if isinstance(field, NodalField) and field.nnodes != self.nnodes:
            raise DimensionMismatchError(
                f"{self.cell.name} の節点数 {self.nnodes} とフィールドの節点数 {field.nnodes} が不一致"
            )
        self.fields[FieldName.coerce(name)] = field

    def set_constant_field(self, name: str | FieldName, value: Any) -> None:
        self.set_field(name, ConstantField(value))

    def set_nodal_field(self, name: str | FieldName, values: Any) -> None:
        self.set_field(name, NodalField(values))

    def __setitem__(self, name: str | FieldName, field: Any) -> None:
        self.set_field(name, field)

    def __getitem__(self, name: str | FieldName) -> Field:
        return self.fields[FieldName.coerce(name)]

    def __contains__(self, name: object) -> bool:
        return self.has_field(name)  # type: ignore[arg-type]

    def has_field(self, name: str | FieldName) -> bool:
        try:
            return FieldName.coerce(name) in self.fields
        except ValueError:
            return False

    # ---------------- 積分点 ----------------

    def integration_points(self) -> list[IntegrationPoint]:
        """積分点リスト（キャッシュ。補助状態は要素の寿命中保持される）."""
        if self._ips is None:
            self._ips = [
                IntegrationPoint(id=i, coords=np.array(xi), weight=w)
                for i, (xi, w) in enumerate(
                    zip(self.cell.gauss_points, self.cell.gauss_weights, strict=True)
                )
            ]
        return self._ips

    # ---------------- 形状関数 ----------------

    def _geometry(self, time: float) -> np.ndarray:
        if FieldName.GEOMETRY not in self.fields:
            raise ElementGeometryError(f"{self.cell.name}: 'geometry' フィールドが未定義です。")
        X = np.asarray(self.fields[FieldName.GEOMETRY].nodal_values(time), dtype=float)
        if X.ndim != 2 or X.shape[0] != self.nnodes:
            raise DimensionMismatchError(
                f"geometry は ({self.nnodes}, sdim) が必要。実際: {X.shape}"
            )
        return X

    def _jacobian(self, ip: IntegrationPoint, time: float) -> np.ndarray:
        """J_ij = ∂X_i/∂ξ_j  (sdim, rdim)."""
        X = self._geometry(time)
        return X.T @ self.cell.dshape(ip.coords).T

    def basis_values(self, ip: IntegrationPoint, time: float) -> np.ndarray:
        return self.cell.shape(ip.coords)

    def basis_gradients(self, ip: IntegrationPoint, time: float) -> np.ndarray:
        """物理座標での形状関数勾配 dN/dX (sdim, nnodes)."""
        J = self._jacobian(ip, time)
        if J.shape[0] != J.shape[1]:
            raise ElementGeometryError(
                f"{self.cell.name} は {J.shape[0]}D 空間の境界要素のため形状関数勾配を持ちません。"
            )
        detJ = np.linalg.det(J)
        if detJ <= 0.0:
            raise ElementGeometryError(f"detJ={detJ:.3e} <= 0（反転要素）")
        return np.linalg.solve(J.T, self.cell.dshape(ip.coords))

    def determinant(self, ip: IntegrationPoint, time: float) -> float:
        J = self._jacobian(ip, time)
        if J.shape[0] == J.shape[1]:
            return float(np.linalg.det(J))
        return float(np.sqrt(np.linalg.det(J.T @ J)))

    # ---------------- フィールド評価 ----------------

    def field_value(self, name: str | FieldName, ip: IntegrationPoint, time: float):
        return self[name].value(self.basis_values(ip, time), ip, time)

    def field_gradient(self, name: str | FieldName, ip: IntegrationPoint, time: float):
        return self[name].gradient(self.basis_gradients(ip, time), ip, time)
