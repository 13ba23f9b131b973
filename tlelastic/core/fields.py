"""フィールド（名前付きの物理量）の定義と評価.

フィールド名は閉じた列挙 ``FieldName`` で管理する。文字列でも指定できるが、
未知の名前は ValueError とする。

フィールド種別:
  ConstantField          — 要素内一定（勾配ゼロ）
  NodalField             — 節点値を形状関数で補間
  IntegrationPointField  — 積分点ごとの値（勾配なし）
  TimeSeriesField        — 上記フィールドの時刻歴（区分線形補間）
"""

from __future__ import annotations

import bisect
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np

from tlelastic.core.errors import DimensionMismatchError

if TYPE_CHECKING:
    from tlelastic.core.state import IntegrationPoint


class FieldName(str, Enum):
    """認識されるフィールド名."""

    DISPLACEMENT = "displacement"
    GEOMETRY = "geometry"
    YOUNGS_MODULUS = "youngs modulus"
    POISSONS_RATIO = "poissons ratio"
    DISPLACEMENT_LOAD = "displacement load"
    DISPLACEMENT_TRACTION_FORCE = "displacement traction force"

    @classmethod
    def coerce(cls, name: str | FieldName) -> FieldName:
        """文字列または FieldName を FieldName に変換する."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"未知のフィールド名です: {name!r}") from None


def _as_value(arr: np.ndarray) -> float | np.ndarray:
    return float(arr) if arr.ndim == 0 else arr


class Field(ABC):
    """フィールドの基底クラス."""

    @abstractmethod
    def value(self, N: np.ndarray, ip: IntegrationPoint, time: float) -> float | np.ndarray:
        """積分点での値を返す.

        Args:
            N: (nnodes,) 形状関数値
            ip: 積分点
            time: 時刻
        """

    def gradient(self, dN: np.ndarray, ip: IntegrationPoint, time: float) -> np.ndarray:
        """積分点での空間勾配を返す.

        Args:
            dN: (dim, nnodes) 物理座標での形状関数勾配
        """
        raise ValueError(f"{type(self).__name__} は勾配を持ちません。")

    def nodal_values(self, time: float) -> np.ndarray:
        """節点値配列を返す（幾何フィールド用）."""
        raise ValueError(f"{type(self).__name__} は節点値を持ちません。")


class ConstantField(Field):
    """要素内で一定のフィールド."""

    def __init__(self, value: Any) -> None:
        self._value = np.array(value, dtype=float)

    def value(self, N, ip, time):
        return _as_value(self._value.copy())

    def gradient(self, dN, ip, time):
        dim = dN.shape[0]
        return np.zeros(self._value.shape + (dim,), dtype=float)


class NodalField(Field):
    """節点値を形状関数で補間するフィールド.

    Args:
        values: (nnodes,) スカラー場、または (nnodes, k) ベクトル場
    """

    def __init__(self, values: Any) -> None:
        arr = np.array(values, dtype=float)
        if arr.ndim not in (1, 2):
            raise DimensionMismatchError(
                f"節点値は (nnodes,) または (nnodes, k) が必要。実際: {arr.shape}"
            )
        self._values = arr

    @property
    def nnodes(self) -> int:
        return self._values.shape[0]

    def _check(self, n: int) -> None:
        if n != self.nnodes:
            raise DimensionMismatchError(
                f"節点数が一致しません: フィールド {self.nnodes}, 形状関数 {n}"
            )

    def value(self, N, ip, time):
        N = np.asarray(N, dtype=float)
        self._check(N.shape[0])
        return _as_value(N @ self._values)

    def gradient(self, dN, ip, time):
        dN = np.asarray(dN, dtype=float)
        self._check(dN.shape[1])
        if self._values.ndim == 1:
            return dN @ self._values
        # H_ij = Σ_A u_Ai ∂N_A/∂X_j
        return self._values.T @ dN.T

    def nodal_values(self, time):
        return self._values.copy()


class IntegrationPointField(Field):
    """積分点ごとの値を持つフィールド.

    Args:
        values: {積分点 id: 値}
    """

    def __init__(self, values: Mapping[int, Any]) -> None:
        self._values = {int(k): np.array(v, dtype=float) for k, v in values.items()}

    def value(self, N, ip, time):
        if ip.id not in self._values:
            raise ValueError(f"積分点 {ip.id} の値が定義されていません。")
        return _as_value(self._values[ip.id].copy())


class TimeSeriesField(Field):
    """時刻歴を持つフィールド（時刻方向に区分線形補間、範囲外は端値）.

    Args:
        entries: [(time, field), ...]。field は Field または生の値。
    """

    def __init__(self, entries: Iterable[tuple[float, Any]]) -> None:
        pairs = sorted(((float(t), as_field(f)) for t, f in entries), key=lambda p: p[0])
        if not pairs:
            raise ValueError("時刻歴が空です。")
        self._times = [t for t, _ in pairs]
        self._fields = [f for _, f in pairs]

    @property
    def times(self) -> list[float]:
        return list(self._times)

    def _bracket(self, time: float) -> tuple[Field, Field, float]:
        times = self._times
        if time <= times[0]:
            return self._fields[0], self._fields[0], 0.0
        if time >= times[-1]:
            return self._fields[-1], self._fields[-1], 0.0
        k = bisect.bisect_right(times, time)
        t0, t1 = times[k - 1], times[k]
        return self._fields[k - 1], self._fields[k], (time - t0) / (t1 - t0)

    def _blend(self, getter, time: float):
        f0, f1, alpha = self._bracket(time)
        v0 = np.asarray(getter(f0), dtype=float)
        if alpha == 0.0:
            return _as_value(v0)
        v1 = np.asarray(getter(f1), dtype=float)
        return _as_value((1.0 - alpha) * v0 + alpha * v1)

    def value(self, N, ip, time):
        return self._blend(lambda f: f.value(N, ip, time), time)

    def gradient(self, dN, ip, time):
        return np.asarray(self._blend(lambda f: f.gradient(dN, ip, time), time))

    def nodal_values(self, time):
        return np.asarray(self._blend(lambda f: f.nodal_values(time), time))


def as_field(value: Any) -> Field:
    """Field はそのまま、生の値は ConstantField として返す."""
    if isinstance(value, Field):
        return value
    return ConstantField(value)
