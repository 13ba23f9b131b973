"""弾性問題の定義.

問題種別（ProblemVariant）は構築時に一度だけ選ばれ、以後不変。
種別は Lamé 定数 λ の補正則の選択にのみ使われる
（tlelastic.materials.elastic.lame_correction）。
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tlelastic.core.fields import FieldName

_SUPPORTED_DIMS = (2, 3)


class ProblemVariant(Enum):
    """弾性問題の種別."""

    GENERIC_3D = "elasticity"
    PLANE_STRESS = "plane_stress"

    @property
    def default_dim(self) -> int:
        """既定の空間次元."""
        return 2 if self is ProblemVariant.PLANE_STRESS else 3

    @classmethod
    def from_name(cls, name: str | ProblemVariant) -> ProblemVariant:
        """値（"elasticity" 等）またはメンバー名（"GENERIC_3D" 等）から変換する."""
        if isinstance(name, cls):
            return name
        key = str(name).strip()
        for member in cls:
            if key == member.value or key.upper() == member.name:
                return member
        raise ValueError(
            f"問題種別は {[m.value for m in cls]} のいずれか: {name!r}"
        )


@dataclass
class Problem:
    """弾性問題.

    Attributes:
        variant: 問題種別（文字列も可）
        dim: 空間次元（2 または 3）。None なら種別の既定値。
        elements: 要素のリスト（順序付き）
    """

    variant: ProblemVariant
    dim: int | None = None
    elements: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.variant = ProblemVariant.from_name(self.variant)
        if self.dim is None:
            self.dim = self.variant.default_dim
        if self.dim not in _SUPPORTED_DIMS:
            raise ValueError(f"dim は 2 または 3 のみサポート: {self.dim}")
        self.elements = list(self.elements)

    @property
    def unknown_field_name(self) -> str:
        """未知数フィールド名."""
        return FieldName.DISPLACEMENT.value

    @property
    def unknown_field_dim(self) -> int:
        """未知数フィールドの成分数（= 空間次元）."""
        return self.dim

    def add_elements(self, elements: Iterable[Any]) -> None:
        """要素を末尾に追加する."""
        self.elements.extend(elements)

    def __len__(self) -> int:
        return len(self.elements)


def elasticity_problem(dim: int = 3, elements: Iterable[Any] = ()) -> Problem:
    """3D（一般）弾性問題を生成する."""
    return Problem(ProblemVariant.GENERIC_3D, dim, list(elements))


def plane_stress_elasticity_problem(dim: int = 2, elements: Iterable[Any] = ()) -> Problem:
    """平面応力弾性問題を生成する."""
    return Problem(ProblemVariant.PLANE_STRESS, dim, list(elements))
