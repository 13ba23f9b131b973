"""積分点とその補助状態の管理.

積分点は要素ごとに独立のインスタンスを持つ。補助状態 ``state`` は
残差計算で得られたテンソル（"gl strain" 等）を保持する唯一の場所。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

GL_STRAIN = "gl strain"


@dataclass
class IntegrationPoint:
    """積分点.

    Attributes:
        id: 要素内の積分点番号（0始まり）
        coords: 自然座標 (ref_dim,)
        weight: 積分重み
        state: 補助状態（キー → 値）。書き込みは同期されない。
    """

    id: int
    coords: np.ndarray
    weight: float = 1.0
    state: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.coords = np.atleast_1d(np.asarray(self.coords, dtype=float))

    def set_state(self, key: str, value: Any) -> None:
        """補助状態を上書きする（配列はコピーして保持）."""
        if isinstance(value, np.ndarray):
            value = value.copy()
        self.state[key] = value

    def get_state(self, key: str, default: Any = None) -> Any:
        return self.state.get(key, default)

    def copy(self) -> IntegrationPoint:
        """補助状態を含む深いコピーを返す."""
        return IntegrationPoint(
            id=self.id,
            coords=self.coords.copy(),
            weight=self.weight,
            state={
                k: (v.copy() if isinstance(v, np.ndarray) else v) for k, v in self.state.items()
            },
        )
