"""例外クラス.

すべて ValueError の派生とし、``pytest.raises(ValueError)`` 等の
既存の捕捉コードとも互換にする。
"""

from __future__ import annotations


class ElasticityError(ValueError):
    """tlelastic の例外基底クラス."""


class MaterialParameterError(ElasticityError):
    """材料パラメータが物理的に不正（E <= 0, ν ∉ (-1, 0.5)）."""


class DimensionMismatchError(ElasticityError):
    """節点数・次元・テンソル形状の不整合."""


class ElementGeometryError(ElasticityError):
    """要素形状が不正（反転要素、境界要素での勾配要求、geometry 未定義）."""
