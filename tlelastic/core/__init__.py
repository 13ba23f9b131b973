"""tlelastic.core - 要素・構成則の抽象インタフェース定義・フィールド・戻り値型.

Protocol:
  FieldAccessorProtocol  — 残差計算が要素に求めるフィールド・形状関数アクセス
  ConstitutiveProtocol   — GL ひずみ → 第二 Piola-Kirchhoff 応力
"""

from tlelastic.core.constitutive import ConstitutiveProtocol
from tlelastic.core.element import FieldAccessorProtocol
from tlelastic.core.errors import (
    DimensionMismatchError,
    ElasticityError,
    ElementGeometryError,
    MaterialParameterError,
)
from tlelastic.core.fields import (
    ConstantField,
    Field,
    FieldName,
    IntegrationPointField,
    NodalField,
    TimeSeriesField,
    as_field,
)
from tlelastic.core.results import Deformation, LameParameters, ResidualResult
from tlelastic.core.state import GL_STRAIN, IntegrationPoint

__all__ = [
    "FieldAccessorProtocol",
    "ConstitutiveProtocol",
    "ElasticityError",
    "MaterialParameterError",
    "DimensionMismatchError",
    "ElementGeometryError",
    "FieldName",
    "Field",
    "ConstantField",
    "NodalField",
    "IntegrationPointField",
    "TimeSeriesField",
    "as_field",
    "Deformation",
    "LameParameters",
    "ResidualResult",
    "GL_STRAIN",
    "IntegrationPoint",
]
