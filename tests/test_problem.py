"""問題定義（ProblemVariant / Problem）のテスト."""

from __future__ import annotations

import pytest

from tlelastic.elements.lagrange import Element
from tlelastic.problem import (
    Problem,
    ProblemVariant,
    elasticity_problem,
    plane_stress_elasticity_problem,
)


class TestProblemVariant:
    def test_default_dims(self):
        assert ProblemVariant.GENERIC_3D.default_dim == 3
        assert ProblemVariant.PLANE_STRESS.default_dim == 2

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("elasticity", ProblemVariant.GENERIC_3D),
            ("GENERIC_3D", ProblemVariant.GENERIC_3D),
            ("plane_stress", ProblemVariant.PLANE_STRESS),
            ("plane_STRESS", ProblemVariant.PLANE_STRESS),
            (ProblemVariant.PLANE_STRESS, ProblemVariant.PLANE_STRESS),
        ],
    )
    def test_from_name(self, name, expected):
        assert ProblemVariant.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            ProblemVariant.from_name("plane_strain")


class TestProblem:
    def test_factory_defaults(self):
        p3 = elasticity_problem()
        assert p3.variant is ProblemVariant.GENERIC_3D
        assert p3.dim == 3
        ps = plane_stress_elasticity_problem()
        assert ps.variant is ProblemVariant.PLANE_STRESS
        assert ps.dim == 2

    def test_dim_override(self):
        """一般弾性問題を 2D（平面ひずみ）として使う."""
        p = elasticity_problem(dim=2)
        assert p.dim == 2
        assert p.variant is ProblemVariant.GENERIC_3D

    def test_string_variant_coerced(self):
        p = Problem("plane_stress")
        assert p.variant is ProblemVariant.PLANE_STRESS
        assert p.dim == 2

    @pytest.mark.parametrize("dim", [0, 1, 4])
    def test_invalid_dim(self, dim):
        with pytest.raises(ValueError):
            Problem(ProblemVariant.GENERIC_3D, dim)

    def test_unknown_field(self):
        p = plane_stress_elasticity_problem()
        assert p.unknown_field_name == "displacement"
        assert p.unknown_field_dim == 2

    def test_elements_owned_in_order(self):
        e1, e2, e3 = Element("Quad4"), Element("Tri3"), Element("Seg2")
        elements = [e1, e2]
        p = plane_stress_elasticity_problem(elements=elements)
        p.add_elements([e3])
        assert p.elements == [e1, e2, e3]
        assert len(p) == 3
        # 渡したリストは変更されない
        assert elements == [e1, e2]
