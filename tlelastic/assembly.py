"""弾性問題の弱形式残差（積分点レベル）.

弱形式: ∀δu について

    δW := ∫ S:δE dV₀ - ∫ b₀·δu dV₀ - ∫ t₀·δu dA₀ = 0

積分点 1 点での寄与（重み・|J| は未乗算）:

    r = F S ∇N - b ⊗ N - t ⊗ N     (dim, nnodes)

を節点順（[u1x, u1y, u2x, u2y, ...]）に平坦化して返す。

各項は対応するフィールドがある場合のみ有効:
  内力       — "youngs modulus" と "poissons ratio"
  物体力     — "displacement load"
  表面力     — "displacement traction force"
フィールドが無いことはエラーではなく、その項を無効にするだけ。

評価モード:
  Value()              — 要素に格納された変位を使う
  Variation(direction) — 与えた節点変位を使う（線形化・仮想仕事評価用）

副作用は residual() による ``ip.state["gl strain"]`` の上書きのみ。
同一積分点への並行呼出しは呼出し側で直列化すること。
"""

from __future__ import annotations

import time as _time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

import numpy as np

from tlelastic.core.errors import DimensionMismatchError
from tlelastic.core.fields import FieldName
from tlelastic.core.results import ResidualResult
from tlelastic.core.state import GL_STRAIN
from tlelastic.elements.continuum_nl import cauchy_stress, compute_deformation
from tlelastic.materials.elastic import SaintVenantKirchhoff

if TYPE_CHECKING:
    from tlelastic.core.constitutive import ConstitutiveProtocol
    from tlelastic.core.element import FieldAccessorProtocol
    from tlelastic.core.state import IntegrationPoint
    from tlelastic.problem import Problem


# ====================================================================
# 評価モード
# ====================================================================


@dataclass(frozen=True)
class Value:
    """要素に格納された変位フィールドで評価する."""


@dataclass(frozen=True)
class Variation:
    """与えた節点変位で評価する.

    Attributes:
        direction: (nnodes, dim) または節点順に平坦化した (dim * nnodes,)
    """

    direction: np.ndarray


EvaluationMode = Union[Value, Variation]

VALUE = Value()


# ====================================================================
# 内部ヘルパー
# ====================================================================


def _nodal_direction(direction: np.ndarray, dim: int, nnodes: int) -> np.ndarray:
    """Variation の節点変位を (nnodes, dim) に揃える."""
    d = np.asarray(direction, dtype=float)
    if d.shape == (nnodes, dim):
        return d
    if d.shape == (dim * nnodes,):
        return d.reshape(nnodes, dim)
    raise DimensionMismatchError(
        f"variation は ({nnodes},{dim}) または ({dim * nnodes},) が必要。実際: {d.shape}"
    )


def _basis_values(element, ip, time, nnodes: int) -> np.ndarray:
    N = np.asarray(element.basis_values(ip, time), dtype=float).ravel()
    if N.shape != (nnodes,):
        raise DimensionMismatchError(f"形状関数値は ({nnodes},) が必要。実際: {N.shape}")
    return N


def _basis_gradients(element, ip, time, dim: int, nnodes: int) -> np.ndarray:
    dN = np.asarray(element.basis_gradients(ip, time), dtype=float)
    if dN.shape != (dim, nnodes):
        raise DimensionMismatchError(
            f"形状関数勾配は ({dim},{nnodes}) が必要。実際: {dN.shape}"
        )
    return dN


def _displacement_gradient(
    element, ip, time, mode: EvaluationMode, dN: np.ndarray, dim: int
) -> np.ndarray:
    """∇u (dim, dim)。変位フィールドが無ければゼロ（参照配置）."""
    nnodes = dN.shape[1]
    if isinstance(mode, Variation):
        u = _nodal_direction(mode.direction, dim, nnodes)
        return u.T @ dN.T
    if not element.has_field(FieldName.DISPLACEMENT):
        return np.zeros((dim, dim), dtype=float)
    H = np.asarray(element.field_gradient(FieldName.DISPLACEMENT, ip, time), dtype=float)
    if H.shape != (dim, dim):
        raise DimensionMismatchError(f"変位勾配は ({dim},{dim}) が必要。実際: {H.shape}")
    return H


def _load_vector(element, name: FieldName, ip, time, dim: int) -> np.ndarray:
    b = np.asarray(element.field_value(name, ip, time), dtype=float)
    if b.shape != (dim,):
        raise DimensionMismatchError(f"'{name.value}' は ({dim},) が必要。実際: {b.shape}")
    return b


def _has_material(element) -> bool:
    return element.has_field(FieldName.YOUNGS_MODULUS) and element.has_field(
        FieldName.POISSONS_RATIO
    )


def _scalar_field(element, name: FieldName, ip, time) -> float:
    v = np.asarray(element.field_value(name, ip, time), dtype=float)
    if v.size != 1:
        raise DimensionMismatchError(f"'{name.value}' はスカラーが必要。実際: {v.shape}")
    return float(v.reshape(()))


def _material(problem, element, ip, time, check_material: bool) -> SaintVenantKirchhoff:
    """積分点での材料（問題種別の λ 補正込み）."""
    young = _scalar_field(element, FieldName.YOUNGS_MODULUS, ip, time)
    poisson = _scalar_field(element, FieldName.POISSONS_RATIO, ip, time)
    return SaintVenantKirchhoff(
        young, poisson, problem.variant, problem.dim, check=check_material
    )


# ====================================================================
# 公開 API: 積分点レベル
# ====================================================================


def evaluate_residual(
    problem: Problem,
    element: FieldAccessorProtocol,
    ip: IntegrationPoint,
    time: float,
    mode: EvaluationMode = VALUE,
    *,
    check_material: bool = True,
) -> ResidualResult:
    """積分点 1 点の残差と運動学・応力量を計算する（副作用なし）.

    Args:
        problem: 弾性問題（次元と問題種別）
        element: FieldAccessorProtocol に適合する要素
        ip: 積分点
        time: 時刻
        mode: 評価モード（VALUE または Variation(direction)）
        check_material: True なら不正な材料パラメータで MaterialParameterError

    Returns:
        ResidualResult: (residual, F, E, S, cauchy_stress, J)
    """
    dim = problem.dim
    nnodes = int(element.nnodes)
    N = _basis_values(element, ip, time, nnodes)

    r = np.zeros((dim, nnodes), dtype=float)
    F = E = S = sigma = J = None

    # 内力
    if _has_material(element):
        dN = _basis_gradients(element, ip, time, dim, nnodes)
        grad_u = _displacement_gradient(element, ip, time, mode, dN, dim)
        F, E = compute_deformation(grad_u)
        material: ConstitutiveProtocol = _material(problem, element, ip, time, check_material)
        S = material.stress(E)
        sigma, J = cauchy_stress(F, S)
        r += F @ S @ dN

    # 外力: 物体力
    if element.has_field(FieldName.DISPLACEMENT_LOAD):
        b = _load_vector(element, FieldName.DISPLACEMENT_LOAD, ip, time, dim)
        r -= np.outer(b, N)

    # 外力: 表面力
    if element.has_field(FieldName.DISPLACEMENT_TRACTION_FORCE):
        t = _load_vector(element, FieldName.DISPLACEMENT_TRACTION_FORCE, ip, time, dim)
        r -= np.outer(t, N)

    # (dim, nnodes) を列優先で平坦化 → 節点順
    return ResidualResult(
        residual=r.ravel(order="F"),
        F=F,
        E=E,
        S=S,
        cauchy_stress=sigma,
        J=J,
    )


def residual(
    problem: Problem,
    element: FieldAccessorProtocol,
    ip: IntegrationPoint,
    time: float,
    mode: EvaluationMode = VALUE,
    *,
    check_material: bool = True,
    store_strain: bool = True,
) -> np.ndarray:
    """積分点 1 点の残差ベクトル (dim * nnodes,) を返す.

    内力項が有効で store_strain=True の場合、GL ひずみを
    ``ip.state["gl strain"]`` に上書き保存する。
    """
    result = evaluate_residual(problem, element, ip, time, mode, check_material=check_material)
    if store_strain and result.E is not None:
        ip.set_state(GL_STRAIN, result.E)
    return result.residual


def residual_tangent(
    problem: Problem,
    element: FieldAccessorProtocol,
    ip: IntegrationPoint,
    time: float,
    mode: EvaluationMode = VALUE,
    *,
    check_material: bool = True,
) -> np.ndarray:
    """残差の変位に関する接線 ∂r/∂u (dim*nnodes, dim*nnodes).

    G = F ∇N として（添字 i,j: 成分、A,B: 節点）:

      K[iA, jB] = λ G_iA G_jB + μ G_iB G_jA
                + μ (F Fᵀ)_ij (∇Nᵀ∇N)_AB      （材料剛性）
                + δ_ij (∇Nᵀ S ∇N)_AB           （幾何剛性）

    外力は死荷重として扱うため寄与しない。内力項が無効ならゼロ行列。
    """
    dim = problem.dim
    nnodes = int(element.nnodes)
    ndof = dim * nnodes
    if not _has_material(element):
        return np.zeros((ndof, ndof), dtype=float)

    dN = _basis_gradients(element, ip, time, dim, nnodes)
    grad_u = _displacement_gradient(element, ip, time, mode, dN, dim)
    F, E = compute_deformation(grad_u)
    material = _material(problem, element, ip, time, check_material)
    lam, mu = material.lame
    S = material.stress(E)

    G = F @ dN  # (dim, nnodes)
    K4 = lam * np.einsum("iA,jB->AiBj", G, G)
    K4 += mu * np.einsum("iB,jA->AiBj", G, G)
    K4 += mu * np.einsum("ij,AB->AiBj", F @ F.T, dN.T @ dN)
    K4 += np.einsum("ij,AB->AiBj", np.eye(dim), dN.T @ S @ dN)
    return K4.reshape(ndof, ndof)


# ====================================================================
# 公開 API: 要素レベル積分
# ====================================================================


def element_residual_vector(
    problem: Problem,
    element,
    time: float,
    mode: EvaluationMode = VALUE,
    *,
    check_material: bool = True,
    store_strain: bool = True,
) -> np.ndarray:
    """要素残差 Σ_ip w |J| r(ip) を返す.

    element は FieldAccessorProtocol に加えて integration_points() を持つこと。
    """
    ndof = problem.dim * int(element.nnodes)
    R = np.zeros(ndof, dtype=float)
    for ip in element.integration_points():
        r = residual(
            problem,
            element,
            ip,
            time,
            mode,
            check_material=check_material,
            store_strain=store_strain,
        )
        R += ip.weight * element.determinant(ip, time) * r
    return R


def element_tangent_matrix(
    problem: Problem,
    element,
    time: float,
    mode: EvaluationMode = VALUE,
    *,
    check_material: bool = True,
) -> np.ndarray:
    """要素接線剛性 Σ_ip w |J| ∂r/∂u を返す."""
    ndof = problem.dim * int(element.nnodes)
    K = np.zeros((ndof, ndof), dtype=float)
    for ip in element.integration_points():
        Kp = residual_tangent(problem, element, ip, time, mode, check_material=check_material)
        K += ip.weight * element.determinant(ip, time) * Kp
    return K


def element_residuals(
    problem: Problem,
    time: float,
    *,
    check_material: bool = True,
    store_strain: bool = True,
    show_progress: bool = False,
) -> list[np.ndarray]:
    """問題の全要素について要素残差を計算する（全体への足し込みは行わない）.

    Returns:
        problem.elements と同順の要素残差ベクトルのリスト
    """
    t0 = _time.time()
    out: list[np.ndarray] = []
    n_ip = 0
    for element in problem.elements:
        out.append(
            element_residual_vector(
                problem,
                element,
                time,
                check_material=check_material,
                store_strain=store_strain,
            )
        )
        n_ip += len(element.integration_points())
    elapsed = _time.time() - t0
    if show_progress:
        norm = float(np.sqrt(sum(float(v @ v) for v in out)))
        print(
            f"[residual] variant={problem.variant.value}, dim={problem.dim}, "
            f"n_elem={len(out)}, n_ip={n_ip}, ||r||={norm:.3e}, elapsed={elapsed:.3f} s"
        )
    return out
