"""スコープ宣言の評価"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NamedTuple

from .invocation import check_condition, generate_fields, resolve_constraint
from .models import Effect, FieldMap, ScopeDeclaration
from .permission import Permission, match_field

UNNAMED_CONDITION = "unnamedCondition"


class Decision(NamedTuple):
    """スコープ評価の結果。terminate が True ならアクションの評価を打ち切る。"""

    granted: bool
    terminate: bool


class ScopeTest(NamedTuple):
    success: bool
    fields: FieldMap
    path: str


def decision_path(
    prefix: str,
    matched_field: str | None,
    field_test: bool,
    condition_name: str,
) -> str:
    """判定パス ``{prefix}:{field}:{condition}`` を組み立てる。

    フィールド判定に失敗した場合、条件は評価されないため条件名は空になる。
    """
    name = condition_name if field_test else ""
    return f"{prefix}:{matched_field or ''}:{name}"


async def run_scope_test(
    scope: ScopeDeclaration,
    prefix: str,
    field: str | None,
    context: Any,
    unnamed_condition: str = UNNAMED_CONDITION,
) -> ScopeTest:
    """フィールド判定と条件判定を行い、成否・フィールドマップ・判定パスを返す。"""
    fields = await generate_fields(scope.field_generator, context)
    if field:
        matched_field, field_test = match_field(field, fields)
    else:
        matched_field, field_test = None, True
    condition_test = field_test and await check_condition(scope.condition, context)
    path = decision_path(
        prefix,
        matched_field,
        field_test,
        scope.condition.name or unnamed_condition,
    )
    return ScopeTest(success=bool(field_test and condition_test), fields=fields, path=path)


async def evaluate_scope(
    scope: ScopeDeclaration,
    prefix: str,
    field: str | None,
    context: Any,
    permission: Permission,
    unnamed_condition: str = UNNAMED_CONDITION,
) -> Decision:
    """1 つのスコープ宣言を評価し、結果を permission に反映する。

    - grant 成功: 許可を記録して終了
    - grant 失敗: 拒否を記録して次のスコープへ
    - deny 成功: 拒否を記録して終了（後続の grant を遮断する）
    - deny 失敗: 何も記録せず次のスコープへ
    """
    result = await run_scope_test(scope, prefix, field, context, unnamed_condition)
    if scope.effect == Effect.GRANT:
        if result.success:
            constraint = await resolve_constraint(scope.constraint, context)
            permission.grant(result.path, result.fields, constraint)
            return Decision(granted=True, terminate=True)
        permission.deny(result.path, result.fields)
        return Decision(granted=False, terminate=False)

    if result.success:
        permission.deny(result.path, result.fields)
        return Decision(granted=False, terminate=True)
    return Decision(granted=False, terminate=False)


async def evaluate_action(
    scopes: Sequence[ScopeDeclaration],
    action_path: str,
    field: str | None,
    context: Any,
    permission: Permission,
    unnamed_condition: str = UNNAMED_CONDITION,
) -> Decision:
    """アクションに宣言されたスコープを宣言順に評価する。最初に終了した結果を返す。"""
    for index, scope in enumerate(scopes):
        prefix = f"{scope.effect}:{action_path}:{index}"
        decision = await evaluate_scope(
            scope, prefix, field, context, permission, unnamed_condition
        )
        if decision.terminate:
            return decision
    return Decision(granted=False, terminate=False)
