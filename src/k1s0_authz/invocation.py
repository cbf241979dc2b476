"""開発者定義の条件・生成関数の呼び出し"""

from __future__ import annotations

import inspect
from typing import Any

import structlog

from .exceptions import AuthzError, AuthzErrorCodes
from .models import Condition, ConstraintGenerator, FieldGenerator, FieldMap

logger = structlog.stdlib.get_logger(__name__)


async def _call(func: Any, context: Any) -> Any:
    result = func(context)
    if inspect.isawaitable(result):
        result = await result
    return result


async def check_condition(condition: Condition, context: Any) -> bool:
    """条件を評価する。例外は False として扱い、呼び出し元へ伝播させない。"""
    try:
        return bool(await _call(condition.func, context))
    except Exception as e:
        logger.warning("condition_failed", condition=condition.name, error=str(e))
        return False


async def generate_fields(generator: FieldGenerator | None, context: Any) -> FieldMap:
    """フィールドマップを生成する。生成関数が無い場合は空のマップ。"""
    if generator is None:
        return {}
    try:
        fields: FieldMap = await _call(generator.func, context)
    except Exception as e:
        raise AuthzError(
            code=AuthzErrorCodes.FIELD_GENERATOR_ERROR,
            message=f"Field generator {generator.name!r} failed: {e}",
            cause=e,
        ) from e
    return fields


async def resolve_constraint(constraint: Any, context: Any) -> Any:
    """制約を解決する。ConstraintGenerator なら呼び出し、それ以外は静的値。"""
    if not isinstance(constraint, ConstraintGenerator):
        return constraint
    try:
        return await _call(constraint.func, context)
    except Exception as e:
        raise AuthzError(
            code=AuthzErrorCodes.CONSTRAINT_GENERATOR_ERROR,
            message=f"Constraint generator {constraint.name!r} failed: {e}",
            cause=e,
        ) from e
