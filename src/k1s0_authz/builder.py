"""ポリシーストアを組み立てるビルダー"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable
from typing import Any

from .exceptions import AuthzError, AuthzErrorCodes
from .models import (
    ALL,
    SCOPE_SEPARATOR,
    Condition,
    ConstraintGenerator,
    Effect,
    FieldGenerator,
    FieldMap,
    PolicyStore,
    ResourceDefinition,
    RoleDefinition,
    ScopeDeclaration,
)

_FIELD_SPEC_RE = re.compile(r"^(!?)([^!:\s]+)$")


def condition(name: str) -> Callable[[Callable[[Any], Any]], Condition]:
    """関数を名前付き Condition に変換するデコレーター。

    例::

        @condition("userIsOwner")
        def user_is_owner(ctx):
            return ctx["resource"]["owner_id"] == ctx["user"]["id"]
    """

    def decorator(func: Callable[[Any], Any]) -> Condition:
        return Condition(name=name, func=func)

    return decorator


def parse_field_specs(*specs: str) -> FieldMap:
    """``"name"`` / ``"!name"`` / ``"*"`` 形式の指定をフィールドマップに変換する。"""
    fields: FieldMap = {}
    for spec in specs:
        match = _FIELD_SPEC_RE.match(spec) if isinstance(spec, str) else None
        if match is None:
            raise AuthzError(
                code=AuthzErrorCodes.INVALID_FIELD_NAME,
                message=f"Invalid field name: {spec!r}",
            )
        fields[match.group(2)] = match.group(1) != "!"
    return fields


def _ensure_condition(value: Any) -> Condition:
    if not isinstance(value, Condition):
        raise AuthzError(
            code=AuthzErrorCodes.INVALID_CONDITION,
            message=f"Condition must be a named Condition, got {type(value).__name__}",
        )
    return value


def _combine(operator: str, conditions: list[Condition]) -> Condition:
    names = ",".join(c.name or "unknownCondition" for c in conditions)
    check_all = operator == "and"

    async def combined(context: Any) -> bool:
        for c in conditions:
            result = c.func(context)
            if inspect.isawaitable(result):
                result = await result
            if bool(result) != check_all:
                return not check_all
        return check_all

    return Condition(name=f"{operator}({names})", func=combined)


class PolicyBuilder:
    """ポリシーストアへの宣言を連鎖呼び出しで追加するビルダー。

    ロール・リソース・アクションの現在位置（カーソル）を保持し、
    すべてのメソッドは同じビルダーを返す。
    """

    def __init__(
        self,
        roles: PolicyStore,
        role_name: str | None = None,
        effect: Effect = Effect.GRANT,
    ) -> None:
        self.roles = roles
        self.effect = effect
        self.role_name: str | None = None
        self.resource_name: str | None = None
        self.action_name: str | None = None
        self.scope_index: int | None = None
        if role_name is not None:
            self._select_role(role_name, effect)

    def _select_role(self, role_name: str, effect: Effect) -> None:
        self.roles.setdefault(role_name, RoleDefinition())
        self.role_name = role_name
        self.effect = effect
        self.resource_name = None
        self.action_name = None
        self.scope_index = None

    @property
    def _role(self) -> RoleDefinition:
        if self.role_name is None:
            raise AuthzError(
                code=AuthzErrorCodes.BUILDER_STATE_ERROR,
                message="No role selected; call grant() or deny() first",
            )
        return self.roles[self.role_name]

    @property
    def _resource(self) -> ResourceDefinition:
        if self.resource_name is None:
            raise AuthzError(
                code=AuthzErrorCodes.BUILDER_STATE_ERROR,
                message="No resource selected; call resource() or scope() first",
            )
        return self._role.resources[self.resource_name]

    @property
    def _scope(self) -> ScopeDeclaration:
        if self.action_name is None or self.scope_index is None:
            raise AuthzError(
                code=AuthzErrorCodes.BUILDER_STATE_ERROR,
                message="No action selected; call action() or scope() first",
            )
        return self._resource[self.action_name][self.scope_index]

    # ロール

    def grant(self, role_name: str) -> PolicyBuilder:
        """許可を宣言するロールへカーソルを移す。"""
        self._select_role(role_name, Effect.GRANT)
        return self

    def deny(self, role_name: str) -> PolicyBuilder:
        """拒否を宣言するロールへカーソルを移す。"""
        self._select_role(role_name, Effect.DENY)
        return self

    def inherits(self, role_name: str) -> PolicyBuilder:
        """継承元ロールを追加する。同じロールは 1 度だけ登録される。"""
        self._role.add_parent(role_name)
        return self

    # リソース・アクション

    def resource(self, resource_name: str) -> PolicyBuilder:
        """リソースを追加し、カーソルをそこへ移す。"""
        self._role.resources.setdefault(resource_name, {})
        self.resource_name = resource_name
        self.action_name = None
        self.scope_index = None
        return self

    def action(self, action_name: str) -> PolicyBuilder:
        """アクションに新しいスコープ宣言を追加し、カーソルをそこへ移す。"""
        scopes = self._resource.setdefault(action_name, [])
        scopes.append(ScopeDeclaration(effect=self.effect, condition=ALL))
        self.action_name = action_name
        self.scope_index = len(scopes) - 1
        return self

    def scope(self, scope: str) -> PolicyBuilder:
        """``resource(r).action(a)`` の省略形。3 つ目以降の要素は無視する。"""
        parts = scope.split(SCOPE_SEPARATOR)
        resource_name = parts[0]
        action_name = parts[1] if len(parts) > 1 else ""
        if not resource_name or not action_name:
            raise AuthzError(
                code=AuthzErrorCodes.INVALID_SCOPE,
                message=f"Scope must be 'resource:action': {scope!r}",
            )
        return self.resource(resource_name).action(action_name)

    @property
    def create(self) -> PolicyBuilder:
        return self.action("create")

    @property
    def read(self) -> PolicyBuilder:
        return self.action("read")

    @property
    def update(self) -> PolicyBuilder:
        return self.action("update")

    @property
    def delete(self) -> PolicyBuilder:
        return self.action("delete")

    # スコープ宣言

    @property
    def condition(self) -> Condition:
        return self._scope.condition

    def where(self, *conditions: Condition) -> PolicyBuilder:
        """条件を設定する。複数渡した場合は and_ と同じ。"""
        if len(conditions) == 1:
            self._scope.condition = _ensure_condition(conditions[0])
            return self
        return self.and_(*conditions)

    def and_(self, *conditions: Condition) -> PolicyBuilder:
        """現在の条件とすべてを満たす条件に置き換える。"""
        self._scope.condition = self._merge("and", conditions)
        return self

    def or_(self, *conditions: Condition) -> PolicyBuilder:
        """現在の条件といずれかを満たす条件に置き換える。"""
        self._scope.condition = self._merge("or", conditions)
        return self

    def _merge(self, operator: str, conditions: tuple[Condition, ...]) -> Condition:
        members = [_ensure_condition(c) for c in conditions]
        current = self._scope.condition
        if current is not ALL:
            members.insert(0, current)
        return _combine(operator, members)

    def on_fields(self, *specs: str) -> PolicyBuilder:
        """静的なフィールドマップを設定する。例: ``on_fields("*", "!secret")``"""
        fields = parse_field_specs(*specs)
        self._scope.field_generator = FieldGenerator(
            name=f"fields({','.join(specs)})",
            func=lambda context: dict(fields),
        )
        return self

    def on_dynamic_fields(self, generator: FieldGenerator) -> PolicyBuilder:
        """コンテキストからフィールドマップを生成する関数を設定する。"""
        if not isinstance(generator, FieldGenerator):
            raise AuthzError(
                code=AuthzErrorCodes.INVALID_FIELD_GENERATOR,
                message=f"Field generator must be a FieldGenerator, got {type(generator).__name__}",
            )
        self._scope.field_generator = generator
        return self

    def with_constraint(self, constraint: ConstraintGenerator | Any) -> PolicyBuilder:
        """許可時に返す制約（静的な値または生成関数）を設定する。

        関数は ConstraintGenerator で名前を付けて渡す。
        """
        if callable(constraint) and not isinstance(constraint, ConstraintGenerator):
            raise AuthzError(
                code=AuthzErrorCodes.INVALID_CONSTRAINT,
                message=f"Constraint function must be a ConstraintGenerator, got {type(constraint).__name__}",
            )
        self._scope.constraint = constraint
        return self
