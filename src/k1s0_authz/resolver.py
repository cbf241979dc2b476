"""ロール継承をたどる権限解決"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from .evaluator import UNNAMED_CONDITION, evaluate_action
from .exceptions import AuthzError, AuthzErrorCodes
from .models import WILDCARD, PolicyStore, ScopeRequest
from .permission import Permission

T = TypeVar("T")

DEFAULT_MAX_INHERITANCE_DEPTH = 64


def lookup_with_wildcard(key: str, mapping: Mapping[str, T]) -> tuple[str, T | None]:
    """キーで引き、キー自体が存在しない場合のみ ``*`` にフォールバックする。"""
    if key in mapping:
        return key, mapping[key]
    return WILDCARD, mapping.get(WILDCARD)


class RoleResolver:
    """1 つのロールについて、継承元を含めて権限を解決する。

    ポリシーストアは読み取り専用として扱い、クエリごとの状態は
    Permission と引数で受け渡す。
    """

    def __init__(
        self,
        roles: PolicyStore,
        max_depth: int = DEFAULT_MAX_INHERITANCE_DEPTH,
        unnamed_condition: str = UNNAMED_CONDITION,
    ) -> None:
        self._roles = roles
        self._max_depth = max_depth
        self._unnamed_condition = unnamed_condition

    async def can_role(
        self,
        role_name: str,
        request: ScopeRequest,
        context: Any,
        permission: Permission,
        chain: tuple[str, ...] = (),
    ) -> bool:
        """ロールがリクエストを許可されるか判定する。

        Args:
            role_name: 判定するロール名
            request: 分解済みのスコープリクエスト
            context: 条件・生成関数に渡すコンテキスト
            permission: クエリ全体で共有する判定結果
            chain: 解決中のロール名の列（循環検出用）

        Returns:
            許可された場合 True

        Raises:
            AuthzError: 継承が循環している、または深すぎる場合
        """
        tested_role, role = lookup_with_wildcard(role_name, self._roles)
        if role is None:
            return False

        if tested_role in chain:
            cycle = " -> ".join((*chain, tested_role))
            raise AuthzError(
                code=AuthzErrorCodes.INHERITANCE_CYCLE,
                message=f"Role inheritance cycle detected: {cycle}",
            )
        if len(chain) >= self._max_depth:
            raise AuthzError(
                code=AuthzErrorCodes.INHERITANCE_DEPTH_EXCEEDED,
                message=f"Role inheritance deeper than {self._max_depth}: {role_name}",
            )
        chain = (*chain, tested_role)

        tested_resource, resource = lookup_with_wildcard(request.resource, role.resources)
        if resource is not None:
            tested_action, scopes = lookup_with_wildcard(request.action, resource)
            if scopes is not None:
                action_path = f"{tested_role}:{tested_resource}:{tested_action}"
                decision = await evaluate_action(
                    scopes,
                    action_path,
                    request.field,
                    context,
                    permission,
                    self._unnamed_condition,
                )
                if decision.terminate:
                    return decision.granted

        for parent in role.inherits:
            if await self.can_role(parent, request, context, permission, chain):
                return True

        permission.deny()
        return False
