"""認可判定エンジン"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from .builder import PolicyBuilder
from .config import AuthzConfig
from .models import SCOPE_SEPARATOR, Effect, PolicyStore, ScopeRequest
from .permission import Permission
from .resolver import RoleResolver

logger = structlog.stdlib.get_logger(__name__)


def parse_scope(scope: str) -> ScopeRequest:
    """``resource:action[:field]`` を最大 3 つに分割する。

    欠けた resource・action は空文字列になり、ワイルドカード検索に回る。
    """
    parts = scope.split(SCOPE_SEPARATOR, 2)
    action = parts[1] if len(parts) > 1 else ""
    field = parts[2] if len(parts) == 3 and parts[2] else None
    return ScopeRequest(resource=parts[0], action=action, field=field)


class AccessControl:
    """ロール・リソース・アクションによる認可判定。

    例::

        ac = AccessControl()
        ac.grant("user").scope("post:read").on_fields("*", "!secret")
        permission = await ac.can("user", "post:read:title")
    """

    def __init__(
        self,
        roles: PolicyStore | None = None,
        config: AuthzConfig | None = None,
    ) -> None:
        self.roles: PolicyStore = roles if roles is not None else {}
        self._config = config or AuthzConfig()
        self._resolver = RoleResolver(
            self.roles,
            max_depth=self._config.authz.max_inheritance_depth,
            unnamed_condition=self._config.authz.unnamed_condition_name,
        )

    def grant(self, role_name: str) -> PolicyBuilder:
        """ロールに許可を宣言するビルダーを返す。"""
        return PolicyBuilder(self.roles, role_name, Effect.GRANT)

    def deny(self, role_name: str) -> PolicyBuilder:
        """ロールに拒否を宣言するビルダーを返す。"""
        return PolicyBuilder(self.roles, role_name, Effect.DENY)

    async def can(
        self,
        role_names: str | Sequence[str],
        scope: str,
        context: Any = None,
    ) -> Permission:
        """1 つ以上のロールがスコープを許可されるか判定する。

        ロールは指定順に評価し、許可が得られた時点で打ち切る。
        それまでに記録された拒否はすべて結果に残る。

        Args:
            role_names: ロール名、またはロール名の列
            scope: ``resource:action`` または ``resource:action:field``
            context: 条件・生成関数に渡す任意のコンテキスト

        Returns:
            判定結果
        """
        request = parse_scope(scope)
        names = [role_names] if isinstance(role_names, str) else list(role_names)
        permission = Permission()
        for role_name in names:
            await self._resolver.can_role(role_name, request, context, permission)
            if permission.granted:
                break

        if self._config.authz.log_decisions:
            denied = permission.denied
            logger.debug(
                "permission_resolved",
                roles=names,
                scope=scope,
                granted=permission.granted,
                denials=0 if denied is None else len(denied),
            )
        return permission
