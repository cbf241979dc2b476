"""認可ポリシーのデータモデル"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeAlias

WILDCARD = "*"
SCOPE_SEPARATOR = ":"

FieldMap: TypeAlias = dict[str, bool]


class Effect(StrEnum):
    """スコープ宣言の効果。"""

    GRANT = "grant"
    DENY = "deny"


@dataclass(frozen=True)
class Condition:
    """名前付き条件関数。

    func はコンテキストを受け取り bool（またはその awaitable）を返す。
    name は判定パスに埋め込まれるため、関数名からは推測しない。
    """

    name: str
    func: Callable[[Any], bool | Awaitable[bool]]


@dataclass(frozen=True)
class FieldGenerator:
    """コンテキストからフィールドマップを生成する名前付き関数。"""

    name: str
    func: Callable[[Any], FieldMap | Awaitable[FieldMap]]


@dataclass(frozen=True)
class ConstraintGenerator:
    """コンテキストから制約値を生成する名前付き関数。"""

    name: str
    func: Callable[[Any], Any]


def _always(context: Any) -> bool:
    return True


ALL = Condition(name="All", func=_always)


@dataclass
class ScopeDeclaration:
    """リソース・アクションに付与される grant / deny ルール。"""

    effect: Effect
    condition: Condition = ALL
    constraint: Any = None
    field_generator: FieldGenerator | None = None


ResourceDefinition: TypeAlias = dict[str, list[ScopeDeclaration]]


@dataclass
class RoleDefinition:
    """ロール定義。"""

    resources: dict[str, ResourceDefinition] = field(default_factory=dict)
    inherits: list[str] = field(default_factory=list)

    def add_parent(self, role_name: str) -> None:
        """継承元ロールを追加する（重複は無視）。"""
        if role_name not in self.inherits:
            self.inherits.append(role_name)


PolicyStore: TypeAlias = dict[str, RoleDefinition]


@dataclass(frozen=True)
class Denial:
    """拒否記録。request は判定パス。"""

    request: str
    explanation: FieldMap | None = None


@dataclass(frozen=True)
class ScopeRequest:
    """`resource:action[:field]` を分解したリクエスト。"""

    resource: str
    action: str
    field: str | None = None
