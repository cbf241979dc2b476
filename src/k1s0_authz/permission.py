"""認可判定結果"""

from __future__ import annotations

from typing import Any

from .exceptions import AuthzError, AuthzErrorCodes
from .models import WILDCARD, Denial, FieldMap


def match_field(field: str, fields: FieldMap) -> tuple[str, bool]:
    """フィールドマップに対してフィールドを照合する。

    完全一致のキーが優先され、無ければ ``*`` が適用される。
    どちらも無い場合は許可されない。

    Returns:
        (一致したキー, 許可されているか)
    """
    if field in fields:
        return field, fields[field]
    if WILDCARD in fields:
        return WILDCARD, fields[WILDCARD]
    return "", False


class Permission:
    """1 回の can 呼び出しの判定結果。"""

    def __init__(self) -> None:
        self._granted: str | None = None
        self._denied: list[Denial] | None = None
        self._fields: FieldMap | None = None
        self._constraint: Any = None

    @property
    def granted(self) -> str | None:
        return self._granted

    @property
    def denied(self) -> list[Denial] | None:
        """拒否記録。None は許可済み、空リストは一致スコープなしを表す。"""
        if self._denied is None:
            return None
        return list(self._denied)

    @property
    def fields(self) -> FieldMap:
        return dict(self._fields or {})

    @property
    def constraint(self) -> Any:
        return self._constraint

    def field(self, name: str) -> bool:
        """許可済みの場合に限り、フィールドが参照可能か判定する。"""
        if self._granted and self._fields:
            return match_field(name, self._fields)[1]
        return False

    def grant(
        self,
        request: str,
        fields: FieldMap | None = None,
        constraint: Any = None,
    ) -> None:
        """許可を記録する。2 回目の呼び出しはプログラミングエラー。"""
        if self._granted or not request:
            raise AuthzError(
                code=AuthzErrorCodes.GRANT_ALREADY_SET,
                message=f"Attempt to change permission grant: {request!r}",
            )
        self._granted = request
        self._fields = fields
        self._constraint = constraint

    def deny(self, request: str | None = None, explanation: FieldMap | None = None) -> None:
        """拒否を記録する。request なしの場合は一致スコープなしのみを示す。"""
        if self._denied is None:
            self._denied = []
        if request:
            self._denied.append(Denial(request=request, explanation=explanation))

    def __repr__(self) -> str:
        return (
            f"Permission(granted={self._granted!r}, denied={self._denied!r}, "
            f"constraint={self._constraint!r})"
        )
