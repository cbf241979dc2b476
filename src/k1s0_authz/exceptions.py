"""authz ライブラリの例外型定義"""

from __future__ import annotations


class AuthzError(Exception):
    """authz ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class AuthzErrorCodes:
    """AuthzError のエラーコード定数。"""

    GRANT_ALREADY_SET: str = "GRANT_ALREADY_SET"
    INVALID_FIELD_NAME: str = "INVALID_FIELD_NAME"
    INVALID_CONDITION: str = "INVALID_CONDITION"
    INVALID_SCOPE: str = "INVALID_SCOPE"
    INVALID_FIELD_GENERATOR: str = "INVALID_FIELD_GENERATOR"
    INVALID_CONSTRAINT: str = "INVALID_CONSTRAINT"
    INHERITANCE_CYCLE: str = "INHERITANCE_CYCLE"
    INHERITANCE_DEPTH_EXCEEDED: str = "INHERITANCE_DEPTH_EXCEEDED"
    FIELD_GENERATOR_ERROR: str = "FIELD_GENERATOR_ERROR"
    CONSTRAINT_GENERATOR_ERROR: str = "CONSTRAINT_GENERATOR_ERROR"
    BUILDER_STATE_ERROR: str = "BUILDER_STATE_ERROR"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
