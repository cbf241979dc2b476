"""エンジン設定（pydantic BaseModel）と YAML 読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import AuthzError, AuthzErrorCodes


class EngineSection(BaseModel):
    """判定エンジン設定。"""

    unnamed_condition_name: str = Field(default="unnamedCondition", min_length=1)
    max_inheritance_depth: int = Field(default=64, ge=1)
    log_decisions: bool = True


class AuthzConfig(BaseModel):
    """authz 設定全体。"""

    authz: EngineSection = Field(default_factory=EngineSection)


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise AuthzError(
            code=AuthzErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise AuthzError(
            code=AuthzErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    return data


def load_config(path: Path) -> AuthzConfig:
    """設定ファイルを読み込んで AuthzConfig を返す。"""
    data = _read_yaml(path)
    try:
        return AuthzConfig.model_validate(data)
    except ValidationError as e:
        raise AuthzError(
            code=AuthzErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
