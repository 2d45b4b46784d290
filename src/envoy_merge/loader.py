"""マージオプションの読み込み"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import EnvoyMergeError, EnvoyMergeErrorCodes
from .models import MergeOptions


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.READ_FILE,
            message=f"Failed to read options file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.PARSE_YAML,
            message=f"Options file must contain a mapping: {path}",
        )
    return data


def parse_options(options: Mapping[str, Any] | None) -> MergeOptions:
    """ホストから渡されたオプション辞書を MergeOptions に変換する。

    Raises:
        EnvoyMergeError: バリデーションに失敗した場合
    """
    try:
        return MergeOptions.model_validate(dict(options or {}))
    except ValidationError as e:
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.VALIDATION,
            message=f"Invalid merge options: {e}",
            cause=e,
        ) from e


def load_options(
    path: Path | None = None, overrides: Mapping[str, Any] | None = None
) -> MergeOptions:
    """オプションファイルを読み込み、overrides をマージして MergeOptions を返す。

    path: オプションファイル（省略可）。ホストと同じキー名で記述する。
    overrides: 上書きする値。None の値は無視する。
    """
    data: dict[str, Any] = _read_yaml(path) if path is not None else {}
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        # エイリアス表記とフィールド名表記が混在しても後勝ちになるよう揃える
        data.pop(key.replace("_", "-"), None)
        data.pop(key.replace("-", "_"), None)
        data[key] = value
    return parse_options(data)
