"""YAML 読み書きユーティリティ"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Any

import structlog
import yaml

from .exceptions import EnvoyMergeError, EnvoyMergeErrorCodes

logger = structlog.stdlib.get_logger(__name__)


def read_yaml(path: str | os.PathLike[str]) -> Any | None:
    """YAML ファイルを読み込んで汎用ツリーを返す。

    ファイルが存在しない、読めない、パースできない場合は例外を送出せず
    None を返す。空ファイルも None になる。
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
        return yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.debug("yaml.read_failed", path=str(path), error=str(e))
        return None


def dump_yaml(document: Any) -> str:
    """ドキュメントを YAML 文字列に変換する。

    インデントは 2、キー順は挿入順のまま。シーケンスは親キーに対して
    字下げしない。
    """
    return yaml.safe_dump(
        document,
        indent=2,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def _output_mode(target: Path) -> int:
    """既存ファイルがあればそのモード、なければ umask を適用した 0o666 を返す。"""
    try:
        return stat.S_IMODE(os.stat(target).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_yaml(document: Any, path: str | os.PathLike[str]) -> None:
    """ドキュメントを YAML ファイルへ書き出す。

    同じディレクトリの一時ファイルへ書いてから置き換えるため、
    失敗時に出力先が中途半端な内容になることはない。

    Raises:
        EnvoyMergeError: シリアライズまたは書き込みに失敗した場合
    """
    target = Path(path)
    try:
        text = dump_yaml(document)
    except yaml.YAMLError as e:
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.WRITE_FILE,
            message=f"Failed to serialize YAML for {target}",
            cause=e,
        ) from e

    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
        os.chmod(tmp_name, _output_mode(target))
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.WRITE_FILE,
            message=f"Failed to write YAML file: {target}",
            cause=e,
        ) from e
    logger.info("yaml.written", path=str(target))
