"""ファイルシステム操作ユーティリティ"""

from __future__ import annotations

import os

import structlog

from .models import DirContents

logger = structlog.stdlib.get_logger(__name__)


def list_dir_contents(dir_path: str | os.PathLike[str]) -> DirContents | None:
    """ディレクトリ直下をファイルとフォルダに分けて返す。

    シンボリックリンクはリンク先の種別で分類する。リンク切れなど
    どちらにも当たらないエントリは無視する。

    Args:
        dir_path: 対象ディレクトリ

    Returns:
        DirContents。読み取りに失敗した場合は None（例外は送出しない）
    """
    try:
        names = os.listdir(dir_path)
        contents = DirContents()
        for name in names:
            full_path = os.path.join(dir_path, name)
            if os.path.isfile(full_path):
                contents.files.append(name)
            elif os.path.isdir(full_path):
                contents.folders.append(name)
        return contents
    except OSError as e:
        logger.debug("fs.list_failed", path=str(dir_path), error=str(e))
        return None
