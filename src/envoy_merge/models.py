"""envoy-merge データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Envoy 設定はスキーマを固定せず汎用の辞書ツリーとして扱う。
Route = dict[str, Any]
Cluster = dict[str, Any]
EnvoyConfig = dict[str, Any]


@dataclass
class DirContents:
    """ディレクトリ直下のエントリ一覧。"""

    files: list[str] = field(default_factory=list)
    folders: list[str] = field(default_factory=list)


@dataclass
class ServiceFragment:
    """1 サービス分のルートとクラスター定義。"""

    routes: list[Route] = field(default_factory=list)
    clusters: list[Cluster] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.routes and not self.clusters


@dataclass
class ExecutionResponse:
    """ホストへ返す実行結果。"""

    result: str


class MergeOptions(BaseModel):
    """マージ実行オプション。

    ホストから渡されるキー名（``folder-name``, ``root-path``）と
    Python 側のフィールド名のどちらでも指定できる。
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: Literal["merge"] = "merge"
    base: str = ""
    output: str = ""
    items: list[str] = Field(default_factory=list)
    folder_name: str = Field(default="envoy", alias="folder-name", min_length=1)
    root_path: str = Field(default="", alias="root-path")

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        if self.root_path and not path.is_absolute():
            return Path(self.root_path) / path
        return path

    @property
    def base_path(self) -> Path:
        """root_path を考慮したベース設定パス。"""
        return self._resolve(self.base)

    @property
    def output_path(self) -> Path | None:
        """root_path を考慮した出力先パス。未指定なら None。"""
        if not self.output:
            return None
        return self._resolve(self.output)

    @property
    def item_paths(self) -> list[Path]:
        """root_path を考慮したサービスディレクトリ一覧。"""
        return [self._resolve(item) for item in self.items]
