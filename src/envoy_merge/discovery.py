"""サービスディレクトリからルート/クラスター定義を収集する"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import structlog

from .exceptions import ConfigNotFoundError
from .fs_tools import list_dir_contents
from .models import DirContents, EnvoyConfig, ServiceFragment
from .yaml_tools import read_yaml

YAML_SUFFIXES = (".yaml", ".yml")
ROUTES_FOLDER = "routes"
CLUSTERS_FOLDER = "clusters"

ListDir = Callable[[Path], DirContents | None]
ReadYaml = Callable[[Path], Any | None]


class ConfigDiscovery:
    """サービスディレクトリを走査して ServiceFragment を収集するクラス。

    各サービスディレクトリ直下の ``folder_name`` フォルダを探し、その中の
    ``routes/`` と ``clusters/`` にある YAML ファイルを読み込む。
    読めないディレクトリや不正なファイルは、そのサービス/ファイル単位で
    読み飛ばす。
    """

    def __init__(
        self,
        folder_paths: Sequence[str | Path],
        base_config_path: str | Path,
        folder_name: str = "envoy",
        *,
        list_dir: ListDir = list_dir_contents,
        read_yaml: ReadYaml = read_yaml,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._folder_paths = [Path(p) for p in folder_paths]
        self._base_config_path = Path(base_config_path)
        self._folder_name = folder_name
        self._list_dir = list_dir
        self._read_yaml = read_yaml
        self._logger = logger or structlog.stdlib.get_logger(__name__)

    def collect(self) -> list[ServiceFragment]:
        """全サービスディレクトリを入力順に走査して ServiceFragment を返す。

        設定フォルダがない、または何も定義されていないサービスは結果に含めない。
        """
        fragments: list[ServiceFragment] = []
        for folder_path in self._folder_paths:
            fragment = self._find_service_fragment(folder_path)
            if fragment is not None:
                fragments.append(fragment)
        return fragments

    def collect_base(self) -> EnvoyConfig:
        """ベース設定を読み込む。

        Raises:
            ConfigNotFoundError: ファイルが存在しない、パースできない、
                空ファイル、またはマッピングでない場合（`{}` は有効なベース設定）
        """
        base = self._read_yaml(self._base_config_path)
        if base is None or not isinstance(base, dict):
            raise ConfigNotFoundError(str(self._base_config_path))
        return base

    def _find_service_fragment(self, folder_path: Path) -> ServiceFragment | None:
        contents = self._list_dir(folder_path)
        if contents is None:
            self._logger.warning(
                "discovery.service_skipped",
                service=str(folder_path),
                reason="unreadable",
            )
            return None
        if self._folder_name not in contents.folders:
            self._logger.debug(
                "discovery.service_skipped",
                service=str(folder_path),
                reason="no_config_folder",
                folder_name=self._folder_name,
            )
            return None

        config_path = folder_path / self._folder_name
        fragment = ServiceFragment(
            routes=self._collect_entries(config_path / ROUTES_FOLDER, "routes"),
            clusters=self._collect_entries(config_path / CLUSTERS_FOLDER, "clusters"),
        )
        if fragment.is_empty():
            self._logger.debug(
                "discovery.service_skipped",
                service=str(folder_path),
                reason="empty",
            )
            return None

        self._logger.info(
            "discovery.fragment_found",
            service=str(folder_path),
            routes=len(fragment.routes),
            clusters=len(fragment.clusters),
        )
        return fragment

    def _collect_entries(self, folder_path: Path, key: str) -> list[dict[str, Any]]:
        """フォルダ内の全 YAML ファイルから key のリストを連結して返す。

        ファイルの順序はディレクトリ列挙順のまま（ソートしない）。
        """
        entries: list[dict[str, Any]] = []
        contents = self._list_dir(folder_path)
        if contents is None:
            return entries
        for name in contents.files:
            if name.endswith(YAML_SUFFIXES):
                entries.extend(self._read_entries(folder_path / name, key))
        return entries

    def _read_entries(self, file_path: Path, key: str) -> list[dict[str, Any]]:
        document = self._read_yaml(file_path)
        if not isinstance(document, dict):
            self._logger.warning(
                "discovery.file_ignored", path=str(file_path), reason="not_a_mapping"
            )
            return []
        entries = document.get(key)
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            self._logger.warning(
                "discovery.file_ignored", path=str(file_path), reason=f"invalid_{key}"
            )
            return []
        return entries
