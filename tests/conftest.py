"""テスト共通フィクスチャ"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml


def _base_config(
    routes: list[dict[str, Any]] | None = None,
    clusters: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "static_resources": {
            "listeners": [
                {
                    "name": "listener_0",
                    "filter_chains": [
                        {
                            "filters": [
                                {
                                    "name": "envoy.filters.network.http_connection_manager",
                                    "typed_config": {
                                        "stat_prefix": "ingress_http",
                                        "route_config": {
                                            "name": "local_route",
                                            "virtual_hosts": [
                                                {
                                                    "name": "backend",
                                                    "domains": ["*"],
                                                    "routes": list(routes or []),
                                                }
                                            ],
                                        },
                                    },
                                }
                            ]
                        }
                    ],
                }
            ],
            "clusters": list(clusters or []),
        }
    }


@pytest.fixture
def make_base() -> Callable[..., dict[str, Any]]:
    """仮想ホストを 1 つ持つベース設定を作るファクトリ。"""
    return _base_config


@pytest.fixture
def make_service(tmp_path: Path) -> Callable[..., Path]:
    """サービスディレクトリを作るファクトリ。

    routes/clusters にはファイル名 -> YAML 本文（文字列）または
    シリアライズするオブジェクトを渡す。
    """

    def _make(
        name: str,
        routes: dict[str, Any] | None = None,
        clusters: dict[str, Any] | None = None,
        folder_name: str = "envoy",
    ) -> Path:
        service = tmp_path / name
        config = service / folder_name
        for sub, files in (("routes", routes), ("clusters", clusters)):
            folder = config / sub
            folder.mkdir(parents=True, exist_ok=True)
            for file_name, body in (files or {}).items():
                text = body if isinstance(body, str) else yaml.safe_dump(body)
                (folder / file_name).write_text(text, encoding="utf-8")
        return service

    return _make


@pytest.fixture
def base_file(tmp_path: Path, make_base: Callable[..., dict[str, Any]]) -> Path:
    """ベース設定ファイル。"""
    path = tmp_path / "envoy-base.yaml"
    path.write_text(
        yaml.safe_dump(
            make_base(
                routes=[{"match": {"prefix": "/health"}}],
                clusters=[{"name": "existing_cluster", "type": "STRICT_DNS"}],
            ),
            sort_keys=False,
        ),
        encoding="utf-8",
    )
    return path
