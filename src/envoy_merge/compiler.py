"""ServiceFragment をベース Envoy 設定へマージする"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from .exceptions import EnvoyMergeError, EnvoyMergeErrorCodes
from .models import Cluster, EnvoyConfig, Route, ServiceFragment

# listeners[0].filter_chains[0].filters[0].typed_config.route_config.virtual_hosts[0]
_VIRTUAL_HOST_PATH: tuple[str | int, ...] = (
    "static_resources",
    "listeners",
    0,
    "filter_chains",
    0,
    "filters",
    0,
    "typed_config",
    "route_config",
    "virtual_hosts",
    0,
)


def resolve_route_list(config: EnvoyConfig) -> list[Route] | None:
    """最初のリスナーの最初の仮想ホストが持つルートリストを返す。

    途中の階層が欠けている、空である、または型が合わない場合は None を返す。
    返り値は設定内のリストそのもので、追記すると設定に反映される。
    """
    node: Any = config
    for step in _VIRTUAL_HOST_PATH:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return None
        elif not isinstance(node, Mapping) or step not in node:
            return None
        node = node[step]
    if not isinstance(node, Mapping):
        return None
    routes = node.get("routes")
    if not isinstance(routes, list):
        return None
    return routes


class Compiler:
    """ベース Envoy 設定に ServiceFragment を順にマージするクラス。

    ベース設定はコンストラクタでディープコピーし、以後はそのコピーだけを
    変更する。呼び出し側が持つ辞書は変更されない。
    """

    def __init__(
        self,
        config_base: EnvoyConfig | None,
        service_configs: Sequence[ServiceFragment],
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._store: EnvoyConfig | None = (
            copy.deepcopy(config_base) if config_base is not None else None
        )
        self._service_configs = list(service_configs)
        self._logger = logger or structlog.stdlib.get_logger(__name__)

    @property
    def store(self) -> EnvoyConfig | None:
        """マージ中（またはマージ済み）の設定。"""
        return self._store

    def build(self) -> EnvoyConfig | None:
        """全 ServiceFragment を入力順にマージして結果を返す。

        Returns:
            マージ済み設定。ベース設定がない場合は None

        Raises:
            EnvoyMergeError: ベース設定またはフラグメントの構造が不正な場合
        """
        if self._store is None:
            return None
        # 途中で失敗しても store にはマージ前の内容が残る
        working = copy.deepcopy(self._store)
        for index, service in enumerate(self._service_configs):
            self._merge_fragment(working, service, index)
        self._store = working
        return self._store

    def _merge_fragment(
        self, config: EnvoyConfig, service: ServiceFragment, index: int
    ) -> None:
        if not isinstance(service, ServiceFragment):
            raise EnvoyMergeError(
                code=EnvoyMergeErrorCodes.INVALID_FRAGMENT,
                message=f"fragment #{index} is not a ServiceFragment: {service!r}",
            )
        _check_entries(service.clusters, "clusters", index)
        _check_entries(service.routes, "routes", index)
        self._merge_clusters(config, service.clusters, index)
        self._merge_routes(config, service.routes, index)

    def _cluster_list(self, config: EnvoyConfig) -> list[Cluster]:
        static_resources = config.get("static_resources")
        if not isinstance(static_resources, dict):
            raise EnvoyMergeError(
                code=EnvoyMergeErrorCodes.INVALID_BASE,
                message="base envoy config has no static_resources mapping",
            )
        clusters = static_resources.get("clusters")
        if clusters is None:
            clusters = static_resources["clusters"] = []
        elif not isinstance(clusters, list):
            raise EnvoyMergeError(
                code=EnvoyMergeErrorCodes.INVALID_BASE,
                message="static_resources.clusters must be a list",
            )
        return clusters

    def _merge_clusters(
        self, config: EnvoyConfig, new_clusters: Sequence[Cluster], index: int
    ) -> None:
        """同名クラスターは同じ位置で置換し、新しい名前は末尾へ追加する。"""
        clusters = self._cluster_list(config)
        for new_cluster in new_clusters:
            name = new_cluster.get("name")
            position = _find_cluster(clusters, name)
            if position is None:
                clusters.append(new_cluster)
                self._logger.debug("compiler.cluster_added", cluster=name)
            else:
                clusters[position] = new_cluster
                self._logger.info("compiler.cluster_replaced", cluster=name)

    def _merge_routes(
        self, config: EnvoyConfig, new_routes: Sequence[Route], index: int
    ) -> None:
        """ルートを仮想ホストのルートリスト末尾へ追加する。"""
        routes = resolve_route_list(config)
        if routes is None:
            if new_routes:
                self._logger.warning(
                    "compiler.routes_skipped", fragment=index, routes=len(new_routes)
                )
            return
        routes.extend(new_routes)


def _find_cluster(clusters: list[Cluster], name: Any) -> int | None:
    # 名前を持たないクラスターは既存エントリと一致させない
    if name is None:
        return None
    for position, cluster in enumerate(clusters):
        if isinstance(cluster, Mapping) and cluster.get("name") == name:
            return position
    return None


def _check_entries(entries: Any, key: str, index: int) -> None:
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.INVALID_FRAGMENT,
            message=f"fragment #{index} has malformed {key}",
        )
