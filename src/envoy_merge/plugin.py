"""ホストから呼び出されるマージプラグイン"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog

from .compiler import Compiler
from .discovery import ConfigDiscovery
from .exceptions import EnvoyMergeError, EnvoyMergeErrorCodes
from .loader import parse_options
from .models import EnvoyConfig, ExecutionResponse, MergeOptions
from .yaml_tools import write_yaml


def run_merge(
    options: MergeOptions, logger: structlog.stdlib.BoundLogger | None = None
) -> EnvoyConfig:
    """ベース設定の読み込みからマージ、出力ファイルの書き込みまでを実行する。

    出力はマージが完了してから一度だけ書き込む。

    Raises:
        ConfigNotFoundError: ベース設定が読み込めない場合
        EnvoyMergeError: マージまたは書き込みに失敗した場合
    """
    log = logger or structlog.stdlib.get_logger(__name__)
    discovery = ConfigDiscovery(
        options.item_paths,
        options.base_path,
        options.folder_name,
        logger=log,
    )
    base_config = discovery.collect_base()
    services = discovery.collect()

    compiled = Compiler(base_config, services, logger=log).build()
    if compiled is None:
        raise EnvoyMergeError(
            code=EnvoyMergeErrorCodes.COMPILE_FAILED,
            message="envoy proxy configuration compilation failed",
        )

    output_path = options.output_path
    if output_path is not None:
        write_yaml(compiled, output_path)
    log.info(
        "plugin.merge_done",
        services=len(services),
        output=str(output_path) if output_path else None,
    )
    return compiled


class EnvoyProxyPlugin:
    """Envoy 設定マージプラグイン。

    execute() は例外を送出しない。失敗時は ``"Error: ..."`` を結果として返す。
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.stdlib.get_logger(__name__)

    def execute(self, options: Mapping[str, Any] | None) -> ExecutionResponse:
        """オプションを解釈してマージを実行する。

        Args:
            options: ホストから渡されたオプション辞書
                （base, output, items, folder-name, root-path, action）

        Returns:
            成功時はマージ済み設定の JSON、失敗時はエラーメッセージ
        """
        try:
            merge_options = parse_options(options)
            compiled = run_merge(merge_options, self._logger)
            return ExecutionResponse(result=json.dumps(compiled, default=str))
        except EnvoyMergeError as e:
            self._logger.error("plugin.merge_failed", code=e.code, error=str(e))
            return ExecutionResponse(result=f"Error: {e}")
        except Exception as e:
            self._logger.exception("plugin.merge_failed", error=str(e))
            return ExecutionResponse(result=f"Error: {e}")
